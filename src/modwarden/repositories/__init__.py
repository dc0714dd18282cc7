"""
Table-level repositories. Each takes an open aiosqlite connection and runs
plain SQL; transactions are owned by the caller.
"""
