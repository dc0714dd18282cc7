"""
Discord-facing layer: py-cord cogs that call into the moderation core.
"""
