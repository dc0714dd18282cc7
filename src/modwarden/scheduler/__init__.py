"""
Background tasks.

- **maintenance_scheduler.py**: periodic sweep that deletes expired action
  locks from the store.
"""
