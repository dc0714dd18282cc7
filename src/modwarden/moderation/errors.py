"""
Errors raised by the store-backed moderation primitives.

Trust policy arithmetic never raises: bad numbers are coerced to defaults.
Only the sequence allocator and the action lock can fail, and their failures
reach the caller unchanged.
"""


class ModerationStoreError(Exception):
    """Base class for allocator and lock failures."""


class StoreUnavailable(ModerationStoreError):
    """The store could not execute an atomic primitive.

    Raised on driver errors, a closed connection or a timed-out round trip.
    Callers must abort the action instead of inventing a number.
    """


class LockHeld(ModerationStoreError):
    """Another live lock exists for the same key.

    Only raised by :meth:`LockResult.raise_if_held`; ``try_acquire`` reports
    this outcome as a result value.
    """

    def __init__(self, lock_name: str, guild_id: int, actor_id: int) -> None:
        super().__init__(f"{lock_name} lock already held for actor {actor_id} in guild {guild_id}")
        self.lock_name = lock_name
        self.guild_id = guild_id
        self.actor_id = actor_id
