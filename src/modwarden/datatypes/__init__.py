"""
Plain data types shared across Modwarden.

- **trust_datatypes.py**: trust tiers, infraction kinds, the trust record.
- **lock_datatypes.py**: tagged result of a duplicate-action lock attempt.
- **moderation_datatypes.py**: warning/mute/ticket decisions returned by the
  orchestrator.
"""
