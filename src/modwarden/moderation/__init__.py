"""
Moderation policy and safe-allocation core.

- **trust_policy.py**: pure trust arithmetic (tiers, effective warning and
  message limits, mute durations, penalties, regeneration).
- **trust_service.py**: reads and updates trust records in the store.
- **sequence_allocator.py**: atomic per-guild case/ticket numbering.
- **action_lock.py**: self-expiring lock that collapses duplicate triggers.
- **moderation_orchestrator.py**: combines the above into warning, mute and
  ticket-open decisions.
- **errors.py**: ``StoreUnavailable`` and ``LockHeld``.
"""
