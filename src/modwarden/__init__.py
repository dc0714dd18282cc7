"""
Modwarden - Trust-Scored Discord Moderation Bot

Core Components:

- **Trust Policy**: Pure arithmetic that adjusts warning limits, spam limits
  and mute durations per user from a bounded trust score
- **Trust Service**: Lazily created per-guild trust records with daily
  regeneration and warn/mute penalties
- **Sequence Allocator**: Atomic per-guild case and ticket numbering on a
  shared SQLite store
- **Action Lock**: Self-expiring lock that collapses duplicate ticket-open
  triggers into one thread
- **Cogs**: ``/trust`` and ``/warn`` slash commands and a ticket-emoji listener

Usage:
    from modwarden.main import main
    main()
"""
