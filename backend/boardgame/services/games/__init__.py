"""Board game domain services: turn engine, movement, prize cards, timers.

This package contains pure(ish) domain logic that should be imported by
HTTP routes, keeping transport concerns separated from core game mechanics.
The leaf modules (rotation, movement, blocking, cards, scoring, expiry)
work on plain attributes and never touch the database session; only
``engine`` loads, locks and commits.
"""
