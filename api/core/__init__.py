"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every feature uses (DB wiring,
settings, storage errors). Feature SQL and business rules live in the
feature package itself (e.g. `feed/`, `friends/`).
"""
