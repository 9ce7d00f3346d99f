"""LocalHands catalog sync core.

Keeps a local SQLite copy of the marketplace catalog in step with the remote
catalog API, and keeps working when the remote is unreachable.
"""
