"""
Persistence layer.

Responsibilities:
- Keep per-user and community documents in named collections.
- Assign document ids and server-side timestamps.
- Notify listeners when a collection changes.
- Store uploaded images and hand back public URLs.
"""
