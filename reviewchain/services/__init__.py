"""
Services Package

Business logic kept apart from HTTP handling (routers) and persistence
(stores), so each piece can be tested in isolation.

Current services:
- hashing.py: Review hash and content address computation
- publication.py: Upload to content-addressable storage with backend fallback
- events.py: In-process lifecycle events and the default logging subscribers
- reviews.py: The submission service that ties everything together
"""
