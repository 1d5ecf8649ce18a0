"""
Test Suite for the Review Service

Test Organization:
- conftest.py: Shared fixtures (stores, clock, events, mock publication client)
- test_hashing.py: Review hash, content address, timestamp rendering
- test_stores.py: Review Store contract for every adapter
- test_publication.py: Publication client and backends
- test_events.py: Event channel and default subscribers
- test_review_service.py: Submission flow, duplicates, queries
- test_reviews_api.py: HTTP endpoints
- test_config.py: Settings and store selection

Running Tests:
    pytest
    pytest tests/test_review_service.py -k duplicate
"""
