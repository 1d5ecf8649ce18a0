"""
Review Store Package

One interface (base.ReviewStore), three interchangeable adapters:

- memory.py: InMemoryReviewStore (tests, throwaway instances)
- json_file.py: JsonFileReviewStore (reviews.json + metadata.json)
- sql.py: SqlReviewStore (SQLAlchemy, unique constraint on wallet+product)

The submission service is written against ReviewStore only; which adapter
is used is decided by REVIEW_STORE_BACKEND.
"""

from reviewchain.config import Settings
from reviewchain.database import create_session_factory, create_tables, get_engine
from reviewchain.stores.base import ReviewStore
from reviewchain.stores.json_file import JsonFileReviewStore
from reviewchain.stores.memory import InMemoryReviewStore
from reviewchain.stores.sql import SqlReviewStore


def create_review_store(settings: Settings) -> ReviewStore:
    """
    Build the Review Store selected by settings.

    For the sql backend the tables are created if they don't exist yet;
    run Alembic migrations for managed databases.
    """
    if settings.review_store_backend == "memory":
        return InMemoryReviewStore()

    if settings.review_store_backend == "json":
        return JsonFileReviewStore(settings.data_dir)

    engine = get_engine()
    create_tables(engine)
    return SqlReviewStore(create_session_factory(engine))


__all__ = [
    "ReviewStore",
    "InMemoryReviewStore",
    "JsonFileReviewStore",
    "SqlReviewStore",
    "create_review_store",
]
