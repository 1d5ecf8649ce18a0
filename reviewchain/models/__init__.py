"""
SQLAlchemy Models Package

ORM classes used by the SQL Review Store.

- Review: one review per (wallet_address, product_id)
- SubmissionRecord: append-only audit log, not linked by foreign key

Import all models here so Alembic discovers them for migrations.
"""

from reviewchain.models.review import Review
from reviewchain.models.submission_record import SubmissionRecord

__all__ = [
    "Review",
    "SubmissionRecord",
]
