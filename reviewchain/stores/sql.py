"""
SQL Review Store.

SQLAlchemy-backed persistence. The (wallet_address, product_id) unique
constraint on the reviews table is what resolves concurrent submissions:
when two inserts race, the database rejects the second with an
IntegrityError, which is reported as DuplicateReviewError carrying the
review that won.

Each operation opens its own session from the factory, so one store
instance can be shared by every worker thread.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from reviewchain.exceptions import DuplicateReviewError, StorageError
from reviewchain.models import Review, SubmissionRecord
from reviewchain.schemas.publication import PublicationResult
from reviewchain.schemas.review import StoredReview
from reviewchain.schemas.submission import SubmissionRecordEntry
from reviewchain.stores.base import ReviewStore

logger = logging.getLogger(__name__)


# =============================================================================
# Row <-> schema conversion
# =============================================================================


def review_from_row(row: Review) -> StoredReview:
    """Convert an ORM row to the StoredReview schema."""
    return StoredReview(
        review_id=row.review_id,
        rating=row.rating,
        text=row.text,
        product_id=row.product_id,
        wallet_address=row.wallet_address,
        timestamp=row.timestamp,
        review_hash=row.review_hash,
        content_hash=row.content_hash,
        publication=PublicationResult.model_validate(row.publication),
        vendor_response=row.vendor_response,
        response_timestamp=row.response_timestamp,
    )


def review_to_row(review: StoredReview) -> Review:
    """Convert a StoredReview to a new ORM row."""
    return Review(
        review_id=review.review_id,
        rating=review.rating,
        text=review.text,
        product_id=review.product_id,
        wallet_address=review.wallet_address.lower(),
        timestamp=review.timestamp,
        review_hash=review.review_hash,
        content_hash=review.content_hash,
        publication=review.publication.model_dump(mode="json", by_alias=True),
        vendor_response=review.vendor_response,
        response_timestamp=review.response_timestamp,
    )


def record_from_row(row: SubmissionRecord) -> SubmissionRecordEntry:
    return SubmissionRecordEntry(
        review_id=row.review_id,
        product_id=row.product_id,
        wallet=row.wallet,
        timestamp=row.timestamp,
        review_hash=row.review_hash,
        content_hash=row.content_hash,
        client_ip=row.client_ip,
        submission_method=row.submission_method,
        event_emitted=row.event_emitted,
        publication=PublicationResult.model_validate(row.publication),
    )


# =============================================================================
# Store
# =============================================================================


class SqlReviewStore(ReviewStore):
    """Review Store backed by a relational database."""

    name = "sql"

    def __init__(self, session_factory: sessionmaker[Session]):
        """
        Args:
            session_factory: Factory producing sessions bound to the database
        """
        self._session_factory = session_factory

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        """Open a session and report database failures as StorageError."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error while {action}: {e}")
            raise StorageError(f"Database error while {action}", str(e)) from e
        finally:
            session.close()

    def find_by_wallet_and_product(
        self, wallet_address: str, product_id: str
    ) -> StoredReview | None:
        stmt = select(Review).where(
            Review.wallet_address == wallet_address.lower(),
            Review.product_id == product_id,
        )
        with self._session("checking for duplicate review") as session:
            row = session.execute(stmt).scalar_one_or_none()
            return review_from_row(row) if row else None

    def insert(self, review: StoredReview) -> StoredReview:
        conflict: IntegrityError | None = None

        with self._session("saving review") as session:
            session.add(review_to_row(review))
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                conflict = e

        if conflict is not None:
            existing = self.find_by_wallet_and_product(review.wallet_address, review.product_id)
            if existing is not None:
                logger.info(
                    f"Unique constraint rejected review for wallet={review.wallet_address} "
                    f"product={review.product_id}"
                )
                raise DuplicateReviewError(existing=existing)
            # Constraint violation that is not the (wallet, product) pair
            raise StorageError("Failed to save review data", str(conflict.orig))

        return review

    def find_by_review_hash(self, review_hash: str) -> StoredReview | None:
        stmt = select(Review).where(Review.review_hash == review_hash)
        with self._session("fetching review by hash") as session:
            row = session.execute(stmt).scalars().first()
            return review_from_row(row) if row else None

    def find_by_id(self, review_id: str) -> StoredReview | None:
        stmt = select(Review).where(Review.review_id == review_id)
        with self._session("fetching review") as session:
            row = session.execute(stmt).scalar_one_or_none()
            return review_from_row(row) if row else None

    def list_by_product(self, product_id: str) -> list[StoredReview]:
        stmt = (
            select(Review)
            .where(Review.product_id == product_id)
            .order_by(Review.timestamp.desc(), Review.id.desc())
        )
        with self._session("fetching product reviews") as session:
            return [review_from_row(row) for row in session.execute(stmt).scalars()]

    def list_all(self) -> list[StoredReview]:
        stmt = select(Review).order_by(Review.timestamp.desc(), Review.id.desc())
        with self._session("fetching reviews") as session:
            return [review_from_row(row) for row in session.execute(stmt).scalars()]

    def set_vendor_response(
        self, review_id: str, response: str, responded_at: datetime
    ) -> StoredReview | None:
        stmt = select(Review).where(Review.review_id == review_id)
        with self._session("saving vendor response") as session:
            row = session.execute(stmt).scalar_one_or_none()
            if row is None:
                return None
            row.vendor_response = response
            row.response_timestamp = responded_at
            session.commit()
            return review_from_row(row)

    def append_metadata(self, record: SubmissionRecordEntry) -> None:
        row = SubmissionRecord(
            review_id=record.review_id,
            product_id=record.product_id,
            wallet=record.wallet,
            timestamp=record.timestamp,
            review_hash=record.review_hash,
            content_hash=record.content_hash,
            client_ip=record.client_ip,
            submission_method=record.submission_method,
            event_emitted=record.event_emitted,
            publication=record.publication.model_dump(mode="json", by_alias=True),
        )
        with self._session("saving submission metadata") as session:
            session.add(row)
            session.commit()

    def list_all_metadata(self) -> list[SubmissionRecordEntry]:
        stmt = select(SubmissionRecord).order_by(
            SubmissionRecord.timestamp.desc(), SubmissionRecord.id.desc()
        )
        with self._session("fetching submission metadata") as session:
            return [record_from_row(row) for row in session.execute(stmt).scalars()]
