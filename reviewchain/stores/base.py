"""
Review Store Interface

Durable keyed storage for reviews and the submission audit log.

Every adapter must enforce "at most one review per (wallet, product)" inside
insert() itself. The submission service checks for an existing review
first, but two requests for the same pair can both pass that check; the
store is what turns the second insert into a DuplicateReviewError.

Errors:
- DuplicateReviewError: insert() hit the (wallet, product) constraint
- StorageError: anything infrastructural (I/O, connection, corrupt data)
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TypeVar

from reviewchain.schemas.review import StoredReview
from reviewchain.schemas.submission import SubmissionRecordEntry


class ReviewStore(ABC):
    """Persistence port used by the review submission service."""

    name: str = "abstract"

    @abstractmethod
    def find_by_wallet_and_product(
        self, wallet_address: str, product_id: str
    ) -> StoredReview | None:
        """Return the review for this pair, or None."""

    @abstractmethod
    def insert(self, review: StoredReview) -> StoredReview:
        """
        Persist a new review.

        Raises:
            DuplicateReviewError: A review for (wallet, product) already exists
            StorageError: The review could not be written
        """

    @abstractmethod
    def find_by_review_hash(self, review_hash: str) -> StoredReview | None:
        """Return the review with this verification hash, or None."""

    @abstractmethod
    def find_by_id(self, review_id: str) -> StoredReview | None:
        """Return the review with this id, or None."""

    @abstractmethod
    def list_by_product(self, product_id: str) -> list[StoredReview]:
        """Reviews of one product, newest first."""

    @abstractmethod
    def list_all(self) -> list[StoredReview]:
        """All reviews, newest first."""

    @abstractmethod
    def set_vendor_response(
        self, review_id: str, response: str, responded_at: datetime
    ) -> StoredReview | None:
        """
        Attach the store owner's reply to a review.

        Only vendor_response and response_timestamp change.

        Returns:
            The updated review, or None if no review has this id
        """

    @abstractmethod
    def append_metadata(self, record: SubmissionRecordEntry) -> None:
        """Append an audit record. Only fails on infrastructure errors."""

    @abstractmethod
    def list_all_metadata(self) -> list[SubmissionRecordEntry]:
        """All audit records, newest first."""


T = TypeVar("T", StoredReview, SubmissionRecordEntry)


def newest_first(items: list[T]) -> list[T]:
    """
    Sort by timestamp, newest first.

    items must be in insertion order; of two entries with the same timestamp
    the one inserted later comes first, matching the SQL store.
    """
    ordered = sorted(enumerate(items), key=lambda pair: (pair[1].timestamp, pair[0]), reverse=True)
    return [item for _, item in ordered]
