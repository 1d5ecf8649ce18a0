"""
In-memory Review Store.

Keeps reviews in a dict keyed by (wallet, product) behind a lock. Nothing
survives a restart; used by the test suite and REVIEW_STORE_BACKEND=memory.
"""

import logging
import threading
from datetime import datetime

from reviewchain.exceptions import DuplicateReviewError
from reviewchain.schemas.review import StoredReview
from reviewchain.schemas.submission import SubmissionRecordEntry
from reviewchain.stores.base import ReviewStore, newest_first

logger = logging.getLogger(__name__)


class InMemoryReviewStore(ReviewStore):
    """Review Store backed by process memory."""

    name = "memory"

    def __init__(self):
        self._lock = threading.Lock()
        self._reviews: dict[tuple[str, str], StoredReview] = {}
        self._metadata: list[SubmissionRecordEntry] = []

    def find_by_wallet_and_product(
        self, wallet_address: str, product_id: str
    ) -> StoredReview | None:
        with self._lock:
            return self._reviews.get((wallet_address.lower(), product_id))

    def insert(self, review: StoredReview) -> StoredReview:
        key = (review.wallet_address.lower(), review.product_id)
        with self._lock:
            existing = self._reviews.get(key)
            if existing is not None:
                raise DuplicateReviewError(existing=existing)
            self._reviews[key] = review
        logger.debug(f"Stored review {review.review_id} in memory")
        return review

    def find_by_review_hash(self, review_hash: str) -> StoredReview | None:
        with self._lock:
            for review in self._reviews.values():
                if review.review_hash == review_hash:
                    return review
        return None

    def find_by_id(self, review_id: str) -> StoredReview | None:
        with self._lock:
            for review in self._reviews.values():
                if review.review_id == review_id:
                    return review
        return None

    def list_by_product(self, product_id: str) -> list[StoredReview]:
        with self._lock:
            reviews = [r for r in self._reviews.values() if r.product_id == product_id]
        return newest_first(reviews)

    def list_all(self) -> list[StoredReview]:
        with self._lock:
            reviews = list(self._reviews.values())
        return newest_first(reviews)

    def set_vendor_response(
        self, review_id: str, response: str, responded_at: datetime
    ) -> StoredReview | None:
        with self._lock:
            for key, review in self._reviews.items():
                if review.review_id == review_id:
                    updated = review.model_copy(
                        update={
                            "vendor_response": response,
                            "response_timestamp": responded_at,
                        }
                    )
                    self._reviews[key] = updated
                    return updated
        return None

    def append_metadata(self, record: SubmissionRecordEntry) -> None:
        with self._lock:
            self._metadata.append(record)

    def list_all_metadata(self) -> list[SubmissionRecordEntry]:
        with self._lock:
            records = list(self._metadata)
        return newest_first(records)
