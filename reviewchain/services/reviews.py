"""
Review Submission Service

Orchestrates review submission. This is the only component that writes to
the Review Store, calls PublicationClient.publish() or raises events.

Submission flow:
1. Validate the request (rating 1-5, non-empty text, product id, wallet shape)
2. Normalize the wallet and look for an existing (wallet, product) review
3. Generate the review id, take the server timestamp, compute both hashes
4. Try to publish the payload (outcome recorded, never fatal)
5. Insert the review; the store rejects a duplicate that raced past step 2
6. Raise ReviewSubmitted
7. Append the submission record, marked as having raised the event
   (failure is logged only), and return the accepted review

Rejections:
- InvalidReviewError at step 1
- DuplicateReviewError at step 2 or 5 (DuplicateReviewAttempted is raised first)
- StorageError when the store fails at step 2 or 5
"""

import logging
import secrets
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from reviewchain.exceptions import (
    DuplicateReviewError,
    InvalidReviewError,
    ReviewNotFoundError,
    StorageError,
)
from reviewchain.schemas.publication import PublicationResult
from reviewchain.schemas.review import (
    AllReviewsResponse,
    ProductReviewsResponse,
    ReviewSubmission,
    ReviewSubmitResponse,
    ReviewVerificationResponse,
    StoredReview,
    VendorResponseCreate,
)
from reviewchain.schemas.submission import SubmissionRecordEntry
from reviewchain.services.events import DuplicateReviewAttempted, EventChannel, ReviewSubmitted
from reviewchain.services.hashing import compute_content_address, compute_review_hash
from reviewchain.services.publication import PublicationClient
from reviewchain.stores.base import ReviewStore
from reviewchain.utils.timestamps import utc_now

logger = logging.getLogger(__name__)

# User-facing messages per field, keyed by both alias and attribute name
FIELD_MESSAGES = {
    "rating": "Rating must be an integer between 1 and 5",
    "text": "Review text must not be empty",
    "productId": "Product id must be a non-empty string",
    "product_id": "Product id must be a non-empty string",
    "walletAddress": "Invalid wallet address format",
    "wallet_address": "Invalid wallet address format",
    "response": "Response must not be empty",
}


@dataclass
class ClientInfo:
    """Where a submission came from; recorded in the audit log."""

    client_ip: str | None = None
    submission_method: str = "api"


# =============================================================================
# Helpers
# =============================================================================


def generate_review_id(timestamp: datetime) -> str:
    """Millisecond timestamp followed by 10 random hex characters."""
    return f"{int(timestamp.timestamp() * 1000)}{secrets.token_hex(5)}"


def average_rating(reviews: list[StoredReview]) -> float:
    """Mean rating rounded to one decimal, 0.0 for no reviews."""
    if not reviews:
        return 0.0
    return round(sum(r.rating for r in reviews) / len(reviews), 1)


def _describe_validation_error(error: ValidationError) -> tuple[str, list[str]]:
    missing: list[str] = []
    problems: list[str] = []

    for item in error.errors():
        field = str(item["loc"][0]) if item["loc"] else "body"
        if item["type"] == "missing":
            missing.append(field)
            continue
        message = FIELD_MESSAGES.get(field, f"{field}: {item['msg']}")
        if message not in problems:
            problems.append(message)

    if missing:
        problems.insert(0, f"Missing required fields: {', '.join(missing)}")
    return "; ".join(problems), problems


# =============================================================================
# Service
# =============================================================================


class ReviewSubmissionService:
    """
    Accepts, rejects and serves reviews.

    All collaborators are injected; nothing is read from module globals.
    """

    def __init__(
        self,
        store: ReviewStore,
        publication_client: PublicationClient | None = None,
        events: EventChannel | None = None,
        clock: Callable[[], datetime] = utc_now,
        preferred_backend: str = "local-ipfs",
        publication_enabled: bool = True,
    ):
        """
        Args:
            store: Review Store adapter
            publication_client: Content-addressable storage client; None disables publication
            events: Channel for lifecycle events (a private one is created if omitted)
            clock: Source of server timestamps (UTC, millisecond precision)
            preferred_backend: Publication backend tried first
            publication_enabled: Whether to attempt publication at all
        """
        self.store = store
        self.publication_client = publication_client
        self.events = events or EventChannel()
        self._clock = clock
        self.preferred_backend = preferred_backend
        self.publication_enabled = publication_enabled and publication_client is not None

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    @staticmethod
    def validate(data: ReviewSubmission | Mapping[str, Any]) -> ReviewSubmission:
        """
        Validate a raw submission.

        Raises:
            InvalidReviewError: With a message naming the offending fields
        """
        if isinstance(data, ReviewSubmission):
            return data
        if not isinstance(data, Mapping):
            raise InvalidReviewError("Request body must be a JSON object")

        try:
            return ReviewSubmission.model_validate(dict(data))
        except ValidationError as e:
            message, problems = _describe_validation_error(e)
            raise InvalidReviewError(message, problems) from e

    def submit(
        self,
        data: ReviewSubmission | Mapping[str, Any],
        client_info: ClientInfo | None = None,
    ) -> ReviewSubmitResponse:
        """
        Accept a review.

        Args:
            data: Request body ({rating, text, productId, walletAddress})
            client_info: Request origin for the audit log

        Returns:
            The accepted review's id, hashes, timestamp and publication outcome

        Raises:
            InvalidReviewError: The request is malformed
            DuplicateReviewError: The wallet already reviewed this product
            StorageError: The review could not be persisted
        """
        submission = self.validate(data)
        client_info = client_info or ClientInfo()
        wallet = submission.wallet_address
        product_id = submission.product_id

        existing = self.store.find_by_wallet_and_product(wallet, product_id)
        if existing is not None:
            self._reject_duplicate(wallet, product_id, existing)

        timestamp = self._clock()
        review_id = generate_review_id(timestamp)
        review_hash = compute_review_hash(
            submission.rating, submission.text, product_id, wallet, timestamp
        )
        content_hash = compute_content_address(
            {
                "rating": submission.rating,
                "text": submission.text,
                "productId": product_id,
                "walletAddress": wallet,
                "timestamp": timestamp,
            }
        )

        review = StoredReview(
            review_id=review_id,
            rating=submission.rating,
            text=submission.text,
            product_id=product_id,
            wallet_address=wallet,
            timestamp=timestamp,
            review_hash=review_hash,
            content_hash=content_hash,
            publication=PublicationResult(success=False, attempts=0),
        )
        publication = self._publish(review)
        review = review.model_copy(update={"publication": publication})

        try:
            self.store.insert(review)
        except DuplicateReviewError as e:
            existing = e.existing or self.store.find_by_wallet_and_product(wallet, product_id)
            self._reject_duplicate(wallet, product_id, existing)
        except StorageError as e:
            logger.error(f"Failed to save review {review_id}: {e.error or e.message}")
            raise

        self.events.publish(ReviewSubmitted(review=review, publication=publication))

        self._append_metadata(review, client_info, event_emitted=True)

        return ReviewSubmitResponse(
            review_id=review.review_id,
            review_hash=review.review_hash,
            content_hash=review.content_hash,
            timestamp=review.timestamp,
            publication=publication,
            gateways=(
                PublicationClient.gateway_urls(publication.remote_id)
                if publication.success and publication.remote_id
                else None
            ),
        )

    def _reject_duplicate(
        self, wallet: str, product_id: str, existing: StoredReview | None
    ) -> None:
        self.events.publish(
            DuplicateReviewAttempted(
                wallet_address=wallet,
                product_id=product_id,
                existing_review_id=existing.review_id if existing else None,
            )
        )
        raise DuplicateReviewError(existing=existing)

    def _publish(self, review: StoredReview) -> PublicationResult:
        if not self.publication_enabled:
            return PublicationResult(success=False, error="Publication disabled", attempts=0)

        payload = {
            "reviewId": review.review_id,
            "rating": review.rating,
            "text": review.text,
            "productId": review.product_id,
            "walletAddress": review.wallet_address,
            "timestamp": review.model_dump(mode="json", by_alias=True)["timestamp"],
            "reviewHash": review.review_hash,
            "contentHash": review.content_hash,
        }
        return self.publication_client.publish(
            payload,
            filename=f"review-{review.review_id}.json",
            preferred_backend=self.preferred_backend,
        )

    def _append_metadata(
        self, review: StoredReview, client_info: ClientInfo, event_emitted: bool
    ) -> None:
        record = SubmissionRecordEntry(
            review_id=review.review_id,
            product_id=review.product_id,
            wallet=review.wallet_address,
            timestamp=review.timestamp,
            review_hash=review.review_hash,
            content_hash=review.content_hash,
            client_ip=client_info.client_ip,
            submission_method=client_info.submission_method,
            event_emitted=event_emitted,
            publication=review.publication,
        )
        try:
            self.store.append_metadata(record)
        except Exception as e:
            # The review is already stored; only the audit entry is lost
            logger.warning(
                f"Failed to append submission metadata for {review.review_id}: {e}",
                exc_info=True,
            )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_by_product(self, product_id: str) -> ProductReviewsResponse:
        """
        Reviews of a product, newest first, with the average rating.

        The id is stripped of surrounding whitespace, as on submission.
        """
        product_id = product_id.strip()
        reviews = self.store.list_by_product(product_id)
        return ProductReviewsResponse(
            product_id=product_id,
            reviews=reviews,
            total_reviews=len(reviews),
            average_rating=average_rating(reviews),
        )

    def get_all(self) -> AllReviewsResponse:
        """Every review and submission record, newest first."""
        reviews = self.store.list_all()
        return AllReviewsResponse(
            reviews=reviews,
            metadata=self.store.list_all_metadata(),
            total_reviews=len(reviews),
        )

    def get_by_hash(self, review_hash: str) -> ReviewVerificationResponse:
        """
        Locate a review by its verification hash.

        Raises:
            ReviewNotFoundError: No review has this hash
        """
        review = self.store.find_by_review_hash(review_hash)
        if review is None:
            raise ReviewNotFoundError("Review not found")
        return ReviewVerificationResponse(review=review, verified=True, hash=review_hash)

    # -------------------------------------------------------------------------
    # Vendor response
    # -------------------------------------------------------------------------

    def add_vendor_response(
        self, review_id: str, data: VendorResponseCreate | Mapping[str, Any]
    ) -> StoredReview:
        """
        Attach the store owner's reply to a review, replacing any earlier reply.

        Raises:
            InvalidReviewError: The reply is empty
            ReviewNotFoundError: No review has this id
        """
        if not isinstance(data, VendorResponseCreate):
            if not isinstance(data, Mapping):
                raise InvalidReviewError("Request body must be a JSON object")
            try:
                data = VendorResponseCreate.model_validate(dict(data))
            except ValidationError as e:
                message, problems = _describe_validation_error(e)
                raise InvalidReviewError(message, problems) from e

        updated = self.store.set_vendor_response(review_id, data.response, self._clock())
        if updated is None:
            raise ReviewNotFoundError(f"Review {review_id} not found")

        logger.info(f"Vendor response attached to review {review_id}")
        return updated
