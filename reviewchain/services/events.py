"""
Event System for Review Lifecycle Notifications

In-process, synchronous publish/subscribe.

Features:
- Typed events: ReviewSubmitted and DuplicateReviewAttempted
- Subscribers run in registration order, on the submitting thread
- A failing subscriber is logged and skipped; it never fails the submission

Events carry no business-rule authority: removing every subscriber must not
change which reviews are accepted or rejected.

Usage:
    from reviewchain.services.events import EventChannel, ReviewSubmitted

    channel = EventChannel()
    unsubscribe = channel.subscribe(ReviewSubmitted, lambda e: print(e.review_id))
    ...
    unsubscribe()
"""

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, TypeVar

from reviewchain.schemas.publication import PublicationResult
from reviewchain.schemas.review import StoredReview
from reviewchain.utils.timestamps import format_timestamp, utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Event Types
# =============================================================================


class EventType(StrEnum):
    """Types of events raised by the submission service."""

    REVIEW_SUBMITTED = "review.submitted"
    DUPLICATE_REVIEW_ATTEMPTED = "review.duplicate_attempted"


@dataclass(frozen=True)
class ReviewSubmitted:
    """
    Raised once per accepted review.

    Attributes:
        review: The accepted review, including hashes
        publication: Outcome of the publication attempt
        occurred_at: When the event was raised
    """

    review: StoredReview
    publication: PublicationResult
    occurred_at: datetime = field(default_factory=utc_now)

    type = EventType.REVIEW_SUBMITTED

    @property
    def review_id(self) -> str:
        return self.review.review_id

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for JSON serialization."""
        return {
            "type": self.type.value,
            "data": {
                **self.review.model_dump(mode="json", by_alias=True),
                "publication": self.publication.model_dump(mode="json", by_alias=True),
            },
            "timestamp": format_timestamp(self.occurred_at),
        }


@dataclass(frozen=True)
class DuplicateReviewAttempted:
    """
    Raised once per submission rejected as a duplicate.

    Attributes:
        wallet_address: Lower-cased wallet that tried again
        product_id: Product already reviewed by that wallet
        existing_review_id: The review recorded first (None if it could not be loaded)
        occurred_at: When the event was raised
    """

    wallet_address: str
    product_id: str
    existing_review_id: str | None
    occurred_at: datetime = field(default_factory=utc_now)

    type = EventType.DUPLICATE_REVIEW_ATTEMPTED

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("occurred_at")
        return {
            "type": self.type.value,
            "data": data,
            "timestamp": format_timestamp(self.occurred_at),
        }


ReviewEvent = ReviewSubmitted | DuplicateReviewAttempted
E = TypeVar("E", ReviewSubmitted, DuplicateReviewAttempted)


# =============================================================================
# Event Channel
# =============================================================================


class EventChannel:
    """
    Synchronous in-process event dispatcher.

    Subscribers are registered per event class and called in registration
    order by publish().
    """

    def __init__(self):
        self._subscribers: dict[type, list[Callable[[Any], None]]] = {}

    def subscribe(self, event_class: type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        """
        Register a handler for one event class.

        Returns:
            A callable that removes the handler again
        """
        handlers = self._subscribers.setdefault(event_class, [])
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def subscriber_count(self, event_class: type) -> int:
        return len(self._subscribers.get(event_class, []))

    def publish(self, event: ReviewEvent) -> int:
        """
        Deliver an event to every subscriber of its class.

        Args:
            event: The event to deliver

        Returns:
            Number of subscribers that handled the event without raising
        """
        delivered = 0
        for handler in list(self._subscribers.get(type(event), [])):
            try:
                handler(event)
                delivered += 1
            except Exception as e:
                logger.error(
                    f"Subscriber {getattr(handler, '__name__', handler)!r} "
                    f"failed on {event.type.value}: {e}",
                    exc_info=True,
                )
        logger.debug(f"Published {event.type.value} to {delivered} subscribers")
        return delivered


# =============================================================================
# Default Subscribers
# =============================================================================


def log_review_submitted(event: ReviewSubmitted) -> None:
    """Log accepted reviews."""
    review = event.review
    logger.info(
        f"Review submitted: review_id={review.review_id} product_id={review.product_id} "
        f"wallet={review.wallet_address} rating={review.rating} "
        f"review_hash={review.review_hash} content_hash={review.content_hash} "
        f"published={event.publication.success}"
    )


def log_duplicate_attempt(event: DuplicateReviewAttempted) -> None:
    """Log duplicate submission attempts."""
    logger.warning(
        f"Duplicate review attempt: wallet={event.wallet_address} "
        f"product_id={event.product_id} existing_review_id={event.existing_review_id}"
    )


def register_default_subscribers(channel: EventChannel) -> EventChannel:
    """Attach the logging subscribers to a channel."""
    channel.subscribe(ReviewSubmitted, log_review_submitted)
    channel.subscribe(DuplicateReviewAttempted, log_duplicate_attempt)
    return channel
