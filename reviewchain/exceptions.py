"""
Review Service Exceptions

Error taxonomy for review submission.

- InvalidReviewError: malformed or out-of-range request fields (400)
- DuplicateReviewError: the wallet already reviewed the product (409)
- StorageError: the Review Store could not be read or written (500)
- ReviewNotFoundError: lookup by hash or id found nothing (404)
- PublicationError: a single publication backend attempt failed; only
  raised inside the publication client and never escapes publish()

Route handlers don't catch these: main.py registers one exception
handler per class that renders the matching HTTP response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reviewchain.schemas.review import StoredReview


class ReviewServiceError(Exception):
    """Base class for errors raised by the review subsystem."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidReviewError(ReviewServiceError):
    """The submitted review failed validation."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class DuplicateReviewError(ReviewServiceError):
    """
    A review already exists for this (wallet, product) pair.

    Attributes:
        existing: The review that was recorded first, when it could be
            loaded. The store may raise without it if the conflicting row
            is not visible yet; the service then looks it up.
    """

    def __init__(
        self,
        message: str = "You have already submitted a review for this product",
        existing: StoredReview | None = None,
    ):
        super().__init__(message)
        self.existing = existing


class StorageError(ReviewServiceError):
    """The persistence substrate failed (I/O error, lost connection, bad data)."""

    def __init__(self, message: str, error: str = ""):
        super().__init__(message)
        self.error = error


class ReviewNotFoundError(ReviewServiceError):
    """No review matches the requested hash or id."""


class PublicationError(ReviewServiceError):
    """A publication backend could not store the payload."""

    def __init__(self, message: str, backend: str):
        super().__init__(message)
        self.backend = backend
