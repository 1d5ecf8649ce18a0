"""
Pydantic Schemas Package

Request/response and domain schemas. All schemas use camelCase aliases on
the wire (see base.CamelModel).
"""

from reviewchain.schemas.base import CamelModel, Timestamp
from reviewchain.schemas.publication import (
    GatewayUrlsResponse,
    PublicationResult,
    PublicationStatusResponse,
    VerificationResult,
)
from reviewchain.schemas.submission import SubmissionRecordEntry
from reviewchain.schemas.review import (
    AllReviewsResponse,
    DuplicateReviewResponse,
    ErrorResponse,
    ProductReviewsResponse,
    ReviewSubmission,
    ReviewSubmitResponse,
    ReviewVerificationResponse,
    StoredReview,
    VendorResponseCreate,
)

__all__ = [
    "CamelModel",
    "Timestamp",
    # Publication
    "PublicationResult",
    "VerificationResult",
    "GatewayUrlsResponse",
    "PublicationStatusResponse",
    # Audit
    "SubmissionRecordEntry",
    # Reviews
    "ReviewSubmission",
    "StoredReview",
    "ReviewSubmitResponse",
    "DuplicateReviewResponse",
    "ErrorResponse",
    "ProductReviewsResponse",
    "AllReviewsResponse",
    "ReviewVerificationResponse",
    "VendorResponseCreate",
]
