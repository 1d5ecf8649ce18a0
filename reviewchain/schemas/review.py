"""
Review Pydantic Schemas

Schemas for wallet-signed product reviews.

Schemas:
- ReviewSubmission: incoming review (validated by the submission service)
- StoredReview: a review as recorded by the Review Store
- ReviewSubmitResponse: body returned when a review is accepted
- DuplicateReviewResponse: body returned when the wallet already reviewed the product
- ErrorResponse: body for validation, not-found and storage errors
- ProductReviewsResponse: reviews of one product with the average rating
- AllReviewsResponse: every review plus the submission audit log
- ReviewVerificationResponse: review located by its verification hash
- VendorResponseCreate: store owner's reply attached to a review

Business Rules:
- Rating must be an integer 1-5 (floats, numeric strings and booleans are rejected)
- Wallet address must be "0x" followed by 40 hex characters; stored lower-cased
- One review per wallet per product (enforced by the Review Store)
"""
import re

from pydantic import ConfigDict, Field, field_validator

from reviewchain.schemas.base import CamelModel, Timestamp
from reviewchain.schemas.publication import PublicationResult
from reviewchain.schemas.submission import SubmissionRecordEntry

WALLET_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


# =============================================================================
# Request Schemas
# =============================================================================


class ReviewSubmission(CamelModel):
    """
    Schema for a review submission.

    Example request body:
    {
        "rating": 5,
        "text": "Arrived quickly, works as described.",
        "productId": "p1",
        "walletAddress": "0xAbC0000000000000000000000000000000000001"
    }
    """

    rating: int = Field(
        ...,
        ge=1,
        le=5,
        strict=True,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )
    text: str = Field(
        ...,
        min_length=1,
        description="Review body",
        examples=["Arrived quickly, works as described."],
    )
    product_id: str = Field(..., description="Identifier of the reviewed product")
    wallet_address: str = Field(
        ...,
        description="Reviewer's wallet address (0x + 40 hex characters)",
    )

    @field_validator("text")
    @classmethod
    def text_must_not_be_blank(cls, v: str) -> str:
        """Reject text made only of whitespace. The text itself is kept as sent."""
        if not v.strip():
            raise ValueError("Review text must not be empty")
        return v

    @field_validator("product_id", mode="before")
    @classmethod
    def product_id_to_string(cls, v: object) -> object:
        """Accept numeric product ids from clients that send them unquoted."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("product_id")
    @classmethod
    def product_id_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Product id must not be empty")
        return v

    @field_validator("wallet_address")
    @classmethod
    def wallet_address_must_be_hex(cls, v: str) -> str:
        """Check the 0x + 40 hex shape and normalize to lower case."""
        if not WALLET_ADDRESS_PATTERN.match(v):
            raise ValueError("Invalid wallet address format")
        return v.lower()


class VendorResponseCreate(CamelModel):
    """Store owner's reply to a review."""

    response: str = Field(..., min_length=1, description="Reply text")

    @field_validator("response")
    @classmethod
    def response_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Response must not be empty")
        return v


# =============================================================================
# Stored Review
# =============================================================================


class StoredReview(CamelModel):
    """
    A review as recorded by the Review Store.

    review_id, rating, text, product_id, wallet_address, timestamp and the
    two hashes never change once recorded. vendor_response and
    response_timestamp are attached later by the store owner.
    """

    review_id: str = Field(..., description="Unique, URL-safe review identifier")
    rating: int = Field(..., ge=1, le=5)
    text: str
    product_id: str
    wallet_address: str
    timestamp: Timestamp = Field(..., description="When the service accepted the review")
    review_hash: str = Field(..., description="SHA-256 over the review tuple")
    content_hash: str = Field(..., description="Local fingerprint of the review payload")
    publication: PublicationResult
    vendor_response: str | None = None
    response_timestamp: Timestamp | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "reviewId": "1714566645123a1b2c3d4e5",
                "rating": 5,
                "text": "Arrived quickly, works as described.",
                "productId": "p1",
                "walletAddress": "0xabc0000000000000000000000000000000000001",
                "timestamp": "2024-05-01T12:30:45.123Z",
                "reviewHash": "9f2c...e1",
                "contentHash": "Qm4b1d...",
                "publication": {
                    "success": True,
                    "remoteId": "bafkrei...",
                    "backend": "local-ipfs",
                    "error": None,
                    "size": 412,
                    "attempts": 1,
                },
                "vendorResponse": None,
                "responseTimestamp": None,
            }
        }
    )


# =============================================================================
# Response Schemas
# =============================================================================


class ReviewSubmitResponse(CamelModel):
    """Body returned with 201 when a review is accepted."""

    message: str = "Review submitted successfully"
    review_id: str
    review_hash: str
    content_hash: str
    timestamp: Timestamp
    publication: PublicationResult
    gateways: dict[str, str] | None = Field(
        default=None,
        description="Public read URLs, present when publication succeeded",
    )


class DuplicateReviewResponse(CamelModel):
    """Body returned with 409 when the wallet already reviewed the product."""

    message: str
    existing_review_id: str | None
    submitted_at: Timestamp | None


class ErrorResponse(CamelModel):
    """Generic error body."""

    message: str
    error: str | None = None


class ProductReviewsResponse(CamelModel):
    """Reviews for one product, newest first."""

    product_id: str
    reviews: list[StoredReview]
    total_reviews: int = Field(..., ge=0)
    average_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Mean rating rounded to one decimal, 0 when there are no reviews",
    )


class AllReviewsResponse(CamelModel):
    """Every review and every submission record, newest first."""

    reviews: list[StoredReview]
    metadata: list[SubmissionRecordEntry]
    total_reviews: int = Field(..., ge=0)


class ReviewVerificationResponse(CamelModel):
    """A review located by its verification hash."""

    review: StoredReview
    verified: bool = True
    hash: str
