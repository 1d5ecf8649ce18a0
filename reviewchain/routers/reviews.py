"""
Reviews Router

Endpoints:
- POST /reviews/submit - Submit a review (one per wallet per product)
- GET /reviews - All reviews plus the submission audit log
- GET /reviews/hash/{review_hash} - Locate a review by its verification hash
- GET /reviews/{product_id} - Reviews for a product with the average rating
- POST /reviews/{review_id}/response - Attach the vendor's reply to a review

Handlers delegate to ReviewSubmissionService; its exceptions are turned into
HTTP responses by the handlers registered in main.py.

The submit body is taken as raw JSON so that malformed submissions are
rejected by the service with 400 rather than by FastAPI with 422.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, status

from reviewchain.dependencies import Client, ReviewService
from reviewchain.schemas.review import (
    AllReviewsResponse,
    DuplicateReviewResponse,
    ErrorResponse,
    ProductReviewsResponse,
    ReviewSubmitResponse,
    ReviewVerificationResponse,
    StoredReview,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    prefix="/reviews",
    tags=["Reviews"],
)

SubmissionBody = Annotated[
    Any,
    Body(
        examples=[
            {
                "rating": 5,
                "text": "Great product, arrived quickly.",
                "productId": "product-42",
                "walletAddress": "0x742d35cc6634c0532925a3b844bc454e4438f44e",
            }
        ],
    ),
]


# =============================================================================
# Submission
# =============================================================================


@router.post(
    "/submit",
    response_model=ReviewSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a review",
    description=(
        "Accept a review from a wallet. Each wallet may review a product once. "
        "The review is hashed, published to content-addressable storage when "
        "possible, and stored."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid submission"},
        409: {"model": DuplicateReviewResponse, "description": "Already reviewed"},
        500: {"model": ErrorResponse, "description": "Review could not be stored"},
    },
)
def submit_review(
    service: ReviewService,
    client: Client,
    payload: SubmissionBody = None,
) -> ReviewSubmitResponse:
    """
    Submit a review.

    Publication failure does not reject the review; the outcome is reported
    in the `publication` field.
    """
    return service.submit(payload, client_info=client)


# =============================================================================
# Queries
# =============================================================================


@router.get(
    "",
    response_model=AllReviewsResponse,
    summary="List all reviews",
    description="Every review and every submission record, newest first.",
)
def list_all_reviews(service: ReviewService) -> AllReviewsResponse:
    return service.get_all()


# Must be registered before /{product_id} so "hash" isn't taken for a product
@router.get(
    "/hash/{review_hash}",
    response_model=ReviewVerificationResponse,
    summary="Verify a review by hash",
    responses={404: {"model": ErrorResponse, "description": "No review with this hash"}},
)
def get_review_by_hash(review_hash: str, service: ReviewService) -> ReviewVerificationResponse:
    """Locate the review whose verification hash matches."""
    return service.get_by_hash(review_hash)


@router.get(
    "/{product_id}",
    response_model=ProductReviewsResponse,
    summary="List reviews for a product",
    description="Reviews for one product, newest first, with the average rating.",
)
def list_product_reviews(product_id: str, service: ReviewService) -> ProductReviewsResponse:
    return service.get_by_product(product_id)


# =============================================================================
# Vendor Response
# =============================================================================


@router.post(
    "/{review_id}/response",
    response_model=StoredReview,
    summary="Respond to a review",
    description="Attach the store owner's reply to a review. A new reply replaces the old one.",
    responses={
        400: {"model": ErrorResponse, "description": "Empty response"},
        404: {"model": ErrorResponse, "description": "Review not found"},
    },
)
def respond_to_review(
    review_id: str,
    service: ReviewService,
    payload: Annotated[Any, Body(examples=[{"response": "Thanks for the feedback!"}])] = None,
) -> StoredReview:
    updated = service.add_vendor_response(review_id, payload)
    logger.debug(f"Vendor response saved for {review_id}")
    return updated
