"""
Review Model

Represents one wallet's review of one product.

Business Rules:
- One review per wallet per product (unique constraint)
- Rating must be 1-5
- Identity fields and hashes are written once; only the vendor response
  columns are ever updated
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from reviewchain.database import Base, UTCDateTime


class Review(Base):
    """
    Review model.

    Attributes:
        id: Surrogate primary key
        review_id: Public review identifier
        rating: 1-5 star rating
        text: Review body
        product_id: Reviewed product (opaque string)
        wallet_address: Lower-cased reviewer wallet
        timestamp: When the service accepted the review
        review_hash: Verification hash
        content_hash: Local content fingerprint
        publication: Publication outcome (PublicationResult as JSON)
        vendor_response: Store owner's reply
        response_timestamp: When the reply was attached
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    review_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
    )

    # Review content
    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Rating from 1-5 stars",
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    product_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    wallet_address: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)

    # Fingerprints
    review_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    publication: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    # Vendor response
    vendor_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    response_timestamp: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    # Constraints
    __table_args__ = (
        # One review per wallet per product
        UniqueConstraint("wallet_address", "product_id", name="uq_review_wallet_product"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
    )

    def __repr__(self) -> str:
        return (
            f"<Review(review_id={self.review_id}, product_id={self.product_id}, "
            f"wallet_address={self.wallet_address}, rating={self.rating})>"
        )
