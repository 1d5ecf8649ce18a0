"""
Submission Record Model

Append-only audit log of accepted submissions. Rows are inserted once and
never updated. There is no foreign key to the reviews table.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from reviewchain.database import Base, UTCDateTime


class SubmissionRecord(Base):
    """Audit entry for one accepted review."""

    __tablename__ = "submission_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    review_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(255), nullable=False)
    wallet: Mapped[str] = mapped_column(String(42), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    review_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    content_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    client_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    submission_method: Mapped[str] = mapped_column(String(32), nullable=False, default="api")
    event_emitted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    publication: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<SubmissionRecord(review_id={self.review_id}, timestamp={self.timestamp})>"
