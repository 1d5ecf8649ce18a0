"""
Submission Record Schema

One audit entry per accepted review. Records are appended after the review
itself is stored and are never modified.
"""

from pydantic import Field

from reviewchain.schemas.base import CamelModel, Timestamp
from reviewchain.schemas.publication import PublicationResult


class SubmissionRecordEntry(CamelModel):
    """
    Audit log entry for an accepted submission.

    Duplicates the identifying fields of the review so the audit log can be
    read without the review table, plus request origin and the publication
    outcome for later reconciliation.
    """

    review_id: str
    product_id: str
    wallet: str = Field(..., description="Lower-cased wallet address")
    timestamp: Timestamp
    review_hash: str
    content_hash: str
    client_ip: str | None = Field(default=None, description="Address the request came from")
    submission_method: str = Field(default="api", description="Channel the review arrived through")
    event_emitted: bool = Field(
        default=False, description="Whether ReviewSubmitted was raised for this review"
    )
    publication: PublicationResult
