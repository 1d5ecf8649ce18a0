"""
Publication Pydantic Schemas

Schemas describing the outcome of replicating a review to
content-addressable storage.

Schemas:
- PublicationResult: outcome of publish() (embedded in reviews and audit records)
- VerificationResult: outcome of reading published content back via a gateway
- GatewayUrlsResponse: public read URLs for a remote identifier
- PublicationStatusResponse: which backends have credentials configured
"""

from typing import Any

from pydantic import Field

from reviewchain.schemas.base import CamelModel


class PublicationResult(CamelModel):
    """
    Result of a publication attempt.

    On success remote_id holds the identifier the backend assigned and
    backend names the backend that accepted the upload. On failure error
    holds the last backend's error message and attempts the number of
    backends that were tried.
    """

    success: bool = Field(..., description="Whether any backend stored the payload")
    remote_id: str | None = Field(
        default=None,
        description="Identifier assigned by the storage network",
        examples=["bafkreigh2akiscaildcqabsyg3dfr6chu3fgpregiymsck7e7aqa4s52zy"],
    )
    backend: str | None = Field(
        default=None,
        description="Backend that produced this result",
        examples=["local-ipfs", "pinata", "web3storage"],
    )
    error: str | None = Field(default=None, description="Error message if publication failed")
    size: int | None = Field(default=None, description="Stored size in bytes, if reported")
    attempts: int = Field(default=0, ge=0, description="Number of backends tried")


class VerificationResult(CamelModel):
    """Result of fetching previously published content through a gateway."""

    success: bool
    hash: str = Field(..., description="Remote identifier that was requested")
    gateway: str = Field(..., description="Gateway base URL used for the read")
    content: Any = Field(default=None, description="Retrieved content (JSON or text)")
    error: str | None = None


class GatewayUrlsResponse(CamelModel):
    """Public read paths for one remote identifier."""

    hash: str
    gateways: dict[str, str]


class PublicationStatusResponse(CamelModel):
    """Credential/configuration status of every publication backend."""

    configured: bool = Field(
        ...,
        description="True when at least one hosted pinning service has credentials",
    )
    backends: dict[str, dict[str, bool]]
