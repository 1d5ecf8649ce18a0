"""
Publication Router

Diagnostics for the content-addressable storage backends. None of these
endpoints take part in accepting a review.

Endpoints:
- GET /publication/status - Which backends are configured
- GET /publication/gateways/{remote_id} - Public read URLs for an identifier
- GET /publication/verify/{remote_id} - Read content back through a gateway
"""

from fastapi import APIRouter, Query

from reviewchain.dependencies import Publication
from reviewchain.schemas.publication import (
    GatewayUrlsResponse,
    PublicationStatusResponse,
    VerificationResult,
)
from reviewchain.services.publication import PATH_GATEWAYS, GatewayName

router = APIRouter(
    prefix="/publication",
    tags=["Publication"],
)


@router.get(
    "/status",
    response_model=PublicationStatusResponse,
    summary="Publication backend status",
)
def publication_status(client: Publication) -> PublicationStatusResponse:
    """Configuration flags per backend. No network calls are made."""
    return PublicationStatusResponse(
        configured=client.has_hosted_backend_configured(),
        backends=client.configuration_status(),
    )


@router.get(
    "/gateways/{remote_id}",
    response_model=GatewayUrlsResponse,
    summary="Gateway URLs for published content",
)
def gateway_urls(remote_id: str, client: Publication) -> GatewayUrlsResponse:
    return GatewayUrlsResponse(hash=remote_id, gateways=client.gateway_urls(remote_id))


@router.get(
    "/verify/{remote_id}",
    response_model=VerificationResult,
    summary="Verify published content",
    description=(
        "Fetch the content through a public gateway and return what came back. "
        "Only the named gateways are reachable; any other value is rejected with 400."
    ),
)
def verify_publication(
    remote_id: str,
    client: Publication,
    gateway: GatewayName | None = Query(
        default=None,
        description="Gateway name (defaults to DEFAULT_GATEWAY_URL)",
        examples=["ipfs_io"],
    ),
) -> VerificationResult:
    gateway_url = PATH_GATEWAYS[gateway] if gateway else None
    return client.verify(remote_id, gateway_url=gateway_url)
