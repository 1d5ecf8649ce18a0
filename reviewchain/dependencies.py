"""
FastAPI Dependencies Module

Builds the long-lived collaborators once per process and hands them to route
handlers through Depends().

- get_publication_client(): PublicationClient with the configured backends
- get_review_service(): ReviewSubmissionService wired to the configured
  Review Store, the publication client and an event channel carrying the
  default logging subscribers
- get_client_info(): Request origin recorded in the submission audit log

Tests replace get_review_service / get_publication_client through
app.dependency_overrides.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from reviewchain.config import get_settings
from reviewchain.services.events import EventChannel, register_default_subscribers
from reviewchain.services.publication import PublicationClient
from reviewchain.services.reviews import ClientInfo, ReviewSubmissionService
from reviewchain.stores import create_review_store


@lru_cache
def get_publication_client() -> PublicationClient:
    """Process-wide publication client."""
    return PublicationClient.from_settings(get_settings())


@lru_cache
def get_review_service() -> ReviewSubmissionService:
    """
    Process-wide submission service.

    The service and its store are shared by every request; uniqueness is
    enforced inside the store, not per request.
    """
    settings = get_settings()
    return ReviewSubmissionService(
        store=create_review_store(settings),
        publication_client=get_publication_client(),
        events=register_default_subscribers(EventChannel()),
        preferred_backend=settings.preferred_publication_backend,
        publication_enabled=settings.publication_enabled,
    )


def get_client_info(request: Request) -> ClientInfo:
    """Client address as seen by the server."""
    return ClientInfo(
        client_ip=request.client.host if request.client else None,
        submission_method="api",
    )


# =============================================================================
# Type Aliases with Annotated
# =============================================================================

ReviewService = Annotated[ReviewSubmissionService, Depends(get_review_service)]
Publication = Annotated[PublicationClient, Depends(get_publication_client)]
Client = Annotated[ClientInfo, Depends(get_client_info)]
