"""
pytest Fixtures for Review Service Tests

Shared fixtures used across all test files.

FIXTURE OVERVIEW:
=================
- clock: deterministic server clock (advances one second per call)
- memory_store / json_store / sql_store: the three Review Store adapters
- events + recorder: an event channel and a subscriber that records deliveries
- publication_client: PublicationClient wired to an httpx.MockTransport
- service: ReviewSubmissionService built from the fixtures above
- client: TestClient with the service dependencies overridden

No test touches the network: every publication backend request is answered
by the mock transport.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# Set environment variables BEFORE importing the app
import os

os.environ["REVIEW_STORE_BACKEND"] = "memory"
os.environ["PUBLICATION_ENABLED"] = "false"
os.environ["IPFS_LOCAL_ENABLED"] = "false"
os.environ["PINATA_API_KEY"] = ""
os.environ["PINATA_SECRET_KEY"] = ""
os.environ["WEB3STORAGE_API_KEY"] = ""

import threading
from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from reviewchain.database import create_session_factory, create_tables, drop_tables
from reviewchain.dependencies import get_publication_client, get_review_service
from reviewchain.main import app
from reviewchain.services.events import DuplicateReviewAttempted, EventChannel, ReviewSubmitted
from reviewchain.services.publication import (
    LocalNodeBackend,
    PinataBackend,
    PublicationClient,
    Web3StorageBackend,
)
from reviewchain.services.reviews import ReviewSubmissionService
from reviewchain.stores import InMemoryReviewStore, JsonFileReviewStore, SqlReviewStore

WALLET_A = "0x" + "a" * 40
WALLET_B = "0x" + "b" * 40
MIXED_CASE_WALLET = "0xAbC0000000000000000000000000000000000001"

LOCAL_NODE_URL = "http://ipfs.test/api/v0"
PINATA_URL = "https://pinata.test"
WEB3STORAGE_URL = "https://web3storage.test"


# =============================================================================
# HELPERS
# =============================================================================


class FixedClock:
    """Clock that starts at a fixed instant and advances one second per call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2024, 5, 1, 12, 30, 45, 123000, tzinfo=UTC)
        self.step = step
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            value = self.current
            self.current = self.current + self.step
            return value


class EventRecorder:
    """Subscriber that keeps every event it receives."""

    def __init__(self, channel: EventChannel):
        self.submitted: list[ReviewSubmitted] = []
        self.duplicates: list[DuplicateReviewAttempted] = []
        channel.subscribe(ReviewSubmitted, self.submitted.append)
        channel.subscribe(DuplicateReviewAttempted, self.duplicates.append)


def make_review_data(**overrides) -> dict:
    """A valid submission body, with overrides applied."""
    data = {
        "rating": 5,
        "text": "Great!",
        "productId": "p1",
        "walletAddress": WALLET_A,
    }
    data.update(overrides)
    return data


def build_publication_client(
    handler: Callable[[httpx.Request], httpx.Response],
    local_enabled: bool = True,
    pinata_key: str = "",
    pinata_secret: str = "",
    web3storage_key: str = "",
) -> PublicationClient:
    """PublicationClient whose HTTP traffic is answered by handler."""
    backends = [
        LocalNodeBackend(LOCAL_NODE_URL, enabled=local_enabled),
        PinataBackend(pinata_key, pinata_secret, PINATA_URL),
        Web3StorageBackend(web3storage_key, WEB3STORAGE_URL),
    ]
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return PublicationClient(backends, http_client=http_client, timeout=5.0, verify_timeout=2.0)


# =============================================================================
# CLOCK AND EVENTS
# =============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def events() -> EventChannel:
    return EventChannel()


@pytest.fixture
def recorder(events: EventChannel) -> EventRecorder:
    return EventRecorder(events)


# =============================================================================
# STORE FIXTURES
# =============================================================================


@pytest.fixture
def memory_store() -> InMemoryReviewStore:
    return InMemoryReviewStore()


@pytest.fixture
def json_store(tmp_path) -> JsonFileReviewStore:
    """JSON store in a fresh temporary directory."""
    return JsonFileReviewStore(tmp_path / "data")


@pytest.fixture
def sql_engine():
    """
    SQLite in-memory engine.

    StaticPool keeps the single connection alive; without it the in-memory
    database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)

    yield engine

    drop_tables(engine)
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine) -> SqlReviewStore:
    return SqlReviewStore(create_session_factory(sql_engine))


# =============================================================================
# PUBLICATION FIXTURES
# =============================================================================


@pytest.fixture
def publication_requests() -> list[httpx.Request]:
    """Requests seen by the mock transport, in order."""
    return []


@pytest.fixture
def publication_client(publication_requests) -> Generator[PublicationClient, None, None]:
    """Publication client whose local node accepts every upload."""

    def handler(request: httpx.Request) -> httpx.Response:
        publication_requests.append(request)
        if request.url.path.endswith("/add"):
            return httpx.Response(200, json={"Name": "review.json", "Hash": "bafylocal123", "Size": "412"})
        if request.url.host == "ipfs.io":
            return httpx.Response(200, json={"reviewId": "published"})
        return httpx.Response(404)

    client = build_publication_client(handler)
    yield client
    client._http_client.close()


# =============================================================================
# SERVICE AND APP FIXTURES
# =============================================================================


@pytest.fixture
def service(
    memory_store: InMemoryReviewStore,
    publication_client: PublicationClient,
    events: EventChannel,
    clock: FixedClock,
) -> ReviewSubmissionService:
    """Submission service over the in-memory store with a working local node."""
    return ReviewSubmissionService(
        store=memory_store,
        publication_client=publication_client,
        events=events,
        clock=clock,
    )


@pytest.fixture
def client(
    service: ReviewSubmissionService,
    publication_client: PublicationClient,
) -> Generator[TestClient, None, None]:
    """
    Test client with the service and publication client overridden.

    Each test gets its own store, so tests don't affect each other.
    """
    app.dependency_overrides[get_review_service] = lambda: service
    app.dependency_overrides[get_publication_client] = lambda: publication_client

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
