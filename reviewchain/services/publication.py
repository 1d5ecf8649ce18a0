"""
Publication Service

Best-effort replication of review payloads to content-addressable storage.

Three interchangeable backends implement PublicationBackend:
- local-ipfs: the HTTP API of a local IPFS node (no credentials)
- pinata: Pinata pinning service (API key + secret key)
- web3storage: Web3.Storage (API token)

PublicationClient.publish() tries the preferred backend, then the others in
the fixed fallback order, and returns at the first success. It never
raises: when every backend fails the caller gets a failed PublicationResult
with the number of attempts and the last error. Each upload is bounded by
PUBLICATION_TIMEOUT_SECONDS.

Usage:
    from reviewchain.services.publication import PublicationClient

    client = PublicationClient.from_settings(get_settings())
    result = client.publish({"reviewId": "..."}, "review-123.json", "pinata")
    if result.success:
        print(client.gateway_urls(result.remote_id))
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Literal

import httpx

from reviewchain.config import PUBLICATION_BACKENDS, Settings
from reviewchain.exceptions import PublicationError
from reviewchain.schemas.publication import PublicationResult, VerificationResult
from reviewchain.utils.timestamps import format_timestamp, utc_now

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "1.0"

# Public gateways that serve content at <base><remote id>
PATH_GATEWAYS = {
    "ipfs_io": "https://ipfs.io/ipfs/",
    "cloudflare": "https://cloudflare-ipfs.com/ipfs/",
    "dweb": "https://dweb.link/ipfs/",
    "pinata": "https://gateway.pinata.cloud/ipfs/",
}
GatewayName = Literal["ipfs_io", "cloudflare", "dweb", "pinata"]


# =============================================================================
# Backends
# =============================================================================


class PublicationBackend(ABC):
    """
    One content-addressable storage provider.

    attempt_publish() either returns a successful PublicationResult or
    raises: PublicationError for missing credentials and unusable
    responses, httpx.HTTPError for transport failures and timeouts.
    """

    name: str = "abstract"

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the backend has what it needs to attempt an upload."""

    @abstractmethod
    def status(self) -> dict[str, bool]:
        """Configuration flags exposed on the diagnostics endpoint."""

    @abstractmethod
    def attempt_publish(
        self,
        client: httpx.Client,
        document: dict[str, Any],
        filename: str,
        timeout: float,
    ) -> PublicationResult:
        """Upload the document and return the identifier the backend assigned."""

    # -------------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------------

    def _file_part(self, document: dict[str, Any], filename: str) -> tuple[str, bytes, str]:
        content = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
        return (filename, content, "application/json")

    def _parse_response(self, response: httpx.Response) -> dict[str, Any]:
        """Check the status code and decode a JSON object body."""
        if not response.is_success:
            raise PublicationError(
                f"{self.name} returned HTTP {response.status_code}: {response.text[:200]}",
                self.name,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise PublicationError(f"Invalid response from {self.name} API", self.name) from e
        if not isinstance(body, dict):
            raise PublicationError(f"Invalid response from {self.name} API", self.name)
        return body

    def _success(self, remote_id: Any, size: Any) -> PublicationResult:
        if not remote_id or not isinstance(remote_id, str):
            raise PublicationError(f"Invalid response from {self.name} API", self.name)
        return PublicationResult(
            success=True,
            remote_id=remote_id,
            backend=self.name,
            size=size if isinstance(size, int) else None,
        )


class LocalNodeBackend(PublicationBackend):
    """Local IPFS node, reached through its /api/v0/add endpoint."""

    name = "local-ipfs"

    def __init__(self, base_url: str, enabled: bool = True):
        self.base_url = base_url.rstrip("/")
        self.enabled = enabled

    def is_configured(self) -> bool:
        return self.enabled

    def status(self) -> dict[str, bool]:
        return {"enabled": self.enabled}

    def attempt_publish(self, client, document, filename, timeout):
        if not self.enabled:
            raise PublicationError("Local IPFS not enabled", self.name)

        response = client.post(
            f"{self.base_url}/add",
            files={"file": self._file_part(document, filename)},
            timeout=timeout,
        )
        body = self._parse_response(response)
        size = body.get("Size")
        # The node reports Size as a string
        if isinstance(size, str) and size.isdigit():
            size = int(size)
        return self._success(body.get("Hash"), size)


class PinataBackend(PublicationBackend):
    """Pinata pinning service (pinFileToIPFS)."""

    name = "pinata"

    def __init__(self, api_key: str, secret_key: str, base_url: str = "https://api.pinata.cloud"):
        self.api_key = api_key
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")

    def is_configured(self) -> bool:
        return bool(self.api_key and self.secret_key)

    def status(self) -> dict[str, bool]:
        return {
            "configured": self.is_configured(),
            "has_api_key": bool(self.api_key),
            "has_secret_key": bool(self.secret_key),
        }

    def attempt_publish(self, client, document, filename, timeout):
        if not self.is_configured():
            raise PublicationError(
                "Pinata API credentials not configured. "
                "Set PINATA_API_KEY and PINATA_SECRET_KEY environment variables.",
                self.name,
            )

        pinata_metadata = {
            "name": filename,
            "keyvalues": {
                "type": "review",
                "timestamp": format_timestamp(utc_now()),
                "productId": document.get("productId") or "unknown",
            },
        }
        pinata_options = {"cidVersion": 1, "wrapWithDirectory": False}

        response = client.post(
            f"{self.base_url}/pinning/pinFileToIPFS",
            headers={"Authorization": f"Bearer {self.api_key}"},
            files={"file": self._file_part(document, filename)},
            data={
                "pinataMetadata": json.dumps(pinata_metadata),
                "pinataOptions": json.dumps(pinata_options),
            },
            timeout=timeout,
        )
        body = self._parse_response(response)
        return self._success(body.get("IpfsHash"), body.get("PinSize"))


class Web3StorageBackend(PublicationBackend):
    """Web3.Storage upload API."""

    name = "web3storage"

    def __init__(self, api_key: str, base_url: str = "https://api.web3.storage"):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def status(self) -> dict[str, bool]:
        return {
            "configured": self.is_configured(),
            "has_api_key": bool(self.api_key),
        }

    def attempt_publish(self, client, document, filename, timeout):
        if not self.is_configured():
            raise PublicationError(
                "Web3.Storage API key not configured. Set WEB3STORAGE_API_KEY environment variable.",
                self.name,
            )

        response = client.post(
            f"{self.base_url}/upload",
            headers={"Authorization": f"Bearer {self.api_key}"},
            files={"file": self._file_part(document, filename)},
            timeout=timeout,
        )
        body = self._parse_response(response)
        return self._success(body.get("cid"), body.get("size"))


# =============================================================================
# Client
# =============================================================================


class PublicationClient:
    """
    Publishes payloads through an ordered list of backends.

    The order of the backends list is the fallback order.
    """

    def __init__(
        self,
        backends: list[PublicationBackend],
        http_client: httpx.Client | None = None,
        timeout: float = 30.0,
        verify_timeout: float = 10.0,
        default_gateway: str = "https://ipfs.io/ipfs/",
    ):
        """
        Args:
            backends: Backends in fallback order
            http_client: Shared HTTP client; one is created (and owned) if omitted
            timeout: Per-attempt upload timeout in seconds
            verify_timeout: Gateway read-back timeout in seconds
            default_gateway: Gateway base URL used by verify()
        """
        self.backends = backends
        self.timeout = timeout
        self.verify_timeout = verify_timeout
        self.default_gateway = default_gateway
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.Client | None = None
    ) -> "PublicationClient":
        """Build the client with the three standard backends."""
        backends: list[PublicationBackend] = [
            LocalNodeBackend(settings.ipfs_local_url, enabled=settings.ipfs_local_enabled),
            PinataBackend(
                settings.pinata_api_key,
                settings.pinata_secret_key,
                settings.pinata_base_url,
            ),
            Web3StorageBackend(settings.web3storage_api_key, settings.web3storage_base_url),
        ]
        return cls(
            backends,
            http_client=http_client,
            timeout=settings.publication_timeout_seconds,
            verify_timeout=settings.verify_timeout_seconds,
            default_gateway=settings.default_gateway_url,
        )

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._http_client.close()

    @property
    def backend_names(self) -> list[str]:
        return [backend.name for backend in self.backends]

    def _attempt_order(self, preferred_backend: str) -> list[PublicationBackend]:
        preferred = [b for b in self.backends if b.name == preferred_backend]
        if not preferred:
            logger.warning(
                f"Unknown publication backend '{preferred_backend}', "
                f"using default order {self.backend_names}"
            )
        return preferred + [b for b in self.backends if b.name != preferred_backend]

    def publish(
        self,
        payload: dict[str, Any],
        filename: str = "review.json",
        preferred_backend: str = PUBLICATION_BACKENDS[0],
    ) -> PublicationResult:
        """
        Upload a payload, falling back across backends.

        The uploaded document is the payload plus a "_metadata" block
        (uploadedAt, filename, version).

        Args:
            payload: JSON-serializable payload
            filename: Name given to the uploaded file
            preferred_backend: Backend to try first

        Returns:
            The first successful result, or a failure result carrying the
            attempt count and the last error. Never raises.
        """
        logger.info(f"Publishing {filename} using {preferred_backend}...")

        document = {
            **payload,
            "_metadata": {
                "uploadedAt": format_timestamp(utc_now()),
                "filename": filename,
                "version": DOCUMENT_VERSION,
            },
        }

        attempts = 0
        last_error = "No publication backends configured"
        last_backend: str | None = None

        for backend in self._attempt_order(preferred_backend):
            attempts += 1
            try:
                result = backend.attempt_publish(
                    self._http_client, document, filename, self.timeout
                )
            except httpx.TimeoutException:
                last_error = f"{backend.name} request timed out after {self.timeout}s"
            except httpx.HTTPError as e:
                last_error = f"{backend.name} request failed: {e}"
            except PublicationError as e:
                last_error = e.message
            except Exception as e:
                last_error = f"{backend.name} upload error: {e}"
            else:
                result.attempts = attempts
                if attempts > 1:
                    logger.info(f"Published to {backend.name} (fallback): {result.remote_id}")
                else:
                    logger.info(f"Published to {backend.name}: {result.remote_id}")
                return result

            last_backend = backend.name
            logger.warning(f"{backend.name} upload failed: {last_error}")

        logger.error(f"All publication attempts failed ({attempts} attempts)")
        return PublicationResult(
            success=False,
            backend=last_backend,
            error=f"All publication backends failed. Last error: {last_error}",
            attempts=attempts,
        )

    def verify(self, remote_id: str, gateway_url: str | None = None) -> VerificationResult:
        """
        Read published content back through a gateway.

        Diagnostics only; never used while accepting a review.
        """
        gateway = gateway_url or self.default_gateway
        if not gateway.endswith("/"):
            gateway += "/"

        try:
            response = self._http_client.get(f"{gateway}{remote_id}", timeout=self.verify_timeout)
        except httpx.HTTPError as e:
            return VerificationResult(success=False, hash=remote_id, gateway=gateway, error=str(e))

        if response.status_code != 200 or not response.content:
            return VerificationResult(
                success=False,
                hash=remote_id,
                gateway=gateway,
                error=f"Invalid response from IPFS gateway (HTTP {response.status_code})",
            )

        try:
            content: Any = response.json()
        except ValueError:
            content = response.text

        return VerificationResult(success=True, hash=remote_id, gateway=gateway, content=content)

    @staticmethod
    def gateway_urls(remote_id: str) -> dict[str, str]:
        """Public gateway URLs for a remote identifier."""
        urls = {name: f"{base}{remote_id}" for name, base in PATH_GATEWAYS.items()}
        urls["web3_storage"] = f"https://{remote_id}.ipfs.w3s.link/"
        return urls

    def configuration_status(self) -> dict[str, dict[str, bool]]:
        """Configuration flags per backend, without any network access."""
        return {backend.name: backend.status() for backend in self.backends}

    def has_hosted_backend_configured(self) -> bool:
        """True when any backend other than the local node has credentials."""
        return any(
            backend.is_configured()
            for backend in self.backends
            if not isinstance(backend, LocalNodeBackend)
        )
