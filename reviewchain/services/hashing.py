"""
Content Addressing Service

Pure functions that fingerprint a review. No I/O, no state.

Two different digests are produced:

- review hash: SHA-256 over "rating-text-productId-walletAddress-timestamp".
  It is the verification token handed to the reviewer; anyone holding the
  disclosed fields can recompute it and compare.
- content address: "Qm" + the first 44 hex characters of SHA-256 over the
  canonical JSON of the payload. It is a LOCAL fingerprint that merely looks
  like an IPFS CID. It has no relationship to the identifier a real storage
  network assigns to the same bytes and must never be used to fetch content
  from a gateway; use the remote id returned by the publication client.
"""

import hashlib
import json
from datetime import datetime
from typing import Any

from reviewchain.utils.timestamps import format_timestamp

REVIEW_HASH_SEPARATOR = "-"
CONTENT_ADDRESS_PREFIX = "Qm"
CONTENT_ADDRESS_LENGTH = 46


def _timestamp_text(timestamp: datetime | str) -> str:
    if isinstance(timestamp, datetime):
        return format_timestamp(timestamp)
    return timestamp


def _json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return format_timestamp(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonical_json(payload: Any) -> bytes:
    """Serialize a payload with sorted keys and no insignificant whitespace."""
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_default,
    ).encode("utf-8")


def compute_review_hash(
    rating: int,
    text: str,
    product_id: str,
    wallet_address: str,
    timestamp: datetime | str,
) -> str:
    """
    Compute the verification hash of a review tuple.

    Fields are joined with "-" and not escaped, so a "-" moved from the end
    of one field to the start of the next gives the same hash
    (text "a-b" with product "c" and text "a" with product "b-c"). A
    matching hash proves the joined string, not how it splits into fields;
    compare the fields themselves as well when verifying a review.

    Args:
        rating: Star rating (1-5)
        text: Review body, exactly as stored
        product_id: Reviewed product
        wallet_address: Lower-cased wallet address
        timestamp: Acceptance time, either a datetime or its canonical
            "YYYY-MM-DDTHH:MM:SS.mmmZ" rendering

    Returns:
        64-character lowercase hex SHA-256 digest
    """
    canonical = REVIEW_HASH_SEPARATOR.join(
        [str(rating), text, product_id, wallet_address, _timestamp_text(timestamp)]
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_content_address(payload: Any) -> str:
    """
    Compute the local content fingerprint of a payload.

    Returns:
        "Qm" followed by 44 hex characters
    """
    digest = hashlib.sha256(canonical_json(payload)).hexdigest()
    return (CONTENT_ADDRESS_PREFIX + digest)[:CONTENT_ADDRESS_LENGTH]
