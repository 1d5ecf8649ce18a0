"""
Content Addressing Tests

Tests for the review hash and the local content address:
- Determinism and sensitivity to every input
- Timestamp rendering used inside the hash
- Canonical JSON (key order independence)
"""

import hashlib
from datetime import UTC, datetime, timedelta, timezone

import pytest

from reviewchain.services.hashing import (
    CONTENT_ADDRESS_LENGTH,
    canonical_json,
    compute_content_address,
    compute_review_hash,
)
from reviewchain.utils.timestamps import format_timestamp, utc_now

from tests.conftest import WALLET_A, WALLET_B

TIMESTAMP = datetime(2024, 5, 1, 12, 30, 45, 123000, tzinfo=UTC)


# =============================================================================
# Review Hash
# =============================================================================


class TestReviewHash:
    """Tests for compute_review_hash."""

    def test_hash_is_deterministic(self):
        """Same inputs give the same hash."""
        first = compute_review_hash(5, "Great!", "p1", WALLET_A, TIMESTAMP)
        second = compute_review_hash(5, "Great!", "p1", WALLET_A, TIMESTAMP)

        assert first == second
        assert len(first) == 64
        assert first == first.lower()

    def test_hash_matches_documented_construction(self):
        """The hash is SHA-256 over rating-text-productId-wallet-timestamp."""
        expected = hashlib.sha256(
            f"5-Great!-p1-{WALLET_A}-2024-05-01T12:30:45.123Z".encode()
        ).hexdigest()

        assert compute_review_hash(5, "Great!", "p1", WALLET_A, TIMESTAMP) == expected

    def test_datetime_and_rendered_timestamp_agree(self):
        """A datetime and its canonical rendering hash identically."""
        assert compute_review_hash(4, "ok", "p1", WALLET_A, TIMESTAMP) == compute_review_hash(
            4, "ok", "p1", WALLET_A, "2024-05-01T12:30:45.123Z"
        )

    @pytest.mark.parametrize(
        "changed",
        [
            {"rating": 4},
            {"text": "Great"},
            {"product_id": "p2"},
            {"wallet_address": WALLET_B},
            {"timestamp": TIMESTAMP + timedelta(milliseconds=1)},
        ],
    )
    def test_changing_any_field_changes_hash(self, changed):
        """Each input contributes to the hash."""
        base = {
            "rating": 5,
            "text": "Great!",
            "product_id": "p1",
            "wallet_address": WALLET_A,
            "timestamp": TIMESTAMP,
        }
        original = compute_review_hash(**base)

        assert compute_review_hash(**{**base, **changed}) != original

    def test_separator_is_not_escaped(self):
        """Moving a "-" across a field boundary keeps the hash."""
        assert compute_review_hash(5, "a-b", "c", WALLET_A, TIMESTAMP) == compute_review_hash(
            5, "a", "b-c", WALLET_A, TIMESTAMP
        )


# =============================================================================
# Content Address
# =============================================================================


class TestContentAddress:
    """Tests for compute_content_address."""

    def test_content_address_shape(self):
        """Qm prefix followed by 44 hex characters."""
        address = compute_content_address({"rating": 5, "text": "Great!"})

        assert address.startswith("Qm")
        assert len(address) == CONTENT_ADDRESS_LENGTH
        int(address[2:], 16)

    def test_key_order_does_not_matter(self):
        """Canonical JSON sorts keys."""
        first = compute_content_address({"rating": 5, "text": "Great!", "productId": "p1"})
        second = compute_content_address({"productId": "p1", "text": "Great!", "rating": 5})

        assert first == second

    def test_different_payloads_differ(self):
        assert compute_content_address({"rating": 5}) != compute_content_address({"rating": 4})

    def test_datetimes_rendered_canonically(self):
        """Datetimes inside the payload use the millisecond Z rendering."""
        encoded = canonical_json({"timestamp": TIMESTAMP})

        assert encoded == b'{"timestamp":"2024-05-01T12:30:45.123Z"}'

    def test_unserializable_value_raises(self):
        with pytest.raises(TypeError):
            canonical_json({"value": object()})


# =============================================================================
# Timestamps
# =============================================================================


class TestTimestamps:
    """Tests for the timestamp helpers."""

    def test_utc_now_has_millisecond_precision(self):
        now = utc_now()

        assert now.tzinfo is not None
        assert now.microsecond % 1000 == 0

    def test_format_converts_to_utc(self):
        """Offsets are converted to UTC before rendering."""
        local = datetime(2024, 5, 1, 14, 30, 45, 123000, tzinfo=timezone(timedelta(hours=2)))

        assert format_timestamp(local) == "2024-05-01T12:30:45.123Z"

    def test_format_treats_naive_as_utc(self):
        naive = datetime(2024, 5, 1, 12, 30, 45, 7000)

        assert format_timestamp(naive) == "2024-05-01T12:30:45.007Z"
