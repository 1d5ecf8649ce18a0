"""
Review Store Tests

The same contract is run against every adapter (memory, json, sql):
- Insert and lookup by pair, hash and id
- Duplicate (wallet, product) rejection, case-insensitive on the wallet
- Newest-first listings
- Vendor responses
- Submission metadata log

Plus adapter-specific behaviour: JSON persistence across instances and
corrupt files, SQL unique constraint and database errors, and concurrent
inserts for the thread-safe adapters.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import text

from reviewchain.exceptions import DuplicateReviewError, StorageError
from reviewchain.schemas.publication import PublicationResult
from reviewchain.schemas.review import StoredReview
from reviewchain.schemas.submission import SubmissionRecordEntry
from reviewchain.stores import JsonFileReviewStore

from tests.conftest import WALLET_A, WALLET_B

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


# =============================================================================
# Helper Functions
# =============================================================================


def make_review(
    review_id: str = "r1",
    wallet: str = WALLET_A,
    product_id: str = "p1",
    rating: int = 5,
    offset_seconds: int = 0,
) -> StoredReview:
    return StoredReview(
        review_id=review_id,
        rating=rating,
        text=f"Review {review_id}",
        product_id=product_id,
        wallet_address=wallet,
        timestamp=BASE_TIME + timedelta(seconds=offset_seconds),
        review_hash=f"hash-{review_id}",
        content_hash=f"Qm{review_id}",
        publication=PublicationResult(success=False, error="Publication disabled"),
    )


def make_record(
    review_id: str, offset_seconds: int = 0, event_emitted: bool = True
) -> SubmissionRecordEntry:
    return SubmissionRecordEntry(
        review_id=review_id,
        product_id="p1",
        wallet=WALLET_A,
        timestamp=BASE_TIME + timedelta(seconds=offset_seconds),
        review_hash=f"hash-{review_id}",
        content_hash=f"Qm{review_id}",
        client_ip="127.0.0.1",
        event_emitted=event_emitted,
        publication=PublicationResult(success=True, remote_id="bafy", backend="local-ipfs"),
    )


@pytest.fixture(params=["memory_store", "json_store", "sql_store"])
def store(request):
    """Each contract test runs once per adapter."""
    return request.getfixturevalue(request.param)


# =============================================================================
# Store Contract
# =============================================================================


class TestInsertAndLookup:
    """Tests for insert and the lookup operations."""

    def test_insert_then_find_by_pair(self, store):
        review = make_review()
        store.insert(review)

        found = store.find_by_wallet_and_product(WALLET_A, "p1")

        assert found is not None
        assert found.review_id == "r1"
        assert found.timestamp == review.timestamp
        assert found.publication.error == "Publication disabled"

    def test_find_by_pair_is_case_insensitive(self, store):
        store.insert(make_review())

        assert store.find_by_wallet_and_product(WALLET_A.upper().replace("0X", "0x"), "p1")

    def test_find_missing_pair_returns_none(self, store):
        assert store.find_by_wallet_and_product(WALLET_A, "p1") is None

    def test_find_by_hash(self, store):
        store.insert(make_review("r1"))
        store.insert(make_review("r2", wallet=WALLET_B))

        assert store.find_by_review_hash("hash-r2").review_id == "r2"
        assert store.find_by_review_hash("unknown") is None

    def test_find_by_id(self, store):
        store.insert(make_review("r1"))

        assert store.find_by_id("r1").product_id == "p1"
        assert store.find_by_id("missing") is None


class TestDuplicateRejection:
    """The store enforces one review per (wallet, product)."""

    def test_second_insert_for_pair_is_rejected(self, store):
        original = make_review("r1", rating=5)
        store.insert(original)

        with pytest.raises(DuplicateReviewError) as exc_info:
            store.insert(make_review("r2", rating=1))

        assert exc_info.value.existing is not None
        assert exc_info.value.existing.review_id == "r1"
        assert exc_info.value.existing.rating == 5

    def test_duplicate_check_ignores_wallet_case(self, store):
        store.insert(make_review("r1", wallet="0x" + "ab" * 20))

        with pytest.raises(DuplicateReviewError):
            store.insert(make_review("r2", wallet="0x" + "AB" * 20))

    def test_same_wallet_other_product_is_allowed(self, store):
        store.insert(make_review("r1", product_id="p1"))
        store.insert(make_review("r2", product_id="p2"))

        assert len(store.list_all()) == 2

    def test_other_wallet_same_product_is_allowed(self, store):
        store.insert(make_review("r1", wallet=WALLET_A))
        store.insert(make_review("r2", wallet=WALLET_B))

        assert len(store.list_by_product("p1")) == 2

    def test_rejected_insert_leaves_original_unchanged(self, store):
        store.insert(make_review("r1", rating=5))

        with pytest.raises(DuplicateReviewError):
            store.insert(make_review("r2", rating=1))

        reviews = store.list_all()
        assert [r.review_id for r in reviews] == ["r1"]
        assert reviews[0].rating == 5


class TestListings:
    """Tests for list_by_product and list_all ordering."""

    def test_list_by_product_newest_first(self, store):
        store.insert(make_review("old", wallet=WALLET_A, offset_seconds=0))
        store.insert(make_review("new", wallet=WALLET_B, offset_seconds=10))
        store.insert(make_review("other", wallet=WALLET_A, product_id="p2", offset_seconds=20))

        reviews = store.list_by_product("p1")

        assert [r.review_id for r in reviews] == ["new", "old"]

    def test_list_by_unknown_product_is_empty(self, store):
        assert store.list_by_product("nope") == []

    def test_list_all_newest_first(self, store):
        store.insert(make_review("a", wallet=WALLET_A, offset_seconds=5))
        store.insert(make_review("b", wallet=WALLET_B, offset_seconds=1))
        store.insert(make_review("c", wallet=WALLET_A, product_id="p2", offset_seconds=9))

        assert [r.review_id for r in store.list_all()] == ["c", "a", "b"]

    def test_same_timestamp_lists_later_insert_first(self, store):
        store.insert(make_review("first", wallet=WALLET_A))
        store.insert(make_review("second", wallet=WALLET_B))

        assert [r.review_id for r in store.list_by_product("p1")] == ["second", "first"]
        assert [r.review_id for r in store.list_all()] == ["second", "first"]


class TestVendorResponse:
    """Tests for set_vendor_response."""

    def test_sets_only_response_fields(self, store):
        original = make_review()
        store.insert(original)
        responded_at = BASE_TIME + timedelta(hours=1)

        updated = store.set_vendor_response("r1", "Thanks!", responded_at)

        assert updated.vendor_response == "Thanks!"
        assert updated.response_timestamp == responded_at
        assert updated.review_hash == original.review_hash
        assert updated.timestamp == original.timestamp
        assert store.find_by_id("r1").vendor_response == "Thanks!"

    def test_response_replaces_previous(self, store):
        store.insert(make_review())
        store.set_vendor_response("r1", "First", BASE_TIME)
        store.set_vendor_response("r1", "Second", BASE_TIME + timedelta(minutes=1))

        assert store.find_by_id("r1").vendor_response == "Second"

    def test_unknown_review_returns_none(self, store):
        assert store.set_vendor_response("missing", "Thanks!", BASE_TIME) is None


class TestMetadataLog:
    """Tests for append_metadata and list_all_metadata."""

    def test_append_and_list_newest_first(self, store):
        store.append_metadata(make_record("r1", offset_seconds=0))
        store.append_metadata(make_record("r2", offset_seconds=30))

        records = store.list_all_metadata()

        assert [r.review_id for r in records] == ["r2", "r1"]
        assert records[0].client_ip == "127.0.0.1"
        assert records[0].publication.remote_id == "bafy"

    def test_same_timestamp_lists_later_append_first(self, store):
        store.append_metadata(make_record("r1"))
        store.append_metadata(make_record("r2"))

        assert [r.review_id for r in store.list_all_metadata()] == ["r2", "r1"]

    def test_event_emitted_flag_round_trips(self, store):
        store.append_metadata(make_record("r1", event_emitted=True))
        store.append_metadata(make_record("r2", offset_seconds=1, event_emitted=False))

        records = {r.review_id: r for r in store.list_all_metadata()}

        assert records["r1"].event_emitted is True
        assert records["r2"].event_emitted is False
        assert records["r1"].model_dump(by_alias=True)["eventEmitted"] is True

    def test_empty_log(self, store):
        assert store.list_all_metadata() == []


# =============================================================================
# JSON Store
# =============================================================================


class TestJsonFileStore:
    """Tests specific to the JSON file adapter."""

    def test_creates_empty_files(self, tmp_path):
        store = JsonFileReviewStore(tmp_path / "fresh")

        assert store.reviews_file.read_text(encoding="utf-8").strip() == "[]"
        assert store.metadata_file.read_text(encoding="utf-8").strip() == "[]"

    def test_data_survives_new_instance(self, tmp_path):
        JsonFileReviewStore(tmp_path).insert(make_review("r1"))

        reopened = JsonFileReviewStore(tmp_path)

        assert reopened.find_by_id("r1") is not None
        with pytest.raises(DuplicateReviewError):
            reopened.insert(make_review("r2"))

    def test_files_use_camel_case(self, json_store):
        json_store.insert(make_review("r1"))

        content = json_store.reviews_file.read_text(encoding="utf-8")

        assert '"walletAddress"' in content
        assert '"timestamp": "2024-05-01T12:00:00.000Z"' in content

    def test_corrupt_file_raises_storage_error(self, json_store):
        json_store.reviews_file.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            json_store.list_all()

        assert exc_info.value.error

    def test_non_list_file_raises_storage_error(self, json_store):
        json_store.reviews_file.write_text('{"reviews": []}', encoding="utf-8")

        with pytest.raises(StorageError):
            json_store.insert(make_review())

    def test_no_temporary_files_left_behind(self, json_store):
        json_store.insert(make_review("r1"))
        json_store.append_metadata(make_record("r1"))

        leftovers = [p.name for p in json_store.data_dir.iterdir() if p.suffix == ".tmp"]

        assert leftovers == []


# =============================================================================
# SQL Store
# =============================================================================


class TestSqlStore:
    """Tests specific to the SQL adapter."""

    def test_timestamps_come_back_timezone_aware(self, sql_store):
        sql_store.insert(make_review())

        found = sql_store.find_by_id("r1")

        assert found.timestamp.tzinfo is not None
        assert found.timestamp == BASE_TIME

    def test_wallet_stored_lower_case(self, sql_store, sql_engine):
        sql_store.insert(make_review(wallet="0x" + "AB" * 20))

        with sql_engine.connect() as conn:
            stored = conn.execute(text("SELECT wallet_address FROM reviews")).scalar_one()

        assert stored == "0x" + "ab" * 20

    def test_other_integrity_error_is_storage_error(self, sql_store):
        """A clash on review_id (not the wallet/product pair) is a storage failure."""
        sql_store.insert(make_review("r1", wallet=WALLET_A))

        with pytest.raises(StorageError):
            sql_store.insert(make_review("r1", wallet=WALLET_B))

    def test_database_failure_is_storage_error(self, sql_store, sql_engine):
        with sql_engine.begin() as conn:
            conn.execute(text("DROP TABLE reviews"))

        with pytest.raises(StorageError) as exc_info:
            sql_store.list_all()

        assert "no such table" in exc_info.value.error


# =============================================================================
# Concurrency
# =============================================================================


class TestConcurrentInserts:
    """Racing inserts for the same pair: exactly one wins."""

    @pytest.mark.parametrize("store_fixture", ["memory_store", "json_store"])
    def test_only_one_insert_wins(self, request, store_fixture):
        store = request.getfixturevalue(store_fixture)

        def attempt(i: int) -> str:
            try:
                store.insert(make_review(f"r{i}", rating=(i % 5) + 1))
                return "accepted"
            except DuplicateReviewError:
                return "duplicate"

        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(pool.map(attempt, range(20)))

        assert outcomes.count("accepted") == 1
        assert outcomes.count("duplicate") == 19
        assert len(store.list_all()) == 1
