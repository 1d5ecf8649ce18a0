"""
JSON file Review Store.

Flat-file persistence for single-process deployments:

    <data_dir>/reviews.json   - list of reviews (camelCase, as served by the API)
    <data_dir>/metadata.json  - list of submission records

Each write rewrites the whole file: read, modify, write to a temporary file in
the same directory, then os.replace() it over the original so a crash never
leaves a half-written file behind. One lock per data directory serializes the
read-modify-write cycle for every store instance in the process. The lock
does not extend to other processes; run a single worker with this backend.
"""

import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from reviewchain.exceptions import DuplicateReviewError, StorageError
from reviewchain.schemas.review import StoredReview
from reviewchain.schemas.submission import SubmissionRecordEntry
from reviewchain.stores.base import ReviewStore, newest_first

logger = logging.getLogger(__name__)

_directory_locks: dict[str, threading.RLock] = {}
_registry_lock = threading.Lock()


def _lock_for(directory: Path) -> threading.RLock:
    key = str(directory.resolve())
    with _registry_lock:
        if key not in _directory_locks:
            _directory_locks[key] = threading.RLock()
        return _directory_locks[key]


class JsonFileReviewStore(ReviewStore):
    """Review Store backed by two JSON files."""

    name = "json"

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store, creating the directory and empty files if needed.

        Args:
            data_dir: Directory that holds reviews.json and metadata.json

        Raises:
            StorageError: If the directory or files cannot be created
        """
        self.data_dir = Path(data_dir)
        self.reviews_file = self.data_dir / "reviews.json"
        self.metadata_file = self.data_dir / "metadata.json"

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError("Failed to create data directory", str(e)) from e

        self._lock = _lock_for(self.data_dir)
        with self._lock:
            for path in (self.reviews_file, self.metadata_file):
                if not path.exists():
                    self._write_list(path, [])

        logger.info(f"Initialized JsonFileReviewStore with data_dir={self.data_dir}")

    # -------------------------------------------------------------------------
    # File helpers
    # -------------------------------------------------------------------------

    def _read_list(self, path: Path) -> list[dict[str, Any]]:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StorageError(f"Failed to read {path.name}", str(e)) from e

        if not isinstance(data, list):
            raise StorageError(f"Failed to read {path.name}", "expected a JSON list")
        return data

    def _write_list(self, path: Path, items: list[dict[str, Any]]) -> None:
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.data_dir, prefix=f".{path.stem}-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(items, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise StorageError(f"Failed to write {path.name}", str(e)) from e

    def _load_reviews(self) -> list[StoredReview]:
        try:
            return [StoredReview.model_validate(item) for item in self._read_list(self.reviews_file)]
        except ValidationError as e:
            raise StorageError("Malformed review data in reviews.json", str(e)) from e

    def _save_reviews(self, reviews: list[StoredReview]) -> None:
        self._write_list(
            self.reviews_file,
            [r.model_dump(mode="json", by_alias=True) for r in reviews],
        )

    # -------------------------------------------------------------------------
    # ReviewStore
    # -------------------------------------------------------------------------

    def find_by_wallet_and_product(
        self, wallet_address: str, product_id: str
    ) -> StoredReview | None:
        wallet_address = wallet_address.lower()
        with self._lock:
            reviews = self._load_reviews()
        for review in reviews:
            if review.wallet_address.lower() == wallet_address and review.product_id == product_id:
                return review
        return None

    def insert(self, review: StoredReview) -> StoredReview:
        wallet_address = review.wallet_address.lower()
        with self._lock:
            reviews = self._load_reviews()
            for existing in reviews:
                if (
                    existing.wallet_address.lower() == wallet_address
                    and existing.product_id == review.product_id
                ):
                    raise DuplicateReviewError(existing=existing)
            reviews.append(review)
            self._save_reviews(reviews)
        logger.debug(f"Stored review {review.review_id} in {self.reviews_file}")
        return review

    def find_by_review_hash(self, review_hash: str) -> StoredReview | None:
        with self._lock:
            reviews = self._load_reviews()
        return next((r for r in reviews if r.review_hash == review_hash), None)

    def find_by_id(self, review_id: str) -> StoredReview | None:
        with self._lock:
            reviews = self._load_reviews()
        return next((r for r in reviews if r.review_id == review_id), None)

    def list_by_product(self, product_id: str) -> list[StoredReview]:
        with self._lock:
            reviews = self._load_reviews()
        return newest_first([r for r in reviews if r.product_id == product_id])

    def list_all(self) -> list[StoredReview]:
        with self._lock:
            reviews = self._load_reviews()
        return newest_first(reviews)

    def set_vendor_response(
        self, review_id: str, response: str, responded_at: datetime
    ) -> StoredReview | None:
        with self._lock:
            reviews = self._load_reviews()
            for index, review in enumerate(reviews):
                if review.review_id == review_id:
                    updated = review.model_copy(
                        update={
                            "vendor_response": response,
                            "response_timestamp": responded_at,
                        }
                    )
                    reviews[index] = updated
                    self._save_reviews(reviews)
                    return updated
        return None

    def append_metadata(self, record: SubmissionRecordEntry) -> None:
        with self._lock:
            records = self._read_list(self.metadata_file)
            records.append(record.model_dump(mode="json", by_alias=True))
            self._write_list(self.metadata_file, records)

    def list_all_metadata(self) -> list[SubmissionRecordEntry]:
        with self._lock:
            raw = self._read_list(self.metadata_file)
        try:
            records = [SubmissionRecordEntry.model_validate(item) for item in raw]
        except ValidationError as e:
            raise StorageError("Malformed record in metadata.json", str(e)) from e
        return newest_first(records)
