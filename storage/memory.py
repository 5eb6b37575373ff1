"""
In-memory collaborators for local runs and tests.
"""
import threading
from typing import Dict, List, Optional, Set, Tuple

from core.errors import PersistenceError, UnauthenticatedError
from core.schemas import DatasetRecord
from storage.base import AuthProvider, BlobStore, HistoryStore


class InMemoryBlobStore(BlobStore):
    def __init__(self, base_url: str = "memory://", fail_paths: Optional[Set[str]] = None):
        self.base_url = base_url
        self.fail_paths = fail_paths or set()
        self.buckets: Dict[str, bool] = {}
        self.objects: Dict[Tuple[str, str], Tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def ensure_bucket(self, bucket: str, public: bool = True) -> None:
        with self._lock:
            self.buckets.setdefault(bucket, public)

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        if bucket not in self.buckets:
            raise PersistenceError(f"Bucket not found: {bucket}")
        if path in self.fail_paths:
            raise PersistenceError(f"Upload rejected: {path}")
        with self._lock:
            self.objects[(bucket, path)] = (data, content_type)
        return self.public_url(bucket, path)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}{bucket}/{path}"


class InMemoryHistoryStore(HistoryStore):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.records: List[DatasetRecord] = []

    def insert(self, record: DatasetRecord) -> None:
        if self.fail:
            raise PersistenceError("History store unavailable")
        self.records.append(record)


class StaticAuthProvider(AuthProvider):
    """Maps fixed tokens to user ids"""

    def __init__(self, tokens: Dict[str, str]):
        self.tokens = tokens

    def get_user_id(self, token: str) -> str:
        user_id = self.tokens.get(token or "")
        if not user_id:
            raise UnauthenticatedError()
        return user_id
