"""
Supabase Collaborators
======================

Storage, PostgREST and Auth over plain REST calls.
"""
import logging
from typing import Optional

import requests

from core.config import Settings
from core.errors import MissingConfigurationError, PersistenceError, UnauthenticatedError
from core.schemas import DatasetRecord
from storage.base import AuthProvider, BlobStore, HistoryStore

logger = logging.getLogger(__name__)


class _SupabaseClient:
    """Shared base URL, key headers and session"""

    def __init__(self, url: str, key: str, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.url = url.rstrip("/")
        self.key = key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, **extra) -> dict:
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
        }
        headers.update(extra)
        return headers


def _bucket_ids(response) -> set:
    """
    Bucket ids from a bucket listing response

    Raises:
        ValueError: The body is not a JSON list of bucket objects
    """
    buckets = response.json()
    if not isinstance(buckets, list) or not all(isinstance(b, dict) for b in buckets):
        raise ValueError("unexpected bucket listing")
    return {b.get("id") for b in buckets}


class SupabaseBlobStore(_SupabaseClient, BlobStore):
    """Supabase Storage backed blob store"""

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseBlobStore":
        settings.require_supabase("Image storage")
        return cls(settings.supabase_url, settings.supabase_service_role_key)

    def ensure_bucket(self, bucket: str, public: bool = True) -> None:
        try:
            response = self.session.get(
                f"{self.url}/storage/v1/bucket",
                headers=self._headers(),
                timeout=self.timeout
            )
            response.raise_for_status()
            if bucket in _bucket_ids(response):
                return

            logger.info(f"Creating storage bucket '{bucket}' (public={public})")
            response = self.session.post(
                f"{self.url}/storage/v1/bucket",
                json={"id": bucket, "name": bucket, "public": public},
                headers=self._headers(),
                timeout=self.timeout
            )
            # 409: created concurrently by another request
            if response.status_code != 409:
                response.raise_for_status()
        except (requests.RequestException, ValueError) as e:
            raise PersistenceError(f"Could not provision bucket '{bucket}': {e}") from e

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        try:
            response = self.session.post(
                f"{self.url}/storage/v1/object/{bucket}/{path}",
                data=data,
                headers=self._headers(**{"Content-Type": content_type}),
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise PersistenceError(f"Upload failed for {path}: {e}") from e

        if not response.ok:
            raise PersistenceError(f"Upload failed for {path}: {response.status_code} {response.text}")

        return self.public_url(bucket, path)

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket}/{path}"


class SupabaseHistoryStore(_SupabaseClient, HistoryStore):
    """Appends DatasetRecord rows to the `datasets` table"""

    table = "datasets"

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseHistoryStore":
        settings.require_supabase("Dataset history")
        return cls(settings.supabase_url, settings.supabase_service_role_key)

    def insert(self, record: DatasetRecord) -> None:
        row = {
            "id": record.id,
            "user_id": record.owner_id,
            "prompt": record.prompt,
            "format": record.format,
            "data": record.data,
            "row_count": record.row_count,
            "source_mode": record.source_mode.value,
            "created_at": record.created_at.isoformat(),
        }
        try:
            response = self.session.post(
                f"{self.url}/rest/v1/{self.table}",
                json=row,
                headers=self._headers(Prefer="return=minimal"),
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise PersistenceError(f"Could not save dataset history: {e}") from e

        if not response.ok:
            raise PersistenceError(
                f"Could not save dataset history: {response.status_code} {response.text}"
            )


class SupabaseAuthProvider(_SupabaseClient, AuthProvider):
    """Resolves user access tokens via /auth/v1/user"""

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseAuthProvider":
        key = settings.supabase_anon_key or settings.supabase_service_role_key
        if not settings.supabase_url or not key:
            raise MissingConfigurationError("Authentication")
        return cls(settings.supabase_url, key)

    def get_user_id(self, token: str) -> str:
        if not token:
            raise UnauthenticatedError()

        headers = self._headers()
        headers["Authorization"] = f"Bearer {token}"
        try:
            response = self.session.get(f"{self.url}/auth/v1/user", headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Auth lookup failed: {e}")
            raise UnauthenticatedError() from e

        if not response.ok:
            raise UnauthenticatedError()

        try:
            user_id = response.json().get("id")
        except (ValueError, AttributeError) as e:
            logger.error(f"Auth lookup returned an unreadable body: {e}")
            raise UnauthenticatedError() from e
        if not user_id or not isinstance(user_id, str):
            raise UnauthenticatedError()
        return user_id
