"""
Collaborator Interfaces
=======================

Abstract seams for the external services the generators write to.
"""
from abc import ABC, abstractmethod

from core.schemas import DatasetRecord


class BlobStore(ABC):
    """Public object storage for generated images"""

    @abstractmethod
    def ensure_bucket(self, bucket: str, public: bool = True) -> None:
        """Create the bucket if it does not exist. Idempotent."""
        pass

    @abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        """Public URL an object at `path` is (or would be) served from"""
        pass

    @abstractmethod
    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """
        Store an object.

        Returns:
            Public URL of the stored object

        Raises:
            PersistenceError: If the store rejects the upload
        """
        pass


class HistoryStore(ABC):
    """Insert-only sink for DatasetRecord rows"""

    @abstractmethod
    def insert(self, record: DatasetRecord) -> None:
        pass


class AuthProvider(ABC):
    """Resolves a bearer token to the owning user id"""

    @abstractmethod
    def get_user_id(self, token: str) -> str:
        """
        Raises:
            UnauthenticatedError: If the token is missing or invalid
        """
        pass
