"""
Collaborator adapters: blob storage, dataset history, auth
"""
from .base import AuthProvider, BlobStore, HistoryStore
from .memory import InMemoryBlobStore, InMemoryHistoryStore, StaticAuthProvider
from .supabase import SupabaseAuthProvider, SupabaseBlobStore, SupabaseHistoryStore

__all__ = [
    "AuthProvider",
    "BlobStore",
    "HistoryStore",
    "InMemoryBlobStore",
    "InMemoryHistoryStore",
    "StaticAuthProvider",
    "SupabaseAuthProvider",
    "SupabaseBlobStore",
    "SupabaseHistoryStore",
]
