"""
FastAPI dependencies wiring settings to providers, stores and generators.

Tests replace these through app.dependency_overrides.
"""
from functools import lru_cache
from typing import Optional

import requests
from fastapi import Depends, Header

from api.api_utils import bearer_token
from core.config import Settings
from generators.images import ImageGenerator
from generators.tabular import TabularGenerator
from providers.ai_gateway import AIGatewayProvider
from providers.firecrawl import WebContextFetcher
from storage.base import AuthProvider, BlobStore, HistoryStore
from storage.supabase import SupabaseAuthProvider, SupabaseBlobStore, SupabaseHistoryStore


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()


def get_fetcher(settings: Settings = Depends(get_settings)) -> WebContextFetcher:
    return WebContextFetcher.from_settings(settings)


def get_http_session() -> requests.Session:
    return requests.Session()


def get_history_store(settings: Settings = Depends(get_settings)) -> Optional[HistoryStore]:
    if not settings.supabase_url or not settings.supabase_service_role_key:
        return None
    return SupabaseHistoryStore.from_settings(settings)


def get_blob_store(settings: Settings = Depends(get_settings)) -> BlobStore:
    return SupabaseBlobStore.from_settings(settings)


def get_auth_provider(settings: Settings = Depends(get_settings)) -> AuthProvider:
    return SupabaseAuthProvider.from_settings(settings)


def get_owner_id(
    authorization: Optional[str] = Header(None),
    auth: AuthProvider = Depends(get_auth_provider)
) -> str:
    return auth.get_user_id(bearer_token(authorization))


def get_tabular_generator(
    settings: Settings = Depends(get_settings),
    fetcher: WebContextFetcher = Depends(get_fetcher),
    history: Optional[HistoryStore] = Depends(get_history_store)
) -> TabularGenerator:
    return TabularGenerator(
        provider=AIGatewayProvider.for_text(settings),
        fetcher=fetcher,
        history=history,
    )


def get_image_generator(
    settings: Settings = Depends(get_settings),
    blob_store: BlobStore = Depends(get_blob_store)
) -> ImageGenerator:
    return ImageGenerator(
        provider=AIGatewayProvider.for_images(settings),
        blob_store=blob_store,
        bucket=settings.image_bucket,
    )
