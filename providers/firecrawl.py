"""
Web Context Fetcher
===================

Best-effort web search used to ground tabular generation in real data.
A single search call, never retried. Any failure degrades to an empty
result list; the reason only shows up in the logs.
"""
import logging
from typing import List, Optional

import httpx

from core.config import Settings
from core.schemas import WebSearchResult

logger = logging.getLogger(__name__)

RESULT_LIMIT = 5
MAX_RESULT_CHARS = 800
MAX_CONTEXT_CHARS = 3000
QUERY_SUFFIX = "sample data examples"


class WebContextFetcher:
    """
    Firecrawl search client

    Example:
        >>> fetcher = WebContextFetcher(api_key="fc-...")
        >>> results = fetcher.search("50 employee records")
        >>> context = format_context(results)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://api.firecrawl.dev/v1",
        timeout: float = 20.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "WebContextFetcher":
        return cls(
            api_key=settings.firecrawl_api_key,
            base_url=settings.firecrawl_url,
            timeout=settings.search_timeout,
        )

    def search(self, query: str) -> List[WebSearchResult]:
        """
        Search the web for reference data

        Args:
            query: User prompt

        Returns:
            Up to 5 results, content truncated to 800 chars; [] on any failure
        """
        if not self.api_key:
            logger.warning("FIRECRAWL_API_KEY not set, returning empty results")
            return []

        payload = {
            "query": f"{query} {QUERY_SUFFIX}",
            "limit": RESULT_LIMIT,
            "scrapeOptions": {"formats": ["markdown"]},
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(f"{self.base_url}/search", json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Web search failed: {e}")
            return []

        if not response.is_success:
            logger.error(f"Web search error: {response.status_code} {response.text}")
            return []

        try:
            items = response.json().get("data") or []
        except (ValueError, AttributeError) as e:
            logger.error(f"Web search returned an unreadable body: {e}")
            return []

        if not isinstance(items, list):
            logger.error(f"Web search returned unexpected data: {type(items).__name__}")
            return []

        results = []
        for item in items[:RESULT_LIMIT]:
            if not isinstance(item, dict):
                continue
            results.append(WebSearchResult(
                title=_text(item.get("title")),
                url=_text(item.get("url")),
                content=_text(item.get("markdown"))[:MAX_RESULT_CHARS],
            ))

        logger.info(f"Web search returned {len(results)} results")
        return results


def _text(value) -> str:
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


def format_context(results: List[WebSearchResult], max_chars: int = MAX_CONTEXT_CHARS) -> str:
    """Join results into one context block, truncated to max_chars"""
    context = "\n\n".join(f"Source: {r.title}\n{r.content}" for r in results)
    return context[:max_chars]
