"""
AI Gateway Provider - chat completions client for text and image generation

Talks to an OpenAI-compatible /chat/completions endpoint. Status codes 429
and 402 are mapped to their own error kinds before generic failure handling.
"""
import logging
from typing import Dict, List, Optional

import requests

from core.config import Settings
from core.errors import (
    MissingConfigurationError,
    QuotaExhaustedError,
    RateLimitedError,
    UpstreamGenerationError,
)

logger = logging.getLogger(__name__)


class AIGatewayProvider:
    """
    Generation collaborator client

    Supports:
    - Text chat completion (choices[0].message.content)
    - Image generation (choices[0].message.images[0].image_url.url)
    """

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: str = "https://ai.gateway.lovable.dev/v1",
        timeout: float = 120.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize provider

        Args:
            model: Model identifier sent with every request
            api_key: Gateway API key
            base_url: API base URL
            timeout: Per-request timeout in seconds
            session: Optional requests session (shared connection pool)
        """
        if not api_key:
            raise MissingConfigurationError("AI generation")

        self.model = model
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def for_text(cls, settings: Settings, session: Optional[requests.Session] = None) -> "AIGatewayProvider":
        return cls(
            model=settings.text_model,
            api_key=settings.ai_gateway_api_key,
            base_url=settings.ai_gateway_url,
            timeout=settings.generation_timeout,
            session=session,
        )

    @classmethod
    def for_images(cls, settings: Settings, session: Optional[requests.Session] = None) -> "AIGatewayProvider":
        return cls(
            model=settings.image_model,
            api_key=settings.ai_gateway_api_key,
            base_url=settings.ai_gateway_url,
            timeout=settings.generation_timeout,
            session=session,
        )

    def chat(self, messages: List[Dict[str, str]]) -> str:
        """
        Send a text chat completion request

        Args:
            messages: Ordered list of {'role', 'content'} dicts

        Returns:
            Message content ("" when the model returned none)

        Raises:
            RateLimitedError, QuotaExhaustedError, UpstreamGenerationError
        """
        data = self._post({"model": self.model, "messages": messages})
        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError):
            return ""
        return message.get("content") or ""

    def generate_image(self, prompt: str) -> Optional[str]:
        """
        Request a single image

        Args:
            prompt: User instruction for the image

        Returns:
            Data URI of the first image, or None if the response carried none
        """
        data = self._post({
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "modalities": ["image", "text"],
        })
        try:
            return data["choices"][0]["message"]["images"][0]["image_url"]["url"]
        except (KeyError, IndexError, TypeError):
            return None

    def _post(self, payload: Dict) -> Dict:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"AI gateway transport error: {e}")
            raise UpstreamGenerationError() from e

        if response.status_code == 429:
            raise RateLimitedError()
        if response.status_code == 402:
            raise QuotaExhaustedError()
        if not response.ok:
            logger.error(f"AI gateway error: {response.status_code} {response.text}")
            raise UpstreamGenerationError(status=response.status_code, body=response.text)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"AI gateway returned a non-JSON body: {response.text[:200]}")
            raise UpstreamGenerationError(status=response.status_code, body=response.text) from e
