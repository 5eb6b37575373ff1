"""
Settings
========

Environment-driven configuration. Values are read once from the process
environment (and a local .env file, if present).
"""
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from core.errors import MissingConfigurationError

load_dotenv()


class Settings(BaseModel):
    """Runtime configuration for providers, stores and the API"""

    ai_gateway_api_key: Optional[str] = Field(None, description="Chat completions gateway key")
    ai_gateway_url: str = Field("https://ai.gateway.lovable.dev/v1", description="Gateway base URL")
    text_model: str = Field("google/gemini-2.5-flash", description="Model for tabular data")
    image_model: str = Field("google/gemini-2.5-flash-image", description="Model for images")
    generation_timeout: float = Field(120.0, description="Per-call timeout in seconds")

    firecrawl_api_key: Optional[str] = Field(None, description="Web search key (optional)")
    firecrawl_url: str = Field("https://api.firecrawl.dev/v1", description="Web search base URL")
    search_timeout: float = Field(20.0, description="Web search timeout in seconds")

    supabase_url: Optional[str] = Field(None, description="Supabase project URL")
    supabase_service_role_key: Optional[str] = Field(None, description="Service key for storage and history")
    supabase_anon_key: Optional[str] = Field(None, description="Public key for auth lookups")
    image_bucket: str = Field("generated-images", description="Bucket for generated images")

    log_level: str = Field("INFO", description="Root log level")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables"""
        values = {
            "ai_gateway_api_key": os.getenv("AI_GATEWAY_API_KEY") or os.getenv("LOVABLE_API_KEY"),
            "firecrawl_api_key": os.getenv("FIRECRAWL_API_KEY"),
            "supabase_url": os.getenv("SUPABASE_URL"),
            "supabase_service_role_key": os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
            "supabase_anon_key": os.getenv("SUPABASE_ANON_KEY"),
        }
        optional = {
            "ai_gateway_url": "AI_GATEWAY_URL",
            "text_model": "TEXT_MODEL",
            "image_model": "IMAGE_MODEL",
            "generation_timeout": "GENERATION_TIMEOUT",
            "firecrawl_url": "FIRECRAWL_URL",
            "search_timeout": "SEARCH_TIMEOUT",
            "image_bucket": "IMAGE_BUCKET",
            "log_level": "LOG_LEVEL",
        }
        for field, env_name in optional.items():
            value = os.getenv(env_name)
            if value:
                values[field] = value
        return cls(**values)

    def require_supabase(self, capability: str):
        """Raise if Supabase credentials needed for `capability` are absent"""
        if not self.supabase_url or not self.supabase_service_role_key:
            raise MissingConfigurationError(capability)
