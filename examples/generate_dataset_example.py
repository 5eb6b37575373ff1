"""
Exemplo: gerar um dataset e um lote de imagens sem a API HTTP

Requires AI_GATEWAY_API_KEY (and FIRECRAWL_API_KEY for the hybrid run).
Images are kept in memory instead of Supabase Storage.
"""
import logging

from core.config import Settings
from core.export import export_tabular
from core.logging_config import configure_logging
from core.schemas import ImageRequest, QualityFlags, SourceMode, TabularRequest
from generators.images import ImageGenerator
from generators.tabular import TabularGenerator
from providers.ai_gateway import AIGatewayProvider
from providers.firecrawl import WebContextFetcher
from storage.memory import InMemoryBlobStore

logger = logging.getLogger(__name__)


def main():
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    # ==========================================
    # 1. TABULAR DATASET
    # ==========================================
    generator = TabularGenerator(
        provider=AIGatewayProvider.for_text(settings),
        fetcher=WebContextFetcher.from_settings(settings),
    )
    artifact = generator.generate(TabularRequest(
        prompt="50 customer support tickets with priority, status, agent, and resolution time",
        format="csv",
        row_count=50,
        source_mode=SourceMode.HYBRID,
        quality=QualityFlags(),
    ))

    exported = export_tabular(artifact)
    with open(exported.filename, "wb") as f:
        f.write(exported.data)
    logger.info(f"Saved {exported.filename} ({len(exported.data)} bytes)")

    # ==========================================
    # 2. IMAGE BATCH
    # ==========================================
    images = ImageGenerator(
        provider=AIGatewayProvider.for_images(settings),
        blob_store=InMemoryBlobStore(),
        bucket=settings.image_bucket,
    ).generate(ImageRequest(prompt="a cozy reading nook", style="illustration", count=2), owner_id="local")

    for image in images.images:
        logger.info(f"Stored {image.storage_path}")


if __name__ == "__main__":
    main()
