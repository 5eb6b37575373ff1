"""
API FastAPI for synthetic dataset and image generation
"""
import logging
from typing import AsyncGenerator

import requests
from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from api.api_schemas import (
    ExportDatasetRequest,
    ExportImageRequest,
    GenerateDatasetRequest,
    GenerateDatasetResponse,
    GenerateImagesRequest,
    GenerateImagesResponse,
    ImageEntry,
    ImageStreamChunk,
    ScrapeRequest,
    ScrapeResponse,
)
from api.api_utils import _sync_to_async_generator
from api.dependencies import (
    get_blob_store,
    get_fetcher,
    get_http_session,
    get_image_generator,
    get_owner_id,
    get_settings,
    get_tabular_generator,
)
from core.config import Settings
from core.errors import (
    DatasetGeneratorError,
    EmptyPromptError,
    ExportForbiddenError,
    NoArtifactProducedError,
)
from core.export import ExportedFile, export_image, export_tabular
from core.logging_config import configure_logging
from core.schemas import GeneratedImage, TabularArtifact
from generators.images import ImageGenerator, ImageStored
from generators.tabular import TabularGenerator
from providers.firecrawl import WebContextFetcher
from storage.base import BlobStore

logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = [
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
    "x-supabase-client-platform",
    "x-supabase-client-platform-version",
    "x-supabase-client-runtime",
    "x-supabase-client-runtime-version",
]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
}


def create_app() -> FastAPI:
    configure_logging(get_settings().log_level)

    app = FastAPI(
        title="Synthetic Dataset Generator API",
        description="Synthetic tabular datasets and image batches from natural-language prompts",
        version="1.0.0"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=CORS_ALLOW_HEADERS,
    )

    @app.exception_handler(DatasetGeneratorError)
    async def generator_error_handler(request: Request, exc: DatasetGeneratorError):
        if exc.status_code >= 500:
            logger.error(f"{request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.options("/{path:path}")
    async def preflight(path: str):
        """Empty success for cross-origin OPTIONS requests"""
        return Response(status_code=200, headers=CORS_HEADERS)

    @app.get("/")
    async def root():
        """Endpoint raiz"""
        return {
            "message": "Synthetic Dataset Generator API",
            "version": "1.0.0",
            "endpoints": {
                "/generate-dataset": "POST - Generate a tabular dataset",
                "/generate-images": "POST - Generate an image batch",
                "/generate-images/stream": "POST - Image batch with SSE progress",
                "/scrape-web-data": "POST - Web search context",
                "/export/dataset": "POST - Download a dataset file",
                "/export/image": "POST - Download a stored image",
                "/health": "GET - Health check"
            }
        }

    @app.get("/health")
    async def health(settings: Settings = Depends(get_settings)):
        """Health check"""
        return {
            "status": "healthy" if settings.ai_gateway_api_key else "degraded",
            "components": {
                "generation": bool(settings.ai_gateway_api_key),
                "web_search": bool(settings.firecrawl_api_key),
                "storage": bool(settings.supabase_url and settings.supabase_service_role_key),
            }
        }

    @app.post("/generate-dataset", response_model=GenerateDatasetResponse)
    def generate_dataset(
        request: GenerateDatasetRequest,
        owner_id: str = Depends(get_owner_id),
        generator: TabularGenerator = Depends(get_tabular_generator)
    ):
        """
        Generate a synthetic dataset and save it to history

        A history save failure is reported in persistenceError; the data is
        still returned.
        """
        if request.save:
            outcome = generator.generate_and_record(request, owner_id)
            artifact = outcome.artifact
            record_id, persistence_error = outcome.record_id, outcome.persistence_error
        else:
            artifact = generator.generate(request)
            record_id, persistence_error = None, None

        return GenerateDatasetResponse(
            data=artifact.content,
            format=artifact.format,
            row_count=artifact.row_count,
            record_id=record_id,
            persistence_error=persistence_error,
        )

    @app.post("/generate-images", response_model=GenerateImagesResponse)
    def generate_images(
        request: GenerateImagesRequest,
        owner_id: str = Depends(get_owner_id),
        generator: ImageGenerator = Depends(get_image_generator)
    ):
        artifact = generator.generate(request, owner_id)
        images = [ImageEntry(url=img.url, path=img.storage_path) for img in artifact.images]
        return GenerateImagesResponse(images=images, count=len(images))

    @app.post("/generate-images/stream")
    async def stream_images(
        request: GenerateImagesRequest,
        owner_id: str = Depends(get_owner_id),
        generator: ImageGenerator = Depends(get_image_generator)
    ):
        """
        Image batch with progress via Server-Sent Events

        One chunk per variation, then a final 'done' (or 'error') chunk.
        """
        if not request.prompt.strip():
            raise EmptyPromptError("Describe the images you want to generate.")

        async def generate_stream() -> AsyncGenerator[str, None]:
            stored = 0
            try:
                events = generator.iter_generate(request, owner_id)
                async for event in _sync_to_async_generator(events):
                    if isinstance(event, ImageStored):
                        stored += 1
                        chunk = ImageStreamChunk(
                            type="image",
                            index=event.index,
                            content=event.image.url,
                            metadata={"path": event.image.storage_path},
                        )
                    else:
                        chunk = ImageStreamChunk(type="skipped", index=event.index, content=event.reason)
                    yield chunk.model_dump_json()

                if stored == 0:
                    raise NoArtifactProducedError()

                yield ImageStreamChunk(type="done", metadata={"count": stored}).model_dump_json()

            except DatasetGeneratorError as e:
                yield ImageStreamChunk(
                    type="error",
                    content=e.message,
                    metadata={"status": e.status_code}
                ).model_dump_json()

        return EventSourceResponse(generate_stream())

    @app.post("/scrape-web-data", response_model=ScrapeResponse)
    def scrape_web_data(request: ScrapeRequest, fetcher: WebContextFetcher = Depends(get_fetcher)):
        """Web search context; always succeeds, possibly with no results"""
        return ScrapeResponse(success=True, results=fetcher.search(request.query))

    @app.post("/export/dataset")
    def export_dataset(request: ExportDatasetRequest):
        artifact = TabularArtifact(content=request.data, format=request.format, row_count=0)
        return _file_response(export_tabular(artifact))

    @app.post("/export/image")
    def export_stored_image(
        request: ExportImageRequest,
        owner_id: str = Depends(get_owner_id),
        settings: Settings = Depends(get_settings),
        blob_store: BlobStore = Depends(get_blob_store),
        session: requests.Session = Depends(get_http_session)
    ):
        """
        Download one of the caller's stored images

        The URL is always derived from the storage path, so only objects
        under the caller's own folder in the image bucket can be fetched.
        """
        path = request.path.strip("/")
        if not path.startswith(f"{owner_id}/") or ".." in path.split("/"):
            raise ExportForbiddenError()

        url = blob_store.public_url(settings.image_bucket, path)
        if request.url and request.url != url:
            raise ExportForbiddenError()

        image = GeneratedImage(url=url, storage_path=path)
        return _file_response(export_image(image, request.index, session=session))

    return app


def _file_response(exported: ExportedFile) -> Response:
    return Response(
        content=exported.data,
        media_type=exported.content_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Synthetic Dataset Generator API on http://0.0.0.0:8000")
    uvicorn.run(app, host="0.0.0.0", port=8000)
