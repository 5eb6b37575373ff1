"""
Image Generation Orchestrator

Generates a batch of styled image variations one call at a time and stores
each image as soon as it is produced.

Failure policy per index:
- generic generation failure or missing image: skip the index, continue
- upload failure: drop the image, continue
- rate limit / quota exhausted: abort the whole batch immediately
"""
import base64
import binascii
import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Union

from core.errors import (
    EmptyPromptError,
    NoArtifactProducedError,
    PersistenceError,
    QuotaExhaustedError,
    RateLimitedError,
    UpstreamGenerationError,
)
from core.schemas import GeneratedImage, ImageArtifact, ImageRequest, ImageStyle
from providers.ai_gateway import AIGatewayProvider
from storage.base import BlobStore

logger = logging.getLogger(__name__)

STYLE_PROMPTS = {
    ImageStyle.REALISTIC: "Ultra-realistic, photographic quality, natural lighting, high detail",
    ImageStyle.PROFESSIONAL: "Clean, corporate, professional stock photo style, well-composed",
    ImageStyle.ARTISTIC: "Creative, artistic interpretation, painterly style, expressive colors",
    ImageStyle.MINIMAL: "Minimalist, clean lines, simple composition, muted tones, elegant",
    ImageStyle.RENDER_3D: "3D rendered, CGI quality, smooth surfaces, studio lighting",
    ImageStyle.ILLUSTRATION: "Digital illustration, vector-like, flat design, vibrant and modern",
}

IMAGE_CONTENT_TYPE = "image/png"

_DATA_URI_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")


def resolve_style(style: Union[str, ImageStyle, None]) -> ImageStyle:
    """Return the matching ImageStyle, or REALISTIC for anything unrecognized"""
    if isinstance(style, ImageStyle):
        return style
    try:
        return ImageStyle(str(style).strip().lower())
    except ValueError:
        return ImageStyle.REALISTIC


def style_instruction(style: Union[str, ImageStyle, None]) -> str:
    return STYLE_PROMPTS[resolve_style(style)]


def build_variation_prompt(prompt: str, index: int, total: int, style: Union[str, ImageStyle, None]) -> str:
    return (
        f"{prompt}. Variation {index + 1} of {total} - create a unique variation. "
        f"Style: {style_instruction(style)}. Ultra high resolution."
    )


def decode_data_uri(data_uri: str) -> bytes:
    """
    Decode a base64 image data URI

    Raises:
        ValueError: If the payload is not valid base64
    """
    payload = _DATA_URI_PREFIX.sub("", data_uri.strip(), count=1)
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid image payload: {e}") from e


@dataclass(frozen=True)
class ImageStored:
    """Index produced and stored an image"""
    index: int
    image: GeneratedImage


@dataclass(frozen=True)
class ImageSkipped:
    """Index produced no stored image"""
    index: int
    reason: str


BatchEvent = Union[ImageStored, ImageSkipped]


class ImageGenerator:
    """
    Orchestrates one image batch

    Example:
        >>> generator = ImageGenerator(provider, blob_store, bucket="generated-images")
        >>> artifact = generator.generate(ImageRequest(prompt="a red bicycle", count=3), owner_id="user-1")
    """

    def __init__(
        self,
        provider: AIGatewayProvider,
        blob_store: BlobStore,
        bucket: str = "generated-images",
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Args:
            provider: Image generation client
            blob_store: Public object store for the generated images
            bucket: Bucket name, provisioned before the first upload
            clock: Time source in seconds, used for storage paths
        """
        self.provider = provider
        self.blob_store = blob_store
        self.bucket = bucket
        self.clock = clock or time.time

    def storage_path(self, owner_id: str, index: int) -> str:
        return f"{owner_id}/{int(self.clock() * 1000)}-{index}.png"

    def iter_generate(self, request: ImageRequest, owner_id: str) -> Iterator[BatchEvent]:
        """
        Run the batch, yielding one event per index.

        Raises:
            EmptyPromptError: Prompt is blank
            RateLimitedError, QuotaExhaustedError: Aborts the remaining batch
        """
        prompt = request.prompt.strip()
        if not prompt:
            raise EmptyPromptError("Describe the images you want to generate.")

        total = request.count
        style = resolve_style(request.style)
        bucket_ready = False

        logger.info(f"Generating {total} images (style={style.value}) for {owner_id}")
        for index in range(total):
            variation = build_variation_prompt(prompt, index, total, style)
            try:
                data_uri = self.provider.generate_image(variation)
            except (RateLimitedError, QuotaExhaustedError):
                logger.warning(f"Image batch aborted at {index + 1}/{total}")
                raise
            except UpstreamGenerationError as e:
                logger.error(f"Image generation error ({index + 1}): {e.status} {e.body}")
                yield ImageSkipped(index, "generation failed")
                continue

            if not data_uri:
                logger.warning(f"Image {index + 1} response carried no image")
                yield ImageSkipped(index, "no image returned")
                continue

            try:
                data = decode_data_uri(data_uri)
            except ValueError as e:
                logger.error(f"Image {index + 1} could not be decoded: {e}")
                yield ImageSkipped(index, "undecodable image")
                continue

            path = self.storage_path(owner_id, index)
            try:
                if not bucket_ready:
                    self.blob_store.ensure_bucket(self.bucket, public=True)
                    bucket_ready = True
                url = self.blob_store.upload(self.bucket, path, data, IMAGE_CONTENT_TYPE)
            except PersistenceError as e:
                logger.error(f"Image {index + 1} upload failed: {e}")
                yield ImageSkipped(index, "upload failed")
                continue

            yield ImageStored(index, GeneratedImage(url=url, storage_path=path))

    def generate(self, request: ImageRequest, owner_id: str) -> ImageArtifact:
        """
        Run the batch and collect stored images in index order.

        Raises:
            NoArtifactProducedError: No image survived generation and storage
        """
        images: List[GeneratedImage] = []
        for event in self.iter_generate(request, owner_id):
            if isinstance(event, ImageStored):
                images.append(event.image)

        if not images:
            raise NoArtifactProducedError()

        logger.info(f"Stored {len(images)}/{request.count} images for {owner_id}")
        return ImageArtifact(images=images)
