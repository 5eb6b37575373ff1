"""
Artifact Export Helper
======================

Turns artifacts into downloadable files. Content is relabeled, never
transformed.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from core.errors import ExportError
from core.formats import extension_for, is_known_format
from core.schemas import GeneratedImage, TabularArtifact

logger = logging.getLogger(__name__)

TEXT_CONTENT_TYPE = "text/plain"
IMAGE_CONTENT_TYPE = "image/png"


@dataclass(frozen=True)
class ExportedFile:
    filename: str
    content_type: str
    data: bytes


def export_filename(fmt: str) -> str:
    extension = extension_for(fmt) if is_known_format(fmt) else ".txt"
    return f"dataset{extension}"


def export_tabular(artifact: TabularArtifact) -> ExportedFile:
    return ExportedFile(
        filename=export_filename(artifact.format),
        content_type=TEXT_CONTENT_TYPE,
        data=artifact.content.encode("utf-8"),
    )


def export_image(
    image: GeneratedImage,
    index: int,
    session: Optional[requests.Session] = None,
    timeout: float = 30.0
) -> ExportedFile:
    """
    Download a hosted image for saving

    Args:
        image: Stored image entry
        index: Position in the artifact (0-based)
        session: Optional requests session
        timeout: Download timeout in seconds

    Raises:
        ExportError: The image could not be fetched
    """
    http = session or requests
    try:
        response = http.get(image.url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Image download failed for {image.url}: {e}")
        raise ExportError(f"Could not download image {index + 1}") from e

    return ExportedFile(
        filename=f"image-{index + 1}.png",
        content_type=IMAGE_CONTENT_TYPE,
        data=response.content,
    )
