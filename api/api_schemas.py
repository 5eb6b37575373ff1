from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.schemas import ImageRequest, TabularRequest, WebSearchResult


class GenerateDatasetRequest(TabularRequest):
    """Request para endpoint /generate-dataset"""
    save: bool = Field(default=True, description="Append the result to dataset history")


class GenerateDatasetResponse(BaseModel):
    """Generated dataset"""
    data: str = Field(..., description="Raw dataset text in the requested format")
    format: str = Field(..., description="Format id")
    row_count: int = Field(..., alias="rowCount", description="Requested rows")
    record_id: Optional[str] = Field(None, alias="recordId", description="History record id, if saved")
    persistence_error: Optional[str] = Field(None, alias="persistenceError", description="History save failure")

    model_config = ConfigDict(populate_by_name=True)


class GenerateImagesRequest(ImageRequest):
    """Request para endpoint /generate-images"""
    pass


class ImageEntry(BaseModel):
    url: str = Field(..., description="Public URL")
    path: str = Field(..., description="Storage path")


class GenerateImagesResponse(BaseModel):
    images: List[ImageEntry] = Field(default_factory=list)
    count: int = Field(..., description="Number of stored images")


class ImageStreamChunk(BaseModel):
    """Chunk de streaming do lote de imagens"""
    type: str = Field(..., description="Tipo: image, skipped, done, error")
    index: Optional[int] = Field(None, description="Variation index (0-based)")
    content: str = Field(default="", description="URL, skip reason or error message")
    metadata: Optional[dict] = Field(None, description="Metadados adicionais")


class ScrapeRequest(BaseModel):
    query: str = Field(..., description="Search query")


class ScrapeResponse(BaseModel):
    success: bool = True
    results: List[WebSearchResult] = Field(default_factory=list)


class ExportDatasetRequest(BaseModel):
    data: str = Field(..., description="Dataset text")
    format: str = Field(default="csv", description="Format id")


class ExportImageRequest(BaseModel):
    path: str = Field(..., description="Storage path returned by /generate-images")
    url: Optional[str] = Field(None, description="Public URL; must match the path when given")
    index: int = Field(default=0, ge=0, description="Position in the batch (0-based)")
