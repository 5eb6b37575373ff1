from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_ROWS = 10
MAX_ROWS = 500
DEFAULT_ROWS = 50

MIN_IMAGES = 1
MAX_IMAGES = 8
DEFAULT_IMAGES = 4


class DatasetFormat(str, Enum):
    """Output formats for tabular generation"""
    CSV = "csv"
    JSON = "json"
    SQL = "sql"
    XML = "xml"
    YAML = "yaml"
    TSV = "tsv"
    XLSX = "xlsx"
    TXT = "txt"


class SourceMode(str, Enum):
    """Where tabular data comes from"""
    SYNTHETIC = "synthetic"  # Pure model output
    WEB = "web"              # Web search context
    HYBRID = "hybrid"        # Both

    @property
    def uses_web(self) -> bool:
        return self in (SourceMode.WEB, SourceMode.HYBRID)


class ImageStyle(str, Enum):
    REALISTIC = "realistic"
    PROFESSIONAL = "professional"
    ARTISTIC = "artistic"
    MINIMAL = "minimal"
    RENDER_3D = "3d-render"
    ILLUSTRATION = "illustration"


def clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)


class QualityFlags(BaseModel):
    """Quality toggles for tabular generation"""
    realistic: bool = True
    statistical: bool = True
    complete: bool = True
    noise_free: bool = Field(True, alias="noiseFree")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def none(cls) -> "QualityFlags":
        return cls(realistic=False, statistical=False, complete=False, noise_free=False)


class TabularRequest(BaseModel):
    """Request for a synthetic tabular dataset"""
    prompt: str = Field(..., description="Natural-language description of the dataset")
    format: str = Field(default=DatasetFormat.CSV.value, description="Output format id")
    row_count: int = Field(default=DEFAULT_ROWS, alias="rowCount", description="Rows, clamped to [10, 500]")
    source_mode: SourceMode = Field(default=SourceMode.SYNTHETIC, alias="sourceMode")
    quality: Optional[QualityFlags] = Field(default_factory=QualityFlags, alias="qualityOptions")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("row_count", mode="before")
    @classmethod
    def _clamp_rows(cls, value):
        if value is None:
            return DEFAULT_ROWS
        return clamp(int(value), MIN_ROWS, MAX_ROWS)


class ImageRequest(BaseModel):
    """Request for a batch of synthetic images"""
    prompt: str = Field(..., description="Natural-language description of the images")
    style: str = Field(default=ImageStyle.REALISTIC.value, description="Style id, unknown means realistic")
    count: int = Field(default=DEFAULT_IMAGES, description="Images, clamped to [1, 8]")

    @field_validator("count", mode="before")
    @classmethod
    def _clamp_count(cls, value):
        if value is None:
            return DEFAULT_IMAGES
        return clamp(int(value), MIN_IMAGES, MAX_IMAGES)


class WebSearchResult(BaseModel):
    """One web search hit, content already truncated"""
    title: str = ""
    url: str = ""
    content: str = ""


class TabularArtifact(BaseModel):
    content: str
    format: str
    row_count: int

    model_config = ConfigDict(frozen=True)


class GeneratedImage(BaseModel):
    url: str
    storage_path: str

    model_config = ConfigDict(frozen=True)


class ImageArtifact(BaseModel):
    images: List[GeneratedImage]

    model_config = ConfigDict(frozen=True)


class DatasetRecord(BaseModel):
    """Row appended to the dataset history store"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    prompt: str
    format: str
    data: str
    row_count: int
    source_mode: SourceMode
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class GenerationOutcome(BaseModel):
    """Artifact plus the result of the best-effort history write"""
    artifact: TabularArtifact
    record_id: Optional[str] = None
    persistence_error: Optional[str] = None
