from .config import Settings
from .errors import DatasetGeneratorError
from .formats import extension_for, instruction_for
from .quality import compose_quality_clause
from .schemas import ImageArtifact, ImageRequest, TabularArtifact, TabularRequest

__all__ = [
    "Settings",
    "DatasetGeneratorError",
    "extension_for",
    "instruction_for",
    "compose_quality_clause",
    "ImageArtifact",
    "ImageRequest",
    "TabularArtifact",
    "TabularRequest",
]
