"""
Error Kinds
===========

Every failure the generator surfaces to a caller is one of these types.
Each carries the HTTP status the API layer answers with.
"""
from typing import Optional


class DatasetGeneratorError(Exception):
    """Base class for all generator errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingConfigurationError(DatasetGeneratorError):
    """A required credential is absent. Fatal, never retried."""

    def __init__(self, capability: str):
        super().__init__(f"{capability} is not configured")
        self.capability = capability


class RateLimitedError(DatasetGeneratorError):
    """Generation collaborator answered 429."""

    status_code = 429

    def __init__(self, message: str = "Rate limited. Please wait a moment and try again."):
        super().__init__(message)


class QuotaExhaustedError(DatasetGeneratorError):
    """Generation collaborator answered 402."""

    status_code = 402

    def __init__(self, message: str = "Credits exhausted. Add credits to your workspace to continue."):
        super().__init__(message)


class UpstreamGenerationError(DatasetGeneratorError):
    """Any other non-success from the generation collaborator."""

    def __init__(self, message: str = "AI generation failed", status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class EmptyPromptError(DatasetGeneratorError):
    status_code = 400

    def __init__(self, message: str = "Describe the dataset you want to generate."):
        super().__init__(message)


class UnauthenticatedError(DatasetGeneratorError):
    status_code = 401

    def __init__(self, message: str = "Please sign in to generate datasets."):
        super().__init__(message)


class NoArtifactProducedError(DatasetGeneratorError):
    """Image batch ended with zero stored images."""

    def __init__(self, message: str = "Failed to generate any images"):
        super().__init__(message)


class PersistenceError(DatasetGeneratorError):
    """History or blob store rejected a write."""
    pass


class ExportError(DatasetGeneratorError):
    """Hosted artifact could not be fetched for download."""

    status_code = 502


class ExportForbiddenError(ExportError):
    """Requested object is not one of the caller's stored images."""

    status_code = 403

    def __init__(self, message: str = "You can only download your own images."):
        super().__init__(message)
