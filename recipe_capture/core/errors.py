"""Error taxonomy shared by the acquisition pipeline and the HTTP layer."""

from typing import Optional, Any


class RecipeCaptureError(Exception):
    """Base class for all recipe_capture errors."""


class UnsupportedPlatform(RecipeCaptureError):
    def __init__(self, url: str, reason: str = "Unsupported platform"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url!r}")


class InvalidAcquisitionMode(RecipeCaptureError):
    def __init__(self, mode: Any):
        self.mode = mode
        self.reason = f"Invalid mode {mode!r}; expected 'fast' or 'full'"
        super().__init__(self.reason)


class AcquisitionFailed(RecipeCaptureError):
    """Every acquisition path was exhausted without finding a recipe."""

    def __init__(self, message: str, stages: Optional[list[Any]] = None, platform: Optional[str] = None):
        self.message = message
        self.stages = stages or []
        self.platform = platform
        super().__init__(message)


class UpstreamUnavailable(RecipeCaptureError):
    """A fetch collaborator could not reach the source (network/HTTP failure)."""


class AIServiceError(RecipeCaptureError):
    """Model call failed or AI is not configured."""


class AIRateLimitError(AIServiceError):
    """Model call was rejected with a rate-limit / quota signal (HTTP 429)."""


class TranscriptionError(RecipeCaptureError):
    QUOTA_EXCEEDED = "quota_exceeded"
    UNSUPPORTED_FORMAT = "unsupported_format"
    FILE_TOO_LARGE = "file_too_large"
    UNKNOWN = "unknown"

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(message)


def is_rate_limit_error(exc: BaseException) -> bool:
    """True for errors that should be retried after a delay."""
    if isinstance(exc, AIRateLimitError):
        return True
    if isinstance(exc, TranscriptionError):
        return exc.kind == TranscriptionError.QUOTA_EXCEEDED
    return False
