"""
Error types raised by the extraction engines.

Only call-level failures are raised. A single unreadable table line is
dropped by the local parser and never surfaces here.
"""

from typing import Optional


class TireIntakeError(Exception):
    """Base class for extraction failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class MissingCredentialError(TireIntakeError):
    """No API key was passed and none is configured."""


class InvalidInputError(TireIntakeError, TypeError):
    """The image argument is neither bytes nor a base64 / data-URL string."""


class EmptyModelResponseError(TireIntakeError):
    """The cloud model answered without any usable text."""


class ModelRequestError(TireIntakeError):
    """The request to the cloud model failed (network, auth, rate limit, timeout)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class MalformedResponseError(TireIntakeError, ValueError):
    """The model's answer did not contain a JSON array."""

    def __init__(self, message: str, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(message)


class EngineFailureError(TireIntakeError):
    """The OCR engine could not start or could not read the image."""

    def __init__(self, message: str, engine: str = "tesseract"):
        self.engine = engine
        super().__init__(message)
