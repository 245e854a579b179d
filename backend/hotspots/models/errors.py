"""Error models and exception types.

``ErrorCode`` and ``AppError`` describe the JSON error payloads returned by
the API. The exception classes carry the same code so the handlers in
``hotspots.main`` can translate them without inspecting messages.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to API clients."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    CACHE_ERROR = "CACHE_ERROR"
    API_ERROR = "API_ERROR"


class AppError(BaseModel):
    """Error payload returned by the API."""

    error: str = Field(..., description="Human-readable error message")
    code: Optional[ErrorCode] = Field(None, description="Machine-readable code")


class HotspotsError(Exception):
    """Base class for errors raised by the places layer."""

    code: ErrorCode = ErrorCode.API_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(HotspotsError):
    """A required setting (e.g. the places API key) is missing.

    Fatal for the request and never retried.
    """

    code = ErrorCode.CONFIGURATION_ERROR


class UpstreamProviderError(HotspotsError):
    """The places provider failed, timed out or returned an error status."""

    code = ErrorCode.UPSTREAM_ERROR

    def __init__(
        self,
        message: str,
        status: str | None = None,
        category: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.category = category


class CacheBackendError(HotspotsError):
    """The cache backend could not be read or written.

    Always absorbed by the places cache; never reaches an API client.
    """

    code = ErrorCode.CACHE_ERROR
