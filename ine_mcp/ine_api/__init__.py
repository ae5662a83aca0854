"""HTTP client wrappers for the INE JSON API."""

from .client import (
    BadRequestError,
    IneApiClient,
    IneApiError,
    NotFoundError,
    UpstreamResult,
    UpstreamServerError,
    UpstreamTimeoutError,
    UpstreamUnreachableError,
    build_request,
)

__all__ = [
    "IneApiClient",
    "IneApiError",
    "NotFoundError",
    "BadRequestError",
    "UpstreamServerError",
    "UpstreamTimeoutError",
    "UpstreamUnreachableError",
    "UpstreamResult",
    "build_request",
]
