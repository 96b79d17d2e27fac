"""Errors raised by the image provider and their classification.

Failures from the OpenAI client are mapped to UpstreamError with a stable
code and a message telling the caller what to fix.
"""

from typing import Any

import openai

AUTHENTICATION_ERROR = "authentication_error"
PERMISSION_DENIED = "permission_denied"
RATE_LIMITED = "rate_limited"
INVALID_REQUEST = "invalid_request"
NOT_FOUND = "not_found"
TIMEOUT = "timeout"
CONNECTION_ERROR = "connection_error"
UPSTREAM_ERROR = "upstream_error"
FILESYSTEM_ERROR = "filesystem_error"


class ImageGenerationError(Exception):
    """Base class for errors raised while generating images."""

    def __init__(self, message: str, code: str) -> None:
        """Initialize ImageGenerationError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


class UpstreamError(ImageGenerationError):
    """Raised when the image API (or an image download) fails."""

    def __init__(
        self,
        message: str,
        code: str = UPSTREAM_ERROR,
        status_code: int | None = None,
    ) -> None:
        """Initialize UpstreamError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
            status_code: HTTP status returned upstream, if any.
        """
        super().__init__(message, code)
        self.status_code = status_code


class FilesystemError(ImageGenerationError):
    """Raised when a generated image cannot be written to disk."""

    def __init__(self, message: str, path: str, code: str = FILESYSTEM_ERROR) -> None:
        """Initialize FilesystemError.

        Args:
            message: Error description.
            path: Destination path that could not be written.
            code: Error code for structured error handling.
        """
        super().__init__(message, code)
        self.path = path


def _detail(error: openai.APIError) -> str:
    """Extract the API's own error message when the body carries one."""
    body: Any = error.body
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return error.message


def classify_openai_error(error: openai.OpenAIError) -> UpstreamError:
    """Convert an OpenAI client exception into an UpstreamError.

    Args:
        error: Exception raised by the openai client.

    Returns:
        UpstreamError with a stable code and an actionable message.
    """
    # APITimeoutError subclasses APIConnectionError, check it first
    if isinstance(error, openai.APITimeoutError):
        return UpstreamError(
            "The request to the OpenAI API timed out. Try again, or raise "
            "IMAGEGEN_REQUEST_TIMEOUT for large or high-quality images.",
            code=TIMEOUT,
        )
    if isinstance(error, openai.APIConnectionError):
        return UpstreamError(
            f"Could not reach the OpenAI API: {error.message}. "
            "Check network access and OPENAI_BASE_URL.",
            code=CONNECTION_ERROR,
        )
    if isinstance(error, openai.AuthenticationError):
        return UpstreamError(
            "Authentication failed: the OpenAI API rejected the credentials. "
            f"Check that OPENAI_API_KEY holds a valid API key ({_detail(error)})",
            code=AUTHENTICATION_ERROR,
            status_code=error.status_code,
        )
    if isinstance(error, openai.PermissionDeniedError):
        return UpstreamError(
            "Permission denied by the OpenAI API: the API key or organization "
            f"cannot use this model ({_detail(error)})",
            code=PERMISSION_DENIED,
            status_code=error.status_code,
        )
    if isinstance(error, openai.RateLimitError):
        if error.code == "insufficient_quota":
            hint = "The account has run out of quota; check plan and billing."
        else:
            hint = "Too many requests; wait before retrying."
        return UpstreamError(
            f"Rate limit exceeded: {hint} ({_detail(error)})",
            code=RATE_LIMITED,
            status_code=error.status_code,
        )
    if isinstance(error, (openai.BadRequestError, openai.UnprocessableEntityError)):
        param = f" (parameter: {error.param})" if error.param else ""
        return UpstreamError(
            f"The OpenAI API rejected the request{param}: {_detail(error)}",
            code=INVALID_REQUEST,
            status_code=error.status_code,
        )
    if isinstance(error, openai.NotFoundError):
        return UpstreamError(
            f"Model or endpoint not found: {_detail(error)}",
            code=NOT_FOUND,
            status_code=error.status_code,
        )
    if isinstance(error, openai.APIStatusError):
        return UpstreamError(
            f"The OpenAI API returned HTTP {error.status_code}: {_detail(error)}",
            code=UPSTREAM_ERROR,
            status_code=error.status_code,
        )
    if isinstance(error, openai.APIError):
        return UpstreamError(f"OpenAI API error: {_detail(error)}")
    return UpstreamError(f"OpenAI client error: {error}")


__all__ = [
    "AUTHENTICATION_ERROR",
    "CONNECTION_ERROR",
    "FILESYSTEM_ERROR",
    "INVALID_REQUEST",
    "NOT_FOUND",
    "PERMISSION_DENIED",
    "RATE_LIMITED",
    "TIMEOUT",
    "UPSTREAM_ERROR",
    "FilesystemError",
    "ImageGenerationError",
    "UpstreamError",
    "classify_openai_error",
]
