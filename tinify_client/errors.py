"""
Tinify client exceptions.

Every failure raised by this package is a TinifyError. Errors reported by the
API itself are TinifyClientError instances carrying the API's own error code
and message in ``upstream``.
"""

from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .models import UpstreamError


class TinifyError(Exception):
    """Base exception for Tinify client errors."""

    pass


class TinifyConfigError(TinifyError):
    """Missing or empty API key."""

    pass


class TinifyFileError(TinifyError):
    """Local file could not be read or written."""

    def __init__(self, message: str, path: Union[str, Path]):
        super().__init__(message)
        self.path = Path(path)


class TinifyClientError(TinifyError):
    """Error response from the Tinify API."""

    def __init__(self, status_code: int, upstream: UpstreamError):
        super().__init__(
            f"API error ({status_code}): {upstream.error}: {upstream.message}"
        )
        self.status_code = status_code
        self.upstream = upstream


class TinifyAccountError(TinifyClientError):
    """Invalid credentials or account limit reached."""

    pass


class TinifyServerError(TinifyClientError):
    """Temporary problem on the Tinify side."""

    pass


class TinifyTransportError(TinifyError):
    """Network failure or unreadable response."""

    pass


class TinifyLogicError(TinifyError):
    """Operation requested on a source without an upstream location."""

    pass


def raise_for_response(status_code: int, content: Optional[bytes]):
    """
    Map a non-2xx response to the matching exception.

    Args:
        status_code: HTTP status of the response
        content: Raw response body

    Raises:
        TinifyAccountError: 401 or 429 with an error body
        TinifyServerError: 5xx with an error body
        TinifyClientError: Any other non-2xx with an error body
        TinifyTransportError: Non-2xx whose body is not an API error
    """
    if 200 <= status_code < 300:
        return

    try:
        upstream = UpstreamError.model_validate_json(content or b"")
    except ValidationError as e:
        raise TinifyTransportError(
            f"Unexpected response ({status_code}): {content[:200]!r}"
            if content
            else f"Unexpected empty response ({status_code})"
        ) from e

    if status_code in (401, 429):
        raise TinifyAccountError(status_code, upstream)
    elif status_code >= 500:
        raise TinifyServerError(status_code, upstream)
    raise TinifyClientError(status_code, upstream)
