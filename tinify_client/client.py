"""
Tinify client implementation.

This module contains the Tinify key holder, the blocking TinifyClient and
the Source it produces. The non-blocking variant lives in async_client.
For usage examples, see the package docstring: help(tinify_client)
"""

import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple, Union
from urllib.parse import urljoin

import requests

from .errors import (
    TinifyConfigError,
    TinifyFileError,
    TinifyLogicError,
    TinifyTransportError,
    raise_for_response,
)
from .models import Convert, Resize, Transform

if TYPE_CHECKING:
    from .async_client import AsyncTinifyClient

# Optional PIL for dimension extraction
try:
    from PIL import Image as PILImage

    HAS_PIL = True
except ImportError:
    HAS_PIL = False

logger = logging.getLogger(__name__)

API_ENDPOINT = "https://api.tinify.com"
AUTH_USER = "api"


class Tinify:
    """
    Holds the API key and hands out clients.

    ``set_key`` returns a new Tinify, so a configured instance can be shared.

    Example:
        >>> client = Tinify().set_key("your_api_key").get_client()
    """

    def __init__(self, key: str = ""):
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def set_key(self, key: str) -> "Tinify":
        return Tinify(key)

    def get_client(self, timeout: Optional[float] = None) -> "TinifyClient":
        """
        Build a blocking client. No request is made here; a bad key is only
        reported by the API on the first call.

        Raises:
            TinifyConfigError: If no key was set
        """
        return TinifyClient(self._key, timeout=timeout)

    def get_async_client(
        self, timeout: Optional[float] = None, **kwargs
    ) -> "AsyncTinifyClient":
        """
        Build a non-blocking client. Extra keyword arguments are passed to
        AsyncTinifyClient.

        Raises:
            TinifyConfigError: If no key was set
        """
        from .async_client import AsyncTinifyClient

        return AsyncTinifyClient(self._key, timeout=timeout, **kwargs)


def check_key(api_key: Optional[str]) -> str:
    if not api_key:
        raise TinifyConfigError("Provide an API key with Tinify().set_key(key)")
    return api_key


def resolve_location(endpoint: str, location: Optional[str]) -> Optional[str]:
    """Absolute URL of a Location header value, or None when absent."""
    if not location:
        return None
    try:
        return urljoin(endpoint + "/", location)
    except ValueError as e:
        raise TinifyTransportError(f"Malformed Location header: {location!r}") from e


def read_file(path: Union[str, Path]) -> bytes:
    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise TinifyFileError(f"Cannot read {path}: {e}", path) from e
    logger.debug("Read %d bytes from %s", len(data), path)
    return data


class BaseSource:
    """
    Image bytes held by the client plus the API location they came from.

    Sources are never modified; every operation returns a new one.
    """

    def __init__(self, buffer: bytes, location: Optional[str] = None):
        self._buffer = bytes(buffer)
        self._location = location

    @property
    def buffer(self) -> bytes:
        return self._buffer

    @property
    def location(self) -> Optional[str]:
        """URL of the resource on the API, used by follow-up operations."""
        return self._location

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {len(self._buffer)} bytes "
            f"location={self._location!r}>"
        )

    def _require_location(self, operation: str) -> str:
        if self._location is None:
            raise TinifyLogicError(
                f"Cannot {operation}: source has no location on the API"
            )
        return self._location

    def to_file(self, path: Union[str, Path]):
        """
        Write the image to a local file.

        Raises:
            TinifyFileError: If the file cannot be written
        """
        path = Path(path)
        try:
            with open(path, "wb") as f:
                f.write(self._buffer)
        except OSError as e:
            raise TinifyFileError(f"Cannot write {path}: {e}", path) from e
        logger.debug("Wrote %d bytes to %s", len(self._buffer), path)

    def to_buffer(self) -> bytes:
        return bytes(self._buffer)

    def size(self) -> Tuple[int, int]:
        """Pixel size of the held image; (0, 0) without Pillow or for non-images."""
        if not HAS_PIL:
            return 0, 0
        try:
            with PILImage.open(io.BytesIO(self._buffer)) as image:
                width, height = image.size
        except (OSError, ValueError):
            # UnidentifiedImageError is an OSError
            return 0, 0
        return width, height


class Source(BaseSource):
    """Compressed image returned by TinifyClient."""

    def __init__(
        self, client: "TinifyClient", buffer: bytes, location: Optional[str] = None
    ):
        super().__init__(buffer, location)
        self._client = client

    def _apply(self, operation: str, payload: Dict[str, Any]) -> "Source":
        location = self._require_location(operation)
        response = self._client._post(location, json=payload)
        return self._client._source_from_response(response)

    def resize(self, resize: Resize) -> "Source":
        """
        Resize the image on the API.

        Example:
            >>> source = client.from_file("photo.jpg")
            >>> source.resize(Resize(method="fit", width=400, height=200))
        """
        return self._apply("resize", resize.to_payload())

    def convert(self, convert: Convert, background: Optional[str] = None) -> "Source":
        """
        Convert the image to another type.

        Args:
            convert: Target type(s); with several the smallest result wins
            background: Colour used to fill transparent areas
        """
        return self._apply("convert", convert.to_payload(background))

    def transform(self, transform: Transform) -> "Source":
        return self._apply("transform", transform.to_payload())


class TinifyClient:
    """
    Blocking Tinify API client.

    Args:
        api_key: Your Tinify API key
        timeout: Request timeout in seconds (default: none)
        endpoint: Base URL of the API (default: https://api.tinify.com)
    """

    def __init__(
        self,
        api_key: str,
        timeout: Optional[float] = None,
        endpoint: str = API_ENDPOINT,
    ):
        self._api_key = check_key(api_key)
        self._endpoint = endpoint.rstrip("/")
        self._timeout = timeout
        self.session = requests.Session()
        self.session.auth = (AUTH_USER, self._api_key)

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    def close(self):
        self.session.close()

    def __enter__(self) -> "TinifyClient":
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _post(self, url: str, **kwargs) -> requests.Response:
        """Make POST request."""
        logger.debug("POST %s", url)
        try:
            response = self.session.post(url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise TinifyTransportError(f"Request to {url} failed: {e}") from e
        logger.debug("POST %s -> %s", url, response.status_code)
        raise_for_response(response.status_code, response.content)
        return response

    def _source_from_response(self, response: requests.Response) -> Source:
        location = resolve_location(self._endpoint, response.headers.get("Location"))
        return Source(self, response.content, location)

    def from_file(self, path: Union[str, Path]) -> Source:
        """
        Compress a local image file.

        Raises:
            TinifyFileError: If the file cannot be read
            TinifyClientError: If the API rejects the request
            TinifyTransportError: If the API cannot be reached

        Example:
            >>> client.from_file("photo.png").to_file("optimized.png")
        """
        return self.from_buffer(read_file(path))

    def from_buffer(self, data: bytes) -> Source:
        """Compress image bytes."""
        response = self._post(f"{self._endpoint}/shrink", data=data)
        return self._source_from_response(response)

    def from_url(self, url: str) -> Source:
        """Compress an image the API downloads from ``url``."""
        response = self._post(
            f"{self._endpoint}/shrink", json={"source": {"url": url}}
        )
        return self._source_from_response(response)
