"""
Non-blocking Tinify client.

Same operations and errors as TinifyClient, built on httpx.AsyncClient.
Each call is a single awaited request; chains run strictly in order.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import httpx

from .client import (
    API_ENDPOINT,
    AUTH_USER,
    BaseSource,
    check_key,
    read_file,
    resolve_location,
)
from .errors import TinifyTransportError, raise_for_response
from .models import Convert, Resize, Transform

logger = logging.getLogger(__name__)


class AsyncSource(BaseSource):
    """Compressed image returned by AsyncTinifyClient."""

    def __init__(
        self,
        client: "AsyncTinifyClient",
        buffer: bytes,
        location: Optional[str] = None,
    ):
        super().__init__(buffer, location)
        self._client = client

    async def _apply(self, operation: str, payload: Dict[str, Any]) -> "AsyncSource":
        location = self._require_location(operation)
        response = await self._client._post(location, json=payload)
        return self._client._source_from_response(response)

    async def resize(self, resize: Resize) -> "AsyncSource":
        return await self._apply("resize", resize.to_payload())

    async def convert(
        self, convert: Convert, background: Optional[str] = None
    ) -> "AsyncSource":
        return await self._apply("convert", convert.to_payload(background))

    async def transform(self, transform: Transform) -> "AsyncSource":
        return await self._apply("transform", transform.to_payload())


class AsyncTinifyClient:
    """
    Non-blocking Tinify API client.

    Args:
        api_key: Your Tinify API key
        timeout: Request timeout in seconds (default: none)
        endpoint: Base URL of the API (default: https://api.tinify.com)
        transport: Optional httpx transport, e.g. httpx.MockTransport

    Example:
        >>> async with AsyncTinifyClient("your_api_key") as client:
        ...     source = await client.from_url("https://example.com/a.png")
        ...     source = await source.resize(fit(300, 200))
        ...     source.to_file("thumb.png")
    """

    def __init__(
        self,
        api_key: str,
        timeout: Optional[float] = None,
        endpoint: str = API_ENDPOINT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = check_key(api_key)
        self._endpoint = endpoint.rstrip("/")
        self._timeout = timeout
        # timeout=None turns off httpx's 5 s default
        options: Dict[str, Any] = {
            "auth": (AUTH_USER, self._api_key),
            "timeout": timeout,
        }
        if transport is not None:
            options["transport"] = transport
        self.http = httpx.AsyncClient(**options)

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    async def aclose(self):
        await self.http.aclose()

    async def __aenter__(self) -> "AsyncTinifyClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def _post(self, url: str, **kwargs) -> httpx.Response:
        logger.debug("POST %s", url)
        try:
            response = await self.http.post(url, **kwargs)
        except httpx.HTTPError as e:
            raise TinifyTransportError(f"Request to {url} failed: {e}") from e
        logger.debug("POST %s -> %s", url, response.status_code)
        raise_for_response(response.status_code, response.content)
        return response

    def _source_from_response(self, response: httpx.Response) -> AsyncSource:
        location = resolve_location(self._endpoint, response.headers.get("Location"))
        return AsyncSource(self, response.content, location)

    async def from_file(self, path: Union[str, Path]) -> AsyncSource:
        """
        Compress a local image file.

        Raises:
            TinifyFileError: If the file cannot be read
            TinifyClientError: If the API rejects the request
            TinifyTransportError: If the API cannot be reached
        """
        return await self.from_buffer(read_file(path))

    async def from_buffer(self, data: bytes) -> AsyncSource:
        response = await self._post(f"{self._endpoint}/shrink", content=data)
        return self._source_from_response(response)

    async def from_url(self, url: str) -> AsyncSource:
        response = await self._post(
            f"{self._endpoint}/shrink", json={"source": {"url": url}}
        )
        return self._source_from_response(response)
