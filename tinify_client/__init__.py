"""
Tinify Python client

Client library for the Tinify image optimization API (TinyPNG / TinyJPG).
Compression, resizing and conversion all happen on the API.

A Source holds the body of the last successful response as its bytes and the
Location header as the reference for follow-up operations. The image itself
is never fetched from the Location. The live /shrink endpoint answers with
JSON metadata, so save a source after a resize, convert or transform to get
image bytes from that service.

Usage:
    from tinify_client import Tinify, fit, to_webp

    # Initialize client
    client = Tinify().set_key("your_api_key").get_client()

    # Compress a file and save a resized copy
    client.from_file("photo.png").resize(fit(1920, 1080)).to_file("optimized.png")

    # Compress a remote image and chain operations
    source = client.from_url("https://tinypng.com/images/panda-happy.png")
    thumb = source.resize(fit(400, 200)).convert(to_webp(), background="white")
    image_bytes = thumb.to_buffer()

    # Non-blocking variant
    async with Tinify().set_key("your_api_key").get_async_client() as client:
        source = await client.from_buffer(image_bytes)
        source = await source.resize(fit(100, 100))
"""

from .async_client import AsyncSource, AsyncTinifyClient
from .client import API_ENDPOINT, Source, Tinify, TinifyClient
from .errors import (
    TinifyAccountError,
    TinifyClientError,
    TinifyConfigError,
    TinifyError,
    TinifyFileError,
    TinifyLogicError,
    TinifyServerError,
    TinifyTransportError,
)
from .models import (
    Convert,
    ImageType,
    Resize,
    ResizeMethod,
    Transform,
    UpstreamError,
    cover,
    fit,
    scale,
    smallest_of,
    thumbnail,
    to_webp,
)

__version__ = "0.1.0"

__all__ = [
    "API_ENDPOINT",
    "Tinify",
    "TinifyClient",
    "Source",
    "AsyncTinifyClient",
    "AsyncSource",
    "TinifyError",
    "TinifyConfigError",
    "TinifyFileError",
    "TinifyClientError",
    "TinifyAccountError",
    "TinifyServerError",
    "TinifyTransportError",
    "TinifyLogicError",
    "UpstreamError",
    "Resize",
    "ResizeMethod",
    "Convert",
    "ImageType",
    "Transform",
    "fit",
    "scale",
    "cover",
    "thumbnail",
    "to_webp",
    "smallest_of",
]
