"""
Operation payloads and API error body.

Resize, Convert and Transform describe follow-up operations on an already
compressed image. Their combinations are validated by the API, not here.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ResizeMethod(str, Enum):
    """The way an image is resized."""

    # Scale down proportionally, one dimension
    SCALE = "scale"
    # Scale down proportionally to fit within width x height
    FIT = "fit"
    # Scale proportionally and crop to exactly width x height
    COVER = "cover"
    # Like cover, but detects cut-out images with plain backgrounds
    THUMB = "thumb"


class ImageType(str, Enum):
    """Target image types for conversion."""

    PNG = "image/png"
    JPEG = "image/jpeg"
    WEBP = "image/webp"
    # Let the API choose the smallest of all supported types
    ANY = "*/*"


class Resize(BaseModel):
    """
    Resize operation.

    Images are never scaled up by the API.
    """

    method: ResizeMethod
    width: Optional[int] = None
    height: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"resize": self.model_dump(mode="json", exclude_none=True)}


class Transform(BaseModel):
    """
    Stylistic transformation.

    ``background`` is a hex colour (``#000000``) or ``white``/``black``. It is
    required when converting a transparent image to a type without
    transparency, such as JPEG.
    """

    background: str

    def to_payload(self) -> Dict[str, Any]:
        return {"transform": self.model_dump(mode="json")}


class Convert(BaseModel):
    """
    Convert operation.

    With more than one type the API returns the smallest result.
    """

    types: List[ImageType] = Field(min_length=1)

    def to_payload(self, background: Optional[str] = None) -> Dict[str, Any]:
        values = [t.value for t in self.types]
        payload: Dict[str, Any] = {
            "convert": {"type": values[0] if len(values) == 1 else values}
        }
        if background is not None:
            payload.update(Transform(background=background).to_payload())
        return payload


class UpstreamError(BaseModel):
    """Error body returned by the API: ``{"error": ..., "message": ...}``."""

    error: str
    message: str


# Convenience builders for common operations


def fit(width: int, height: int) -> Resize:
    """Fit within width x height."""
    return Resize(method=ResizeMethod.FIT, width=width, height=height)


def scale(width: Optional[int] = None, height: Optional[int] = None) -> Resize:
    """Scale proportionally by exactly one dimension."""
    return Resize(method=ResizeMethod.SCALE, width=width, height=height)


def cover(width: int, height: int) -> Resize:
    """Crop to exactly width x height."""
    return Resize(method=ResizeMethod.COVER, width=width, height=height)


def thumbnail(width: int, height: int) -> Resize:
    """Smart crop to width x height."""
    return Resize(method=ResizeMethod.THUMB, width=width, height=height)


def to_webp() -> Convert:
    return Convert(types=[ImageType.WEBP])


def smallest_of(*types: ImageType) -> Convert:
    """Convert to whichever of the given types is smallest."""
    return Convert(types=list(types) or [ImageType.ANY])
