"""Render request and result models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from pagethumb.errors import ConfigError


class ImageFormat(str, Enum):
    """Output formats supported by the renderer."""

    PNG = "png"
    GIF = "gif"
    JPG = "jpg"
    SVG = "svg"

    @classmethod
    def parse(cls, value: str | ImageFormat) -> ImageFormat:
        """Parse a format name, accepting ``jpeg`` as an alias of ``jpg``."""
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower().lstrip(".")
        if name == "jpeg":
            name = "jpg"
        try:
            return cls(name)
        except ValueError:
            raise ConfigError(f"Unsupported image format: {value!r}") from None

    @property
    def pillow_format(self) -> str | None:
        """Pillow format name, or None for vector output."""
        return {"png": "PNG", "gif": "GIF", "jpg": "JPEG"}.get(self.value)


class KeyStrategy(str, Enum):
    """How a URL is turned into a cache file name."""

    SANITIZE = "sanitize"  # drop every non-alphanumeric character
    BASE64 = "base64"  # URL-safe base64 of the URL bytes


class RenderRequest(BaseModel):
    """Everything the renderer needs for a single URL."""

    model_config = ConfigDict(frozen=True)

    url: str
    image_format: ImageFormat = ImageFormat.PNG
    width: int = 0
    height: int = 0
    quality: int = Field(default=0, ge=0, le=100)
    javascript: bool = False
    user_agent: str | None = None
    cache_dir: Path | None = Field(
        default=None, description="Cache directory hint passed to the renderer"
    )


class ThumbnailResult(BaseModel):
    """Outcome of a successful thumbnail request."""

    url: str
    filename: str = Field(..., description="Cache file name, <key>.<ext>")
    path: Path
    image_format: str = Field(..., description="Extension of the cache file")
    cached: bool = Field(default=False, description="Served from an existing file")
    direct: bool = Field(default=False, description="Downloaded instead of rendered")
    size_bytes: int = 0
