"""Thumbnail configuration."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from pagethumb.models.request import ImageFormat, KeyStrategy, RenderRequest

# Smallest file accepted as a real page render. Blank or failed pages
# re-encode to a few hundred bytes.
MIN_IMAGE_SIZE = 4096

DEFAULT_TIMEOUT = 45.0
DEFAULT_FETCH_TIMEOUT = 30.0


def _default_cache_dir() -> Path:
    return Path(os.path.abspath(os.curdir))


class ThumbnailConfig(BaseModel):
    """Settings for rendering and caching page thumbnails.

    One instance belongs to one client, so differently configured clients
    can live side by side in the same process.
    """

    model_config = ConfigDict(validate_assignment=True)

    cache_dir: Path = Field(
        default_factory=_default_cache_dir,
        description="Directory holding the cached images (made absolute)",
    )
    max_age: int = Field(
        default=0, description="Max. age of cached images in seconds, 0 disables expiry"
    )
    image_format: ImageFormat = Field(default=ImageFormat.PNG)
    width: int = Field(default=1024, description="Width of the virtual screen")
    height: int = Field(default=742, description="Height of the virtual screen")
    quality: int = Field(default=100, ge=0, le=100, description="Image quality")
    javascript: bool = Field(default=False, description="Run page JavaScript")
    user_agent: str | None = Field(default=None, description="User-Agent header to send")
    renderer_cache_dir: Path | None = Field(
        default=None, description="Web cache directory for the renderer"
    )
    binary_path: Path | None = Field(
        default=None, description="Renderer executable, looked up on PATH if unset"
    )
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Render deadline (s)")
    fetch_timeout: float = Field(
        default=DEFAULT_FETCH_TIMEOUT, gt=0, description="Download timeout (s)"
    )
    min_size: int = Field(default=MIN_IMAGE_SIZE, ge=0, description="Min. valid file size")
    trim_limit: int = Field(
        default=8192, ge=0, description="Max. leading bytes dropped from renderer output"
    )
    key_strategy: KeyStrategy = Field(default=KeyStrategy.SANITIZE)
    gif_colors: int = Field(default=256, ge=2, le=256, description="GIF palette size")

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _absolute_dir(cls, value: str | Path) -> Path:
        return Path(os.path.abspath(Path(value).expanduser()))

    @field_validator("max_age")
    @classmethod
    def _clamp_age(cls, value: int) -> int:
        return value if value > 0 else 0

    @field_validator("image_format", mode="before")
    @classmethod
    def _parse_format(cls, value: str | ImageFormat) -> ImageFormat:
        return ImageFormat.parse(value)

    @classmethod
    def from_yaml(cls, path: Path) -> ThumbnailConfig:
        """Load a configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    def get_thumbnail_path(self, key: str, ext: str | None = None) -> Path:
        """Get the cache file path for a key.

        The extension defaults to the configured output format.
        """
        return self.cache_dir / f"{key}.{ext or self.image_format.value}"

    def request_for(self, url: str) -> RenderRequest:
        """Build the immutable render request for ``url``."""
        return RenderRequest(
            url=url,
            image_format=self.image_format,
            width=self.width,
            height=self.height,
            quality=self.quality,
            javascript=self.javascript,
            user_agent=self.user_agent,
            cache_dir=self.renderer_cache_dir,
        )
