"""Data models for pagethumb."""

from pagethumb.models.config import MIN_IMAGE_SIZE, ThumbnailConfig
from pagethumb.models.request import (
    ImageFormat,
    KeyStrategy,
    RenderRequest,
    ThumbnailResult,
)

__all__ = [
    # Configuration
    "MIN_IMAGE_SIZE",
    "ThumbnailConfig",
    # Request / result
    "ImageFormat",
    "KeyStrategy",
    "RenderRequest",
    "ThumbnailResult",
]
