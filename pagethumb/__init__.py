"""pagethumb - Cached web page thumbnails rendered with wkhtmltoimage."""

from pagethumb.client import PageThumbClient
from pagethumb.errors import (
    CacheIOError,
    ConfigError,
    InvalidImageError,
    NetworkError,
    PageThumbError,
    RenderError,
    RenderTimeoutError,
    UnsupportedContentError,
)
from pagethumb.models import ImageFormat, KeyStrategy, ThumbnailConfig, ThumbnailResult

__version__ = "0.1.0"
__all__ = [
    "PageThumbClient",
    "ThumbnailConfig",
    "ThumbnailResult",
    "ImageFormat",
    "KeyStrategy",
    "PageThumbError",
    "ConfigError",
    "RenderTimeoutError",
    "RenderError",
    "InvalidImageError",
    "UnsupportedContentError",
    "CacheIOError",
    "NetworkError",
]
