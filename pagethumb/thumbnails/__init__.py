"""Rendering, cleanup and caching of page thumbnails."""

from pagethumb.thumbnails.fetcher import (
    DENIED_EXTENSIONS,
    IMAGE_EXTENSIONS,
    DirectFetcher,
    check_url,
    is_image_url,
    url_extension,
)
from pagethumb.thumbnails.invoker import RENDERER_BINARY, RendererInvoker
from pagethumb.thumbnails.keys import decode_key, encode_url, sanitize_url, thumb_key
from pagethumb.thumbnails.probe import is_fresh
from pagethumb.thumbnails.sanitizer import OutputSanitizer
from pagethumb.thumbnails.storage import remove_partial, write_cache_file

__all__ = [
    "DENIED_EXTENSIONS",
    "IMAGE_EXTENSIONS",
    "RENDERER_BINARY",
    "DirectFetcher",
    "OutputSanitizer",
    "RendererInvoker",
    "check_url",
    "decode_key",
    "encode_url",
    "is_fresh",
    "is_image_url",
    "remove_partial",
    "sanitize_url",
    "thumb_key",
    "url_extension",
    "write_cache_file",
]
