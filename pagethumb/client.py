"""Main PageThumbClient class - renders URLs into cached thumbnails."""

from __future__ import annotations

import logging
from pathlib import Path

from pagethumb.errors import CacheIOError, InvalidImageError, NetworkError
from pagethumb.models.config import ThumbnailConfig
from pagethumb.models.request import ImageFormat, ThumbnailResult
from pagethumb.thumbnails.fetcher import (
    IMAGE_EXTENSIONS,
    DirectFetcher,
    check_url,
    is_image_url,
    url_extension,
)
from pagethumb.thumbnails.invoker import RendererInvoker
from pagethumb.thumbnails.keys import thumb_key
from pagethumb.thumbnails.probe import is_fresh
from pagethumb.thumbnails.sanitizer import OutputSanitizer
from pagethumb.thumbnails.storage import remove_partial, write_cache_file

logger = logging.getLogger(__name__)


class PageThumbClient:
    """Renders web pages into thumbnail files, reusing fresh cached files.

    Each call runs synchronously. There is no locking between callers: two
    concurrent requests for the same URL may both render, and the last
    write wins.
    """

    def __init__(
        self,
        config: ThumbnailConfig | None = None,
        invoker: RendererInvoker | None = None,
        sanitizer: OutputSanitizer | None = None,
        fetcher: DirectFetcher | None = None,
    ) -> None:
        self.config = config or ThumbnailConfig()
        self.invoker = invoker or RendererInvoker(
            self.config.binary_path, timeout=self.config.timeout
        )
        self.sanitizer = sanitizer or OutputSanitizer(
            quality=self.config.quality,
            gif_colors=self.config.gif_colors,
            min_size=self.config.min_size,
            trim_limit=self.config.trim_limit,
        )
        self.fetcher = fetcher or DirectFetcher(timeout=self.config.fetch_timeout)

    def __enter__(self) -> PageThumbClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def thumb_key(self, url: str) -> str:
        """Get the cache key for ``url``."""
        return thumb_key(url, self.config.key_strategy)

    def extension_for(self, url: str) -> str:
        """Image URLs keep their own extension, pages use the configured format."""
        ext = url_extension(url)
        if ext in IMAGE_EXTENSIONS:
            return ext
        return self.config.image_format.value

    def path_file(self, url: str) -> Path:
        """Get the complete cache path for ``url``.

        The file is not required to exist.
        """
        return self.config.get_thumbnail_path(self.thumb_key(url), self.extension_for(url))

    def is_cached(self, url: str) -> bool:
        """Check whether a fresh cache file exists for ``url``."""
        return is_fresh(self.path_file(url), self.config.max_age, self._min_size(url))

    def render(self, url: str) -> ThumbnailResult:
        """Return the thumbnail for ``url``, rendering it if needed.

        Raises:
            UnsupportedContentError: the URL names a non-renderable file
            ConfigError: the renderer executable is unavailable
            RenderTimeoutError: the renderer exceeded its deadline
            RenderError: the renderer failed without output
            InvalidImageError: the output held no usable image
            NetworkError: a direct image download failed
            CacheIOError: the cache file could not be written
        """
        check_url(url)
        self._apply_config()
        path = self.path_file(url)

        if is_image_url(url):
            return self._fetch(url, path)

        # Fail before touching the cache when rendering is impossible.
        self.invoker.require()

        if is_fresh(path, self.config.max_age, self._min_size(url)):
            logger.debug(f"Cache hit for {url}: {path}")
            return self._result(url, path, cached=True)

        logger.debug(f"Cache miss for {url}, rendering")
        request = self.config.request_for(url)
        raw = self.invoker.invoke(request)
        image = self.sanitizer.sanitize(raw, request.image_format)
        if not image:
            raise InvalidImageError(
                f"Renderer produced no {request.image_format.value} image for {url}"
            )

        write_cache_file(path, image)
        return self._result(url, path)

    def create_image(self, url: str) -> str:
        """Render ``url`` and return the cache file name (not the full path)."""
        return self.render(url).filename

    def get_thumbnail(self, url: str) -> bytes | None:
        """Get the cached thumbnail for ``url`` if it is fresh."""
        if not self.is_cached(url):
            return None
        return self.path_file(url).read_bytes()

    def close(self) -> None:
        """Release the HTTP client."""
        self.fetcher.close()

    def _apply_config(self) -> None:
        """Push the current config into the components before a request.

        ``config`` is mutable, so the components are brought in line with
        it on every call rather than only at construction.
        """
        config = self.config
        if self.invoker.binary_path != config.binary_path:
            self.invoker.reconfigure(config.binary_path)
        self.invoker.timeout = config.timeout

        self.sanitizer.quality = config.quality
        self.sanitizer.gif_colors = config.gif_colors
        self.sanitizer.min_size = config.min_size
        self.sanitizer.trim_limit = config.trim_limit

        if self.fetcher.timeout != config.fetch_timeout:
            # The HTTP client carries its timeout; recreate it on next use.
            self.fetcher.close()
            self.fetcher.timeout = config.fetch_timeout

    def _fetch(self, url: str, path: Path) -> ThumbnailResult:
        if is_fresh(path, self.config.max_age, self._min_size(url)):
            logger.debug(f"Cache hit for {url}: {path}")
            return self._result(url, path, cached=True, direct=True)

        logger.debug(f"Downloading image {url}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self.fetcher.fetch(url, path)
        except NetworkError:
            remove_partial(path)
            raise
        except OSError as e:
            remove_partial(path)
            raise CacheIOError(f"Could not write cache file {path}: {e}") from e

        logger.info(f"Stored {url} as {path}")
        return self._result(url, path, direct=True)

    def _min_size(self, url: str) -> int:
        # Downloads and SVG renders are stored as received; only re-encoded
        # raster renders must reach the minimum size.
        if is_image_url(url) or self.config.image_format == ImageFormat.SVG:
            return 1
        return self.config.min_size

    def _result(
        self, url: str, path: Path, cached: bool = False, direct: bool = False
    ) -> ThumbnailResult:
        return ThumbnailResult(
            url=url,
            filename=path.name,
            path=path,
            image_format=self.extension_for(url),
            cached=cached,
            direct=direct,
            size_bytes=path.stat().st_size,
        )
