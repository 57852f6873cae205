"""Exceptions raised by the thumbnail pipeline."""

from __future__ import annotations


class PageThumbError(Exception):
    """Base class for all pagethumb errors."""


class ConfigError(PageThumbError):
    """The renderer binary is missing or the configuration is unusable."""


class RenderTimeoutError(PageThumbError, TimeoutError):
    """The renderer did not finish before its deadline."""

    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(f"Rendering {url} exceeded {timeout:g}s")
        self.url = url
        self.timeout = timeout


class RenderError(PageThumbError):
    """The renderer failed and produced no usable output."""

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class InvalidImageError(PageThumbError):
    """Renderer output held no image, or the image is too small to be real."""


class UnsupportedContentError(PageThumbError):
    """The URL points at a document type that cannot be rendered."""

    def __init__(self, url: str, extension: str) -> None:
        super().__init__(f"Unsupported content type '.{extension}': {url}")
        self.url = url
        self.extension = extension


class CacheIOError(PageThumbError, OSError):
    """A cache file could not be opened or written."""


class NetworkError(PageThumbError):
    """A direct image download failed or returned no content."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
