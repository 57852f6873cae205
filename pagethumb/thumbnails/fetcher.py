"""Direct download of URLs that already point at an image.

URLs ending in an image extension skip the renderer and are fetched with a
plain GET. URLs ending in a known document, archive, media or executable
extension are refused outright; rendering them would only produce a blank
thumbnail.
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from urllib.parse import unquote, urlsplit

import httpx

from pagethumb.errors import NetworkError, UnsupportedContentError
from pagethumb.models.config import DEFAULT_FETCH_TIMEOUT
from pagethumb.thumbnails.storage import open_cache_file

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({"gif", "jpg", "jpeg", "png", "svg"})

DENIED_EXTENSIONS = frozenset({
    # Archives and disk images
    "7z", "apk", "arj", "bz2", "cab", "deb", "dmg", "gz", "iso", "jar",
    "lz", "lzma", "rar", "rpm", "tar", "tbz2", "tgz", "txz", "xz", "z", "zip",
    # Documents
    "doc", "docx", "epub", "odg", "odp", "ods", "odt", "pdf", "ppt", "pptx",
    "ps", "rtf", "xls", "xlsx",
    # Audio and video
    "aac", "avi", "flac", "flv", "m4a", "m4v", "mid", "midi", "mkv", "mov",
    "mp3", "mp4", "mpeg", "mpg", "oga", "ogg", "ogv", "opus", "wav", "webm",
    "wma", "wmv",
    # Executables and binaries
    "bin", "bat", "com", "dll", "exe", "msi", "so",
})


def url_extension(url: str) -> str:
    """Return the lowercase file extension of the URL's path, or ''."""
    path = unquote(urlsplit(url).path)
    ext = posixpath.splitext(posixpath.basename(path))[1]
    return ext[1:].lower()


def is_image_url(url: str) -> bool:
    return url_extension(url) in IMAGE_EXTENSIONS


def check_url(url: str) -> None:
    """Raise UnsupportedContentError if ``url`` names a non-renderable file."""
    ext = url_extension(url)
    if ext in DENIED_EXTENSIONS:
        raise UnsupportedContentError(url, ext)


class DirectFetcher:
    """Streams image URLs straight into cache files."""

    def __init__(self, timeout: float = DEFAULT_FETCH_TIMEOUT) -> None:
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, follow_redirects=True)
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def fetch(self, url: str, dest: Path) -> int:
        """Download ``url`` into ``dest`` and return the number of bytes written.

        ``dest`` is opened only once the response headers arrived, so a
        failed request leaves no file behind. Errors while writing
        propagate as ``OSError`` for the caller to clean up.
        """
        written = 0
        try:
            with self.client.stream("GET", url) as response:
                if response.is_error:
                    raise NetworkError(
                        f"GET {url} returned {response.status_code}",
                        status_code=response.status_code,
                    )
                if response.headers.get("Content-Length") == "0":
                    raise NetworkError(f"GET {url} returned no content")

                with open_cache_file(dest) as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
                        written += len(chunk)
        except httpx.HTTPError as e:
            raise NetworkError(f"GET {url} failed: {e}") from e

        if written == 0:
            raise NetworkError(f"GET {url} returned no content")

        logger.debug(f"Downloaded {written} bytes from {url}")
        return written
