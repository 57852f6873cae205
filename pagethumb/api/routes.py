"""FastAPI router for pagethumb.

Usage:
    from fastapi import FastAPI
    from pagethumb import PageThumbClient
    from pagethumb.api import create_router

    app = FastAPI()
    client = PageThumbClient()

    # Mount with default prefix /pagethumb
    app.include_router(create_router(client))
"""

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse
from pydantic import BaseModel

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

MEDIA_TYPES = {
    "png": "image/png",
    "gif": "image/gif",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "svg": "image/svg+xml",
}

# Most specific classes first.
ERROR_STATUS: list[tuple[type[PageThumbError], int]] = [
    (UnsupportedContentError, 415),
    (InvalidImageError, 422),
    (RenderTimeoutError, 504),
    (NetworkError, 502),
    (RenderError, 502),
    (ConfigError, 500),
    (CacheIOError, 500),
]


class PathResponse(BaseModel):
    url: str
    key: str
    path: str
    cached: bool


def status_for(error: PageThumbError) -> int:
    """Map a pipeline error to an HTTP status code."""
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def create_router(
    client: PageThumbClient,
    *,
    prefix: str = "/pagethumb",
    tags: list[str] | None = None,
) -> APIRouter:
    """Create a FastAPI router serving thumbnails.

    Args:
        client: PageThumbClient instance to use
        prefix: URL prefix for all routes (default: /pagethumb)
        tags: OpenAPI tags for the router

    Returns:
        APIRouter that can be included in a FastAPI app
    """
    if tags is None:
        tags = ["pagethumb"]

    router = APIRouter(prefix=prefix, tags=tags)

    def get_client() -> PageThumbClient:
        return client

    # Rendering blocks on a subprocess, so these are plain functions that
    # FastAPI runs in its threadpool.

    @router.get("/thumbnail")
    def get_thumbnail(
        url: Annotated[str, Query(min_length=1, description="Page or image URL")],
        client: Annotated[PageThumbClient, Depends(get_client)],
    ) -> FileResponse:
        """Render (or reuse) the thumbnail for a URL and return the image."""
        try:
            result = client.render(url)
        except PageThumbError as e:
            raise HTTPException(status_code=status_for(e), detail=str(e)) from e

        return FileResponse(
            Path(result.path),
            media_type=MEDIA_TYPES.get(result.image_format, "application/octet-stream"),
            filename=result.filename,
        )

    @router.get("/path", response_model=PathResponse)
    def get_path(
        url: Annotated[str, Query(min_length=1, description="Page or image URL")],
        client: Annotated[PageThumbClient, Depends(get_client)],
    ) -> PathResponse:
        """Get the cache location of a URL without rendering it."""
        return PathResponse(
            url=url,
            key=client.thumb_key(url),
            path=str(client.path_file(url)),
            cached=client.is_cached(url),
        )

    return router
