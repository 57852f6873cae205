"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import random
import subprocess
from io import BytesIO
from pathlib import Path
from typing import Generator

import httpx
import pytest
from PIL import Image

from pagethumb.client import PageThumbClient
from pagethumb.models import ThumbnailConfig


def make_image(pillow_format: str = "PNG", size: int = 128, seed: int = 0) -> bytes:
    """Create a noise image that compresses badly, so it stays above MIN_IMAGE_SIZE."""
    rng = random.Random(seed)
    image = Image.frombytes("RGB", (size, size), rng.randbytes(size * size * 3))
    buffer = BytesIO()
    image.save(buffer, format=pillow_format)
    return buffer.getvalue()


class FakeRenderer:
    """Stands in for subprocess.run while the renderer is invoked."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.stdout: bytes = b"Loading page (1/2)\n" + make_image("PNG")
        self.stderr: bytes = b""
        self.returncode = 0
        self.timeout = False
        self.error: OSError | None = None

    def __call__(self, cmd: list[str], **kwargs) -> subprocess.CompletedProcess[bytes]:
        self.calls.append(list(cmd))
        if self.error is not None:
            raise self.error
        if self.timeout:
            raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


class TruncatedStream(httpx.SyncByteStream):
    """Response body that breaks off after the first chunk."""

    def __iter__(self):
        yield make_image("PNG", size=32)[:512]
        raise httpx.ReadError("connection reset by peer")


class ImageServer:
    """httpx mock transport serving a few image URLs."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.files: dict[str, bytes] = {
            "/photo.png": make_image("PNG", size=32),
            "/photo.jpeg": make_image("JPEG", size=32),
            "/empty.png": b"",
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/broken.png":
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.path == "/truncated.png":
            return httpx.Response(200, stream=TruncatedStream())
        data = self.files.get(request.url.path)
        if data is None:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(200, content=data, headers={"Content-Type": "image/png"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_binary(tmp_path: Path) -> Path:
    """An executable file standing in for wkhtmltoimage."""
    binary = tmp_path / "bin" / "wkhtmltoimage"
    binary.parent.mkdir()
    binary.write_text("#!/bin/sh\nexit 0\n")
    binary.chmod(0o755)
    return binary


@pytest.fixture
def fake_renderer(monkeypatch: pytest.MonkeyPatch) -> FakeRenderer:
    renderer = FakeRenderer()
    monkeypatch.setattr("pagethumb.thumbnails.invoker.subprocess.run", renderer)
    return renderer


@pytest.fixture
def image_server() -> ImageServer:
    return ImageServer()


@pytest.fixture
def config(tmp_path: Path, fake_binary: Path) -> ThumbnailConfig:
    return ThumbnailConfig(cache_dir=tmp_path / "cache", binary_path=fake_binary)


@pytest.fixture
def client(
    config: ThumbnailConfig,
    fake_renderer: FakeRenderer,
    image_server: ImageServer,
) -> Generator[PageThumbClient, None, None]:
    """Create a client with a fake renderer and mocked HTTP transport."""
    client = PageThumbClient(config)
    client.fetcher._client = httpx.Client(transport=image_server.transport)
    yield client
    client.close()


@pytest.fixture
def image_factory():
    """Factory for noise images in a given Pillow format."""
    return make_image
