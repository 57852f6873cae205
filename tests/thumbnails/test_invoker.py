"""Tests for the renderer invoker."""

from __future__ import annotations

from pathlib import Path

import pytest

from pagethumb.errors import ConfigError, RenderError, RenderTimeoutError
from pagethumb.models import ImageFormat, RenderRequest
from pagethumb.thumbnails import RendererInvoker


class TestBuildArgs:
    """Tests for command line construction."""

    def test_minimal_request(self):
        request = RenderRequest(url="http://example.com/")
        assert RendererInvoker.build_args(request) == [
            "-q",
            "--disable-plugins",
            "--disable-smart-width",
            "--format",
            "png",
            "--disable-javascript",
            "http://example.com/",
            "-",
        ]

    def test_full_request(self, tmp_path: Path):
        request = RenderRequest(
            url="http://example.com/",
            image_format=ImageFormat.JPG,
            width=1024,
            height=742,
            quality=90,
            javascript=True,
            user_agent="pagethumb/1.0",
            cache_dir=tmp_path,
        )
        assert RendererInvoker.build_args(request) == [
            "-q",
            "--disable-plugins",
            "--disable-smart-width",
            "--format",
            "jpg",
            "--custom-header",
            "User-Agent",
            "pagethumb/1.0",
            "--cache-dir",
            str(tmp_path),
            "--height",
            "742",
            "--width",
            "1024",
            "--quality",
            "90",
            "--enable-javascript",
            "http://example.com/",
            "-",
        ]

    def test_zero_dimensions_omitted(self):
        request = RenderRequest(url="http://example.com/", width=0, height=0, quality=0)
        args = RendererInvoker.build_args(request)
        assert "--width" not in args
        assert "--height" not in args
        assert "--quality" not in args

    def test_output_goes_to_stdout(self):
        args = RendererInvoker.build_args(RenderRequest(url="http://example.com/"))
        assert args[-2:] == ["http://example.com/", "-"]

    def test_empty_url(self):
        with pytest.raises(RenderError):
            RendererInvoker.build_args(RenderRequest(url=""))


class TestBinaryResolution:
    def test_explicit_binary(self, fake_binary: Path):
        invoker = RendererInvoker(fake_binary)
        assert invoker.binary == str(fake_binary)
        assert invoker.available

    def test_require(self, fake_binary: Path, tmp_path: Path):
        assert RendererInvoker(fake_binary).require() == str(fake_binary)
        with pytest.raises(ConfigError):
            RendererInvoker(tmp_path / "nope").require()

    def test_missing_explicit_binary(self, tmp_path: Path):
        invoker = RendererInvoker(tmp_path / "nope")
        with pytest.raises(ConfigError):
            invoker.binary
        assert not invoker.available

    def test_non_executable_binary(self, tmp_path: Path):
        binary = tmp_path / "wkhtmltoimage"
        binary.write_text("")
        binary.chmod(0o644)
        with pytest.raises(ConfigError):
            RendererInvoker(binary).binary

    def test_path_lookup_once(self, monkeypatch: pytest.MonkeyPatch):
        lookups = []

        def fake_which(name):
            lookups.append(name)
            return None

        monkeypatch.setattr("pagethumb.thumbnails.invoker.shutil.which", fake_which)
        invoker = RendererInvoker()
        for _ in range(3):
            with pytest.raises(ConfigError):
                invoker.binary
        assert lookups == ["wkhtmltoimage"]

    def test_reconfigure(self, tmp_path: Path, fake_binary: Path):
        invoker = RendererInvoker(tmp_path / "nope")
        assert not invoker.available
        invoker.reconfigure(fake_binary)
        assert invoker.binary == str(fake_binary)


class TestInvoke:
    """Tests for running the renderer."""

    @pytest.fixture
    def invoker(self, fake_binary: Path) -> RendererInvoker:
        return RendererInvoker(fake_binary, timeout=5)

    @pytest.fixture
    def request_(self) -> RenderRequest:
        return RenderRequest(url="http://example.com/", width=1024, height=742)

    def test_returns_stdout(self, invoker, request_, fake_renderer):
        fake_renderer.stdout = b"image bytes"
        assert invoker.invoke(request_) == b"image bytes"
        assert fake_renderer.calls[0][0] == invoker.binary
        assert fake_renderer.calls[0][1:] == RendererInvoker.build_args(request_)

    def test_timeout(self, invoker, request_, fake_renderer):
        fake_renderer.timeout = True
        with pytest.raises(RenderTimeoutError) as exc_info:
            invoker.invoke(request_)
        assert isinstance(exc_info.value, TimeoutError)
        assert exc_info.value.timeout == 5
        assert len(fake_renderer.calls) == 1

    def test_failure_without_output(self, invoker, request_, fake_renderer):
        fake_renderer.returncode = 1
        fake_renderer.stdout = b""
        fake_renderer.stderr = b"Error: Failed loading page"
        with pytest.raises(RenderError) as exc_info:
            invoker.invoke(request_)
        assert exc_info.value.returncode == 1
        assert "Failed loading page" in exc_info.value.stderr

    def test_failure_with_output_is_salvaged(self, invoker, request_, fake_renderer):
        fake_renderer.returncode = 1
        fake_renderer.stdout = b"partial image"
        fake_renderer.stderr = b"Warning: Failed to load resource"
        assert invoker.invoke(request_) == b"partial image"

    def test_spawn_error(self, invoker, request_, fake_renderer):
        fake_renderer.error = PermissionError("denied")
        with pytest.raises(RenderError):
            invoker.invoke(request_)

    def test_missing_binary_never_runs(self, tmp_path, request_, fake_renderer):
        invoker = RendererInvoker(tmp_path / "nope")
        with pytest.raises(ConfigError):
            invoker.invoke(request_)
        assert fake_renderer.calls == []
