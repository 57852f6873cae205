"""Invocation of the external ``wkhtmltoimage`` renderer."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from pagethumb.errors import ConfigError, RenderError, RenderTimeoutError
from pagethumb.models.config import DEFAULT_TIMEOUT
from pagethumb.models.request import RenderRequest

logger = logging.getLogger(__name__)

RENDERER_BINARY = "wkhtmltoimage"


class RendererInvoker:
    """Runs the renderer for a request and returns its raw output.

    The binary is looked up on ``PATH`` once, on first use, unless an
    explicit path is given. The child process writes the image to stdout
    and is killed when the deadline expires.
    """

    def __init__(
        self,
        binary_path: Path | str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.binary_path = Path(binary_path) if binary_path else None
        self.timeout = timeout
        self._binary: str | None = None
        self._resolved = False

    def require(self) -> str:
        """Get the renderer executable, raising ConfigError if unavailable."""
        if not self._resolved:
            self._binary = self._resolve()
            self._resolved = True
        if not self._binary:
            target = self.binary_path or RENDERER_BINARY
            raise ConfigError(f"Renderer executable not found: {target}")
        return self._binary

    @property
    def binary(self) -> str:
        return self.require()

    def _resolve(self) -> str | None:
        if self.binary_path is not None:
            path = str(self.binary_path)
            if os.path.isfile(path) and os.access(path, os.X_OK):
                return path
            return None
        return shutil.which(RENDERER_BINARY)

    def reconfigure(self, binary_path: Path | str | None = None) -> None:
        """Point at another executable and resolve it again on next use."""
        self.binary_path = Path(binary_path) if binary_path else None
        self._binary = None
        self._resolved = False

    @property
    def available(self) -> bool:
        try:
            self.require()
        except ConfigError:
            return False
        return True

    @staticmethod
    def build_args(request: RenderRequest) -> list[str]:
        """Turn a request into renderer command line flags.

        The URL comes last, followed by ``-`` so the image is written to
        stdout instead of a file.
        """
        if not request.url:
            raise RenderError("Input URL not set")

        args = [
            "-q",
            "--disable-plugins",
            "--disable-smart-width",
            "--format",
            request.image_format.value,
        ]
        if request.user_agent:
            args.extend(["--custom-header", "User-Agent", request.user_agent])
        if request.cache_dir is not None:
            args.extend(["--cache-dir", str(request.cache_dir)])
        if request.height > 0:
            args.extend(["--height", str(request.height)])
        if request.width > 0:
            args.extend(["--width", str(request.width)])
        if request.quality > 0:
            args.extend(["--quality", str(request.quality)])
        if request.javascript:
            args.append("--enable-javascript")
        else:
            args.append("--disable-javascript")
        args.extend([request.url, "-"])
        return args

    def invoke(self, request: RenderRequest) -> bytes:
        """Render ``request.url`` and return whatever the renderer wrote.

        Raises:
            ConfigError: the executable cannot be found
            RenderTimeoutError: the deadline expired
            RenderError: the process failed without producing output
        """
        cmd = [self.require(), *self.build_args(request)]
        logger.debug(f"Running {' '.join(cmd)}")

        try:
            process = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise RenderTimeoutError(request.url, self.timeout) from e
        except OSError as e:
            raise RenderError(f"Failed to run {cmd[0]}: {e}") from e

        stderr = process.stderr.decode("utf-8", errors="replace").strip()
        if process.returncode != 0:
            if process.stdout:
                # Renderer reports errors for broken page resources but
                # still writes an image.
                logger.warning(
                    f"{RENDERER_BINARY} exited with {process.returncode} for "
                    f"{request.url}, keeping {len(process.stdout)} bytes of output"
                )
                return process.stdout
            raise RenderError(
                f"{RENDERER_BINARY} exited with {process.returncode} for {request.url}: "
                f"{stderr or 'no output'}",
                returncode=process.returncode,
                stderr=stderr,
            )

        if stderr:
            logger.debug(f"{RENDERER_BINARY} stderr: {stderr}")
        return process.stdout
