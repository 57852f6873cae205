"""Cache file writing and cleanup."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO

from pagethumb.errors import CacheIOError

logger = logging.getLogger(__name__)

# Owner read/write, group read.
FILE_MODE = 0o640


def open_cache_file(path: Path) -> BinaryIO:
    """Open ``path`` for writing, truncating any existing file."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
    return os.fdopen(fd, "wb")


def remove_partial(path: Path) -> None:
    """Delete a partially written cache file, logging instead of raising."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove partial cache file {path}: {e}")


def write_cache_file(path: Path, data: bytes) -> int:
    """Write ``data`` to ``path`` and return the number of bytes written.

    The file is written in place. On failure it is removed so a later
    freshness check cannot mistake it for a valid entry.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open_cache_file(path) as f:
            f.write(data)
    except OSError as e:
        remove_partial(path)
        raise CacheIOError(f"Could not write cache file {path}: {e}") from e

    logger.info(f"Wrote {len(data)} bytes to {path}")
    return len(data)
