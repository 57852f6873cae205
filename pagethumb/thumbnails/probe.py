"""Freshness check for cached files."""

from __future__ import annotations

import logging
import os
import stat
import time
from pathlib import Path

from pagethumb.models.config import MIN_IMAGE_SIZE

logger = logging.getLogger(__name__)


def is_fresh(
    path: Path,
    max_age: int,
    min_size: int = MIN_IMAGE_SIZE,
    now: float | None = None,
) -> bool:
    """Return whether ``path`` holds a usable cached image.

    A file is usable when it exists, is a regular file, is not empty, is at
    least ``min_size`` bytes, and, if ``max_age`` is positive, was modified
    less than ``max_age`` seconds ago. Any stat failure counts as unusable.
    """
    try:
        info = os.stat(path)
    except OSError:
        return False

    if not stat.S_ISREG(info.st_mode):
        return False

    if info.st_size <= 0 or info.st_size < min_size:
        logger.debug(f"Ignoring undersized cache file {path} ({info.st_size} bytes)")
        return False

    if max_age > 0:
        if now is None:
            now = time.time()
        if now >= info.st_mtime + max_age:
            logger.debug(f"Cache file {path} is older than {max_age}s")
            return False

    return True
