"""Cache keys derived from URLs.

Two strategies are available:

- ``sanitize`` drops every character that is not a letter or a digit.
  Readable, but lossy: ``http://a.b/c`` and ``http://ab/c`` share a key.
  This is accepted; pick ``base64`` where such URLs must not collide.
- ``base64`` is the URL-safe base64 form of the URL's UTF-8 bytes. It is
  reversible and never contains a path separator.
"""

from __future__ import annotations

import base64
import re

from pagethumb.models.request import KeyStrategy

_NON_ALNUM = re.compile(r"[\W_]+")


def sanitize_url(url: str) -> str:
    """Return ``url`` with all non-alphanumeric characters removed."""
    return _NON_ALNUM.sub("", url)


def encode_url(url: str) -> str:
    """Return the URL-safe base64 encoding of ``url``."""
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii")


def decode_key(key: str) -> str:
    """Reverse :func:`encode_url`."""
    return base64.urlsafe_b64decode(key.encode("ascii")).decode("utf-8")


def thumb_key(url: str, strategy: KeyStrategy = KeyStrategy.SANITIZE) -> str:
    """Get the cache key for ``url``."""
    if strategy == KeyStrategy.BASE64:
        return encode_url(url)
    return sanitize_url(url)
