"""Cleanup of raw renderer output using Pillow."""

from __future__ import annotations

import logging
from io import BytesIO

from PIL import Image

from pagethumb.errors import InvalidImageError
from pagethumb.models.config import MIN_IMAGE_SIZE
from pagethumb.models.request import ImageFormat

logger = logging.getLogger(__name__)

# Leading bytes of each raster format, used to skip offsets that cannot
# start an image before handing the buffer to Pillow.
SIGNATURES: dict[str, tuple[bytes, ...]] = {
    "PNG": (b"\x89PNG\r\n\x1a\n",),
    "JPEG": (b"\xff\xd8\xff",),
    "GIF": (b"GIF87a", b"GIF89a"),
}


class OutputSanitizer:
    """Strips diagnostic noise from renderer output and re-encodes the image.

    The renderer may print warnings before the image data. The sanitizer
    drops leading bytes one at a time, up to ``trim_limit``, until Pillow
    decodes an image of the expected format, then writes it out again so
    the cached file is always well-formed.
    """

    def __init__(
        self,
        quality: int = 100,
        gif_colors: int = 256,
        min_size: int = MIN_IMAGE_SIZE,
        trim_limit: int = 8192,
    ) -> None:
        self.quality = quality
        self.gif_colors = gif_colors
        self.min_size = min_size
        self.trim_limit = trim_limit

    def sanitize(self, data: bytes, image_format: ImageFormat) -> bytes:
        """Return the cleaned image for ``data``.

        Args:
            data: Raw renderer output
            image_format: Format the renderer was asked for

        Returns:
            The re-encoded image, or empty bytes if ``data`` is empty or
            holds no decodable image within the trim limit.

        Raises:
            InvalidImageError: the re-encoded image is below ``min_size``
                or exceeds Pillow's pixel limit
        """
        if not data:
            return b""
        if image_format == ImageFormat.SVG:
            return data

        image = self.find_image(data, image_format)
        if image is None:
            return b""

        encoded = self.encode(image, image_format)
        if len(encoded) < self.min_size:
            raise InvalidImageError(
                f"Rendered {image_format.value} is only {len(encoded)} bytes "
                f"(minimum {self.min_size})"
            )
        return encoded

    def find_image(self, data: bytes, image_format: ImageFormat) -> Image.Image | None:
        """Find the first decodable image in ``data``, skipping leading garbage."""
        pillow_format = image_format.pillow_format
        signatures = SIGNATURES[pillow_format]
        last = min(len(data), self.trim_limit + 1)

        for offset in range(last):
            if not data.startswith(signatures, offset):
                continue
            image = self._decode(data[offset:] if offset else data, pillow_format)
            if image is not None:
                if offset:
                    logger.debug(f"Dropped {offset} leading bytes of renderer output")
                return image

        logger.warning(
            f"No {image_format.value} image in the first {last} bytes of renderer output"
        )
        return None

    @staticmethod
    def _decode(data: bytes, pillow_format: str) -> Image.Image | None:
        try:
            image = Image.open(BytesIO(data), formats=[pillow_format])
            image.load()
        except Image.DecompressionBombError as e:
            raise InvalidImageError(f"Rendered {pillow_format} image is too large: {e}") from e
        except (OSError, SyntaxError, ValueError, EOFError):
            return None
        return image

    def encode(self, image: Image.Image, image_format: ImageFormat) -> bytes:
        """Encode ``image`` in the target format."""
        if image_format == ImageFormat.JPG:
            return self.to_jpg(image)
        if image_format == ImageFormat.GIF:
            return self.to_gif(image)
        return self.to_png(image)

    def to_png(self, image: Image.Image) -> bytes:
        if image.mode not in ("RGBA", "RGB", "L", "LA", "P"):
            image = image.convert("RGBA")

        output = BytesIO()
        image.save(output, format="PNG", optimize=True)
        return output.getvalue()

    def to_jpg(self, image: Image.Image) -> bytes:
        """Convert image to JPG, flattening any transparency onto white."""
        if image.mode in ("RGBA", "LA", "PA", "P"):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, (0, 0), rgba)
            image = background
        elif image.mode != "RGB":
            image = image.convert("RGB")

        quality = self.quality if self.quality > 0 else 94
        output = BytesIO()
        image.save(output, format="JPEG", quality=quality, optimize=True)
        return output.getvalue()

    def to_gif(self, image: Image.Image) -> bytes:
        """Convert image to a palette GIF with at most ``gif_colors`` colours."""
        if image.mode != "RGB":
            image = image.convert("RGB")
        image = image.quantize(colors=self.gif_colors)

        output = BytesIO()
        image.save(output, format="GIF", optimize=True)
        return output.getvalue()
