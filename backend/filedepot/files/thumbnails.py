"""Bounded-size thumbnail derivation with Pillow."""
import io
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError
from .schemas import is_thumbnail_eligible

logger = logging.getLogger(__name__)

# Output format per raster type; thumbnails keep the original's format.
_PIL_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
    "webp": "WEBP",
}


class ThumbnailDeriver:
    """Produces previews that fit inside a bounding box.

    Aspect ratio is preserved and images already inside the box are never
    enlarged (``Image.thumbnail`` only ever shrinks).
    """

    def __init__(self, max_size: Tuple[int, int] = (300, 300), jpeg_quality: int = 85) -> None:
        self.max_size = max_size
        self.jpeg_quality = jpeg_quality

    def derive(self, original_path: Union[str, Path], file_type: str) -> Optional[bytes]:
        """Return encoded thumbnail bytes, or None when *file_type* is skipped.

        Raises:
            DecodeError: If the original cannot be decoded as an image.
        """
        if not is_thumbnail_eligible(file_type):
            return None

        fmt = _PIL_FORMATS[file_type]
        try:
            with Image.open(original_path) as img:
                img.thumbnail(self.max_size)
                if fmt == "JPEG" and img.mode not in ("RGB", "L"):
                    img = img.convert("RGB")
                buffer = io.BytesIO()
                save_kwargs = {"quality": self.jpeg_quality, "optimize": True} if fmt == "JPEG" else {}
                img.save(buffer, fmt, **save_kwargs)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
            raise DecodeError(f"Cannot decode image as {file_type}: {exc}") from exc

        logger.debug("[thumbnails] Derived %s thumbnail from %s", fmt, original_path)
        return buffer.getvalue()
