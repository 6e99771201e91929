"""Filesystem blob storage.

Blobs are stored in two areas:
    originals:  <uploads_dir>/<stored_name>
    thumbnails: <thumbnails_dir>/<stored_name>

There is no caching layer; every call goes to the filesystem.
"""
import logging
from enum import Enum
from pathlib import Path
from typing import Union

from .errors import NotFoundError, StorageWriteError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class BlobArea(str, Enum):
    ORIGINALS = "originals"
    THUMBNAILS = "thumbnails"


class BlobStore:
    """Reads, writes and deletes blobs under the originals/thumbnails dirs."""

    def __init__(self, uploads_dir: PathLike, thumbnails_dir: PathLike) -> None:
        self._roots = {
            BlobArea.ORIGINALS: Path(uploads_dir).resolve(),
            BlobArea.THUMBNAILS: Path(thumbnails_dir).resolve(),
        }
        for root in self._roots.values():
            root.mkdir(parents=True, exist_ok=True)

    def path_for(self, area: BlobArea, stored_name: str) -> Path:
        """Deterministic absolute location of *stored_name* within *area*."""
        return self._roots[area] / stored_name

    def write(self, area: BlobArea, stored_name: str, content: bytes) -> Path:
        """Persist *content* and return its absolute path.

        Raises:
            StorageWriteError: On any disk I/O failure.
        """
        path = self.path_for(area, stored_name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as exc:
            raise StorageWriteError(f"Failed to write {area.value} blob: {exc.strerror or exc}") from exc
        except ValueError as exc:
            # pathlib rejects names with embedded NUL bytes.
            raise StorageWriteError(f"Failed to write {area.value} blob: {exc}") from exc

        logger.debug("[blobs] Wrote %s (%d bytes)", path, len(content))
        return path

    def read(self, path: PathLike) -> bytes:
        """Return the bytes at *path*.

        Raises:
            NotFoundError: If nothing exists at *path* at call time.
        """
        try:
            return Path(path).read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise NotFoundError("File missing from storage") from exc

    def delete(self, path: PathLike) -> bool:
        """Remove the blob at *path*. Absence is not an error.

        Returns:
            True if a blob was removed, False if there was nothing to remove.
        """
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return False
        logger.debug("[blobs] Deleted %s", path)
        return True
