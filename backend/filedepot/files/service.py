"""Retrieval and deletion of stored files.

Handlers compose the catalog and the blob store; missing records and
missing blobs both surface as NotFoundError.
"""
import logging
import mimetypes
from dataclasses import dataclass
from typing import List

from .blob_store import BlobArea, BlobStore
from .catalog import MetadataCatalog
from .errors import BadRequestError, NotFoundError
from .schemas import FileListItem, FileRecord, is_thumbnail_eligible, thumbnail_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlobContent:
    """Bytes of a blob plus what the HTTP layer needs to serve them."""
    content: bytes
    media_type: str
    filename: str


def _guess_media_type(name: str) -> str:
    media_type, _ = mimetypes.guess_type(name)
    return media_type or "application/octet-stream"


class FileService:
    """Lists, serves and deletes stored files."""

    def __init__(self, blob_store: BlobStore, catalog: MetadataCatalog) -> None:
        self.blob_store = blob_store
        self.catalog = catalog

    def _require_record(self, file_id: int) -> FileRecord:
        record = self.catalog.get_by_id(file_id)
        if record is None:
            raise NotFoundError("File not found")
        return record

    def list_files(self) -> List[FileListItem]:
        """All files, newest first, with a thumbnail URL for raster types."""
        return [
            FileListItem(
                id=record.id,
                name=record.original_name,
                type=record.type,
                size=record.size,
                thumbnail_url=thumbnail_url(record.id, record.type),
            )
            for record in self.catalog.list_all()
        ]

    def get_original(self, file_id: int) -> BlobContent:
        """Bytes of the original, named after the user's filename.

        Raises:
            NotFoundError: If the record or the blob is missing.
        """
        record = self._require_record(file_id)
        content = self.blob_store.read(record.path)
        return BlobContent(
            content=content,
            media_type=_guess_media_type(record.original_name),
            filename=record.original_name,
        )

    def get_thumbnail(self, file_id: int) -> BlobContent:
        """Bytes of the thumbnail.

        Raises:
            NotFoundError: If the record or the thumbnail blob is missing.
            BadRequestError: If the file type never has a thumbnail.
        """
        record = self._require_record(file_id)
        if not is_thumbnail_eligible(record.type):
            raise BadRequestError("Thumbnail not available for this file type")

        path = self.blob_store.path_for(BlobArea.THUMBNAILS, record.stored_name)
        try:
            content = self.blob_store.read(path)
        except NotFoundError:
            raise NotFoundError("Thumbnail not found") from None
        return BlobContent(
            content=content,
            media_type=_guess_media_type(record.stored_name),
            filename=record.stored_name,
        )

    def delete_file(self, file_id: int) -> None:
        """Remove the original, its thumbnail and the catalog row, in that order.

        Missing blobs are ignored.

        Raises:
            NotFoundError: If there is no record for *file_id*.
        """
        record = self._require_record(file_id)
        self.blob_store.delete(record.path)
        self.blob_store.delete(self.blob_store.path_for(BlobArea.THUMBNAILS, record.stored_name))
        if not self.catalog.delete_by_id(file_id):
            # Deleted concurrently between lookup and removal.
            raise NotFoundError("File not found")
        logger.info("[files] Deleted file %d (%s)", file_id, record.stored_name)
