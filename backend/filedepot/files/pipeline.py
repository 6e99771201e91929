"""Upload pipeline.

Each file of a batch goes through the same steps:

    stored name -> original blob write -> thumbnail (raster types only)
        -> catalog insert -> per-file descriptor

Failures are isolated per file. A failed blob write, a failed catalog insert
or any unexpected error turns into an ``UploadFailure`` for that file and
processing moves on; a failed
thumbnail only drops the thumbnail URL. The catalog row is always written
after the original blob, so a crash in between leaves an orphan blob but
never a row pointing at a missing blob.
"""
import logging
from typing import List, Optional, Sequence

from .blob_store import BlobArea, BlobStore
from .catalog import MetadataCatalog
from .errors import BadRequestError, FileDepotError
from .naming import StoredNameGenerator, extract_extension
from .schemas import (
    FileRecordCreate,
    UploadedFile,
    UploadFailure,
    UploadResult,
    UploadSuccess,
    file_url,
    is_thumbnail_eligible,
    sanitize_filename,
    thumbnail_url as build_thumbnail_url,
)
from .thumbnails import ThumbnailDeriver

logger = logging.getLogger(__name__)


class UploadPipeline:
    """Stores a batch of uploaded files and reports one outcome per file."""

    def __init__(
        self,
        blob_store: BlobStore,
        catalog: MetadataCatalog,
        deriver: ThumbnailDeriver,
        names: Optional[StoredNameGenerator] = None,
    ) -> None:
        self.blob_store = blob_store
        self.catalog = catalog
        self.deriver = deriver
        self.names = names or StoredNameGenerator()

    def handle_upload(self, files: Optional[Sequence[UploadedFile]]) -> List[UploadResult]:
        """Process *files* in order and return their descriptors in the same order.

        Raises:
            BadRequestError: If the batch is empty or absent. Nothing is
                stored in that case.
        """
        if not files:
            raise BadRequestError("No files were uploaded")

        results: List[UploadResult] = []
        for upload in files:
            try:
                results.append(self._process_file(upload))
            except Exception as exc:
                logger.exception(
                    "[upload] Unexpected error processing %s: %s", sanitize_filename(upload.name), exc
                )
                results.append(UploadFailure(name=upload.name, error=str(exc)))

        stored = sum(1 for r in results if isinstance(r, UploadSuccess))
        logger.info("[upload] Batch done: %d stored, %d failed", stored, len(results) - stored)
        return results

    def _process_file(self, upload: UploadedFile) -> UploadResult:
        safe_name = sanitize_filename(upload.name)
        file_type = extract_extension(upload.name)
        stored_name = self.names.generate(upload.name)

        try:
            path = self.blob_store.write(BlobArea.ORIGINALS, stored_name, upload.content)
        except FileDepotError as exc:
            logger.error("[upload] Error storing %s: %s", safe_name, exc)
            return UploadFailure(name=upload.name, error=exc.message)

        has_thumbnail = False
        if is_thumbnail_eligible(file_type):
            has_thumbnail = self._store_thumbnail(path, file_type, stored_name, safe_name)

        try:
            file_id = self.catalog.insert(
                FileRecordCreate(
                    original_name=upload.name,
                    stored_name=stored_name,
                    path=str(path),
                    type=file_type,
                    size=upload.size,
                )
            )
        except FileDepotError as exc:
            logger.error("[upload] Error recording %s: %s", safe_name, exc)
            return UploadFailure(name=upload.name, error=exc.message)

        logger.info(
            "[upload] Stored %s as %s (id=%d, %d bytes)",
            safe_name, stored_name, file_id, upload.size,
        )
        return UploadSuccess(
            id=file_id,
            name=upload.name,
            type=file_type,
            size=upload.size,
            url=file_url(file_id),
            thumbnail_url=build_thumbnail_url(file_id, file_type) if has_thumbnail else None,
        )

    def _store_thumbnail(self, original_path, file_type: str, stored_name: str, safe_name: str) -> bool:
        """Derive and write the thumbnail. Returns False on any failure."""
        try:
            thumbnail = self.deriver.derive(original_path, file_type)
            if thumbnail is None:
                return False
            self.blob_store.write(BlobArea.THUMBNAILS, stored_name, thumbnail)
        except FileDepotError as exc:
            logger.warning("[upload] Thumbnail skipped for %s: %s", safe_name, exc)
            return False
        return True
