"""Wiring of the file-storage components from configuration."""
from dataclasses import dataclass

from ..config import AppConfig
from .blob_store import BlobStore
from .catalog import MetadataCatalog
from .pipeline import UploadPipeline
from .service import FileService
from .thumbnails import ThumbnailDeriver


@dataclass
class FileDepot:
    """Everything the HTTP layer needs to serve the files API."""
    pipeline: UploadPipeline
    service: FileService
    max_file_size_bytes: int

    def close(self) -> None:
        self.pipeline.catalog.close()


def build_depot(config: AppConfig) -> FileDepot:
    """Create the blob store, catalog, deriver, pipeline and service.

    The catalog is recreated empty when ``catalog.recreate_on_start`` is set.
    """
    blob_store = BlobStore(config.storage.uploads_dir, config.storage.thumbnails_dir)
    catalog = MetadataCatalog(
        config.catalog.db_path,
        recreate=config.catalog.recreate_on_start,
    )
    deriver = ThumbnailDeriver(
        max_size=(config.thumbnails.max_width, config.thumbnails.max_height),
        jpeg_quality=config.thumbnails.jpeg_quality,
    )
    return FileDepot(
        pipeline=UploadPipeline(blob_store, catalog, deriver),
        service=FileService(blob_store, catalog),
        max_file_size_bytes=config.storage.max_file_size_bytes,
    )
