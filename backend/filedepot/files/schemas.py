"""Pydantic schemas for the file-storage module.

This module defines the data models shared by the upload pipeline, the
catalog and the HTTP layer:
- FileRecord: one catalog row per stored original
- FileRecordCreate: what the pipeline hands to the catalog
- UploadedFile: a raw file taken off the multipart request
- UploadSuccess / UploadFailure: per-file descriptors in a batch response
- FileListItem: one entry of GET /files

API output uses camelCase where the HTTP contract does (``thumbnailUrl``);
Python code stays snake_case.
"""
import re
import unicodedata
from datetime import datetime
from typing import FrozenSet, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Raster types eligible for thumbnail derivation (lowercase, no dot).
SUPPORTED_RASTER_TYPES: FrozenSet[str] = frozenset({"jpg", "jpeg", "png", "gif", "webp"})


def is_thumbnail_eligible(file_type: str) -> bool:
    """Return True when *file_type* is one of the supported raster types."""
    return file_type in SUPPORTED_RASTER_TYPES


_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def sanitize_filename(name: Optional[str]) -> str:
    """Make a user-supplied filename safe for headers and log lines.

    Directory components, path separators and control characters are
    removed. Returns ``"unnamed"`` when nothing printable is left.

    Examples:
        >>> sanitize_filename("../../etc/passwd")
        'passwd'
        >>> sanitize_filename("report\\r\\n.pdf")
        'report.pdf'
    """
    if not name:
        return "unnamed"
    name = unicodedata.normalize("NFKC", name)
    name = _CONTROL_CHARS.sub("", name)
    name = re.split(r"[\\/]", name)[-1]
    name = name.strip()
    return name or "unnamed"


class CamelModel(BaseModel):
    """Base for response schemas. Accepts snake_case, outputs camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileRecordCreate(BaseModel):
    """A catalog row before the catalog assigns ``id`` and ``uploaded_at``."""
    original_name: str = Field(..., description="User-supplied filename (untrusted)")
    stored_name: str = Field(..., description="Server-generated name on disk")
    path: str = Field(..., description="Absolute location of the original blob")
    type: str = Field(..., description="Lowercase extension without leading dot")
    size: int = Field(..., ge=0, description="Byte length reported at upload time")


class FileRecord(FileRecordCreate):
    """A stored file as recorded in the metadata catalog. Never updated."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Catalog-assigned id, never reused")
    uploaded_at: datetime = Field(..., description="Catalog-assigned insertion time")


class UploadedFile(BaseModel):
    """One file of an upload batch, already read off the request."""
    name: str
    content: bytes
    size: int


class UploadSuccess(CamelModel):
    id: int
    name: str
    type: str
    size: int
    url: str
    thumbnail_url: Optional[str] = None


class UploadFailure(CamelModel):
    name: str
    error: str


UploadResult = Union[UploadSuccess, UploadFailure]


class UploadResponse(CamelModel):
    """Envelope for POST /upload. Always ``success=True`` on normal completion."""
    success: bool = True
    results: List[UploadResult] = Field(default_factory=list)


class FileListItem(CamelModel):
    id: int
    name: str
    type: str
    size: int
    thumbnail_url: Optional[str] = None


def file_url(file_id: int) -> str:
    return f"/files/{file_id}"


def thumbnail_url(file_id: int, file_type: str) -> Optional[str]:
    """URL of the thumbnail for an eligible type, else None.

    Eligibility is decided by type alone, not by whether the thumbnail blob
    exists on disk.
    """
    if not is_thumbnail_eligible(file_type):
        return None
    return f"/thumbnails/{file_id}"
