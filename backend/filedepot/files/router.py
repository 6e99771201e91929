"""FastAPI router for the files API.

Endpoints:
    POST   /upload           — Store a batch of files (multipart field "files")
    GET    /files            — List all files, newest first
    GET    /files/{id}       — Download an original
    GET    /thumbnails/{id}  — Fetch a thumbnail
    DELETE /files/{id}       — Delete a file and its thumbnail
"""
import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from .depot import FileDepot
from .errors import BadRequestError, FileDepotError, PayloadTooLargeError
from .schemas import UploadedFile, UploadResponse, sanitize_filename

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])

# ---------------------------------------------------------------------------
# Singleton depot management
# ---------------------------------------------------------------------------

_depot: Optional[FileDepot] = None


def get_depot() -> Optional[FileDepot]:
    """Return the global FileDepot, or None if not configured."""
    return _depot


def set_depot(depot: Optional[FileDepot]) -> None:
    """Set (or clear) the global FileDepot."""
    global _depot
    _depot = depot


def _require_depot() -> FileDepot:
    depot = get_depot()
    if depot is None:
        raise RuntimeError("File storage is not configured")
    return depot


def _error_response(exc: FileDepotError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


def _content_disposition(disposition: str, filename: str) -> str:
    filename = sanitize_filename(filename)
    quoted = quote(filename)
    if quoted != filename:
        return f"{disposition}; filename*=utf-8''{quoted}"
    return f'{disposition}; filename="{filename}"'


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/upload")
async def upload_files(
    files: Optional[List[UploadFile]] = File(None),
    depot: FileDepot = Depends(_require_depot),
) -> JSONResponse:
    """Store one or more files.

    Each file gets its own result entry; a failing file never changes the
    overall status, which stays 200.

    Returns:
        ``{"success": true, "results": [...]}``; 400 if no files were sent,
        413 if a file exceeds the size ceiling, 500 on unexpected failure.
    """
    if not files:
        return JSONResponse({"error": "No files were uploaded"}, status_code=400)

    batch: List[UploadedFile] = []
    for upload in files:
        content = await upload.read()
        if len(content) > depot.max_file_size_bytes:
            limit_mb = depot.max_file_size_bytes // (1024 * 1024)
            logger.warning(
                "[upload] Rejected %s: %d bytes exceeds %d MB limit",
                sanitize_filename(upload.filename), len(content), limit_mb,
            )
            return _error_response(
                PayloadTooLargeError(f"File size exceeds limit of {limit_mb}MB")
            )
        batch.append(UploadedFile(name=upload.filename or "", content=content, size=len(content)))

    try:
        results = await run_in_threadpool(depot.pipeline.handle_upload, batch)
    except BadRequestError as exc:
        return _error_response(exc)
    except Exception as exc:
        logger.exception("[upload] Upload endpoint error: %s", exc)
        return JSONResponse({"success": False, "error": str(exc)}, status_code=500)

    body = UploadResponse(success=True, results=results)
    return JSONResponse(body.model_dump(mode="json", by_alias=True))


@router.get("/files")
async def list_files(depot: FileDepot = Depends(_require_depot)) -> JSONResponse:
    """List all files, newest first, as ``[{id, name, type, size, thumbnailUrl}]``."""
    try:
        items = await run_in_threadpool(depot.service.list_files)
    except FileDepotError as exc:
        logger.error("[files] Listing failed: %s", exc)
        return JSONResponse({"error": "Database error"}, status_code=exc.status_code)
    return JSONResponse([item.model_dump(mode="json", by_alias=True) for item in items])


@router.get("/files/{file_id}")
async def download_file(file_id: int, depot: FileDepot = Depends(_require_depot)) -> Response:
    """Download an original under the name it was uploaded with."""
    try:
        blob = await run_in_threadpool(depot.service.get_original, file_id)
    except FileDepotError as exc:
        return _error_response(exc)
    return Response(
        content=blob.content,
        media_type=blob.media_type,
        headers={"Content-Disposition": _content_disposition("attachment", blob.filename)},
    )


@router.get("/thumbnails/{file_id}")
async def get_thumbnail(file_id: int, depot: FileDepot = Depends(_require_depot)) -> Response:
    """Serve a thumbnail. 400 for types that never have one, 404 if absent."""
    try:
        blob = await run_in_threadpool(depot.service.get_thumbnail, file_id)
    except FileDepotError as exc:
        return _error_response(exc)
    return Response(content=blob.content, media_type=blob.media_type)


@router.delete("/files/{file_id}")
async def delete_file(file_id: int, depot: FileDepot = Depends(_require_depot)) -> JSONResponse:
    """Delete a file, its thumbnail and its catalog record."""
    try:
        await run_in_threadpool(depot.service.delete_file, file_id)
    except FileDepotError as exc:
        return _error_response(exc)
    return JSONResponse({"success": True})
