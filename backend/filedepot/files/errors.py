"""Error taxonomy for the file-storage module.

Each error carries the HTTP status it maps to. Per-file operational
failures (StorageWriteError, DecodeError, CatalogError) are caught by the
upload pipeline and reported inside the batch response; the rest surface
directly as the status of the request that raised them.
"""


class FileDepotError(Exception):
    """Base class for all file-storage errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(FileDepotError):
    """Malformed or empty request; the client can correct it."""

    status_code = 400


class NotFoundError(FileDepotError):
    """A catalog record or blob does not exist."""

    status_code = 404


class PayloadTooLargeError(FileDepotError):
    """An uploaded file exceeds the configured size ceiling."""

    status_code = 413


class StorageWriteError(FileDepotError):
    """Writing a blob to disk failed (permissions, disk full, ...)."""


class DecodeError(FileDepotError):
    """The bytes on disk are not a decodable image."""

    status_code = 422


class CatalogError(FileDepotError):
    """The metadata catalog rejected or failed an operation."""


class InternalError(FileDepotError):
    """Unexpected failure; clients only see a generic message."""
