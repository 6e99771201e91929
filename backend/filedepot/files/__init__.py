"""File upload and storage module for FileDepot.

Uploaded originals are written to disk, raster images get a bounded-size
thumbnail, and metadata is tracked in DuckDB. Stored files can be listed,
downloaded and deleted.

Supported thumbnail types:
- Images: jpg, jpeg, png, gif, webp
- Everything else is stored without a thumbnail

The catalog is recreated empty on startup by default, so metadata does not
survive a restart while the blobs on disk do.
"""

from .depot import FileDepot, build_depot
from .router import get_depot, router, set_depot

__all__ = [
    "FileDepot",
    "build_depot",
    "get_depot",
    "router",
    "set_depot",
]
