"""FileDepot: a small file-storage service with thumbnails."""

__version__ = "0.1.0"
