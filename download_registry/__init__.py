"""
A persisted registry of download tasks.

Records each download's source URL, destination path, size, lifecycle state
and last-update time in a SQLite file, and merges them with not-yet-persisted
tasks on read.
"""

from download_registry.models.record import DownloadRecord, DownloadState
from download_registry.storage.registry import DownloadRegistry

__version__ = "0.1.0"

__all__ = ["DownloadRecord", "DownloadRegistry", "DownloadState", "__version__"]
