"""Helpers for building download records in tests."""

from datetime import datetime

from download_registry.models.record import DownloadRecord, DownloadState

DB_NAME = "test_downloads.db"


def make_record(
    url: str,
    state: DownloadState = DownloadState.PENDING,
    timestamp: datetime | None = None,
    size: int = 0,
) -> DownloadRecord:
    """Build a record with a destination path derived from the URL."""
    record = DownloadRecord(url=url)
    record.path = f"/downloads/{url.rsplit('/', 1)[-1]}"
    record.size = size
    record.state = state
    if timestamp is not None:
        record.timestamp = timestamp
    return record
