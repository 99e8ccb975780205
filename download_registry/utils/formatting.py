"""
Helper functions for formatting data into human-readable strings.
"""

from datetime import datetime

# Shared by the read and write paths of the stored record format.
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def to_local_naive(value: datetime) -> datetime:
    """Converts an aware timestamp to naive local time; naive values pass through."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=None)
    return value.astimezone().replace(tzinfo=None)


def format_timestamp(value: datetime) -> str:
    """Formats a timestamp in the stored record format, in local time."""
    value = to_local_naive(value)
    if value == datetime.min:
        return ""
    # strftime does not zero-pad years below 1000 on every platform.
    return value.isoformat(sep=" ", timespec="seconds")


def parse_timestamp(text: str | None) -> datetime:
    """
    Parses a timestamp written by format_timestamp.

    Empty or unparsable input yields datetime.min, so such records sort last
    in a most-recent-first listing.
    """
    if not text:
        return datetime.min
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except (TypeError, ValueError):
        return datetime.min


def now_timestamp() -> datetime:
    """Returns the current local time at the resolution of the stored format."""
    return datetime.now().replace(microsecond=0)
