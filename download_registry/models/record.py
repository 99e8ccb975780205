"""
Dataclass model for a single download task's persisted metadata.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any

from download_registry.exceptions import RecordDecodeError
from download_registry.utils.formatting import (
    format_timestamp,
    now_timestamp,
    parse_timestamp,
)

TAG_URL = "url"
TAG_PATH = "path"
TAG_SIZE = "size"
TAG_STATE = "state"
TAG_TIMESTAMP = "timestamp"


class DownloadState(IntEnum):
    """Lifecycle state of a download, stored as an integer."""

    INVALID = 0
    PENDING = 1
    DOWNLOADING = 2
    PAUSED = 3
    FAILED = 4
    FINISHED = 5

    @classmethod
    def coerce(cls, value: Any) -> "DownloadState":
        """Converts a stored value to a state, falling back to INVALID."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.INVALID


def _coerce_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _coerce_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(eq=False)
class DownloadRecord:
    """
    Metadata of one download: where it comes from, where it goes, how large it
    is, its last reported state and when it was last updated.

    Two records are equal when their URLs are equal; the other fields are not
    part of a record's identity.
    """

    url: str = ""
    path: str = ""
    size: int = 0
    state: DownloadState = DownloadState.INVALID
    timestamp: datetime = field(default_factory=now_timestamp)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DownloadRecord):
            return NotImplemented
        return self.url == other.url

    __hash__ = None

    @property
    def is_finished(self) -> bool:
        return self.state == DownloadState.FINISHED

    def to_dict(self) -> dict[str, Any]:
        """Serializes the record to the stored key/value mapping."""
        return {
            TAG_URL: self.url,
            TAG_PATH: self.path,
            TAG_SIZE: int(self.size),
            TAG_STATE: int(self.state),
            TAG_TIMESTAMP: format_timestamp(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DownloadRecord":
        """
        Builds a record from a stored mapping.

        Missing or mistyped values fall back to defaults: an empty string for
        url and path, zero for size, INVALID for state and datetime.min for the
        timestamp.
        """
        return cls(
            url=_coerce_str(data.get(TAG_URL)),
            path=_coerce_str(data.get(TAG_PATH)),
            size=_coerce_int(data.get(TAG_SIZE)),
            state=DownloadState.coerce(data.get(TAG_STATE)),
            timestamp=parse_timestamp(_coerce_str(data.get(TAG_TIMESTAMP))),
        )

    def to_blob(self) -> bytes:
        """Encodes the record as the UTF-8 JSON blob kept in the database."""
        return json.dumps(self.to_dict(), ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_blob(cls, blob: bytes | str) -> "DownloadRecord":
        """
        Decodes a database blob.

        Raises:
            RecordDecodeError: If the blob is not a JSON object.
        """
        try:
            if isinstance(blob, bytes):
                blob = blob.decode("utf-8")
            data = json.loads(blob)
        except (TypeError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RecordDecodeError(f"Stored value is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise RecordDecodeError(
                f"Stored value must be a JSON object, got {type(data).__name__}."
            )
        return cls.from_dict(data)
