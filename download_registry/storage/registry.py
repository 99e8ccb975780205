"""
Manages the SQLite database that keeps track of download tasks across restarts.
"""

import logging
import sqlite3
from collections.abc import Iterable
from contextlib import suppress
from pathlib import Path
from typing import Any

from download_registry.exceptions import RecordDecodeError
from download_registry.models.record import DownloadRecord, DownloadState
from download_registry.utils.formatting import to_local_naive

log = logging.getLogger(__name__)


class DownloadRegistry:
    """
    A single-writer SQLite registry of download records keyed by source URL.

    Every record is stored as an opaque blob in the ``download`` table. Failures
    are logged and reported through return values; no method raises on a
    database error.
    """

    def __init__(self, database_name: str, base_dir: Path | None = None):
        self.database_name = database_name
        self.base_dir = base_dir if base_dir is not None else Path.home()
        self._conn: sqlite3.Connection | None = None
        self.open()

    def __enter__(self) -> "DownloadRegistry":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def __del__(self):
        if getattr(self, "_conn", None) is not None:
            self.close()

    @property
    def db_path(self) -> Path:
        return self.base_dir / self.database_name

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> bool:
        """
        Opens the database file and makes sure the download table exists.

        Calling it on an open registry is a no-op. Returns False if the file
        cannot be opened; the registry stays unusable until a later call succeeds.
        """
        if self._conn is not None:
            return True

        try:
            conn = sqlite3.connect(self.db_path)
        except (OSError, sqlite3.Error) as e:
            log.error(f"Failed to open download registry at '{self.db_path}': {e}")
            return False

        try:
            self._initialize_db(conn)
        except sqlite3.Error as e:
            log.error(
                f"Failed to initialize download registry at '{self.db_path}': {e}"
            )
            conn.close()
            return False

        self._conn = conn
        log.debug(f"Opened download registry at '{self.db_path}'.")
        return True

    def close(self) -> bool:
        """Closes the connection. Returns False if nothing was open."""
        if self._conn is None:
            return False
        try:
            self._conn.close()
        except sqlite3.Error as e:
            log.error(f"Error while closing download registry: {e}")
        finally:
            self._conn = None
        log.debug(f"Closed download registry at '{self.db_path}'.")
        return True

    @staticmethod
    def _initialize_db(conn: sqlite3.Connection) -> None:
        """Creates the table and its URL index if they don't exist."""
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS download (
                url TEXT PRIMARY KEY,
                value BLOB
            );
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS url_index ON download (url);")
        conn.commit()

    def _get_connection(self) -> sqlite3.Connection | None:
        if self._conn is None:
            log.warning(f"Download registry '{self.db_path}' is not open.")
        return self._conn

    def _decode_row(self, url: str, blob: Any) -> DownloadRecord | None:
        try:
            return DownloadRecord.from_blob(blob)
        except RecordDecodeError as e:
            log.warning(f"Skipping unreadable registry entry for '{url}': {e}")
            return None

    def _scan(self) -> list[DownloadRecord] | None:
        """Reads and decodes every row in insertion order, or None on failure."""
        conn = self._get_connection()
        if conn is None:
            return None
        try:
            rows = conn.execute(
                "SELECT url, value FROM download ORDER BY rowid"
            ).fetchall()
        except sqlite3.Error as e:
            log.error(f"Failed to read download registry: {e}")
            return None

        records = []
        for url, blob in rows:
            record = self._decode_row(url, blob)
            if record is not None:
                records.append(record)
        return records

    def list_all(self) -> list[DownloadRecord]:
        """Returns every stored record, most recently updated first."""
        return self.list_pending((), include_finished=True, sort=True)

    def list_pending(
        self,
        external: Iterable[DownloadRecord] = (),
        include_finished: bool = False,
        sort: bool = True,
    ) -> list[DownloadRecord]:
        """
        Merges the stored records with records known only to the caller.

        Stored records come first, in scan order, with finished ones left out
        unless include_finished is set. Records from ``external`` follow. A URL
        appears once: the first record seen for it wins, so a stored record
        shadows an external one with the same URL.

        Args:
            external: Records that may not have been persisted yet.
            include_finished: Keep stored records in the FINISHED state.
            sort: Order the result by timestamp, most recent first. Ties keep
                their merge order.

        Returns:
            The merged list. A failed scan contributes no stored records.
        """
        stored = self._scan() or []

        result: list[DownloadRecord] = []
        seen: set[str] = set()
        for record in stored:
            if record.is_finished and not include_finished:
                continue
            if record.url not in seen:
                seen.add(record.url)
                result.append(record)

        for record in external:
            if record.url not in seen:
                seen.add(record.url)
                result.append(record)

        if sort:
            result.sort(key=lambda r: to_local_naive(r.timestamp), reverse=True)
        return result

    def get(self, url: str) -> DownloadRecord | None:
        """Looks up the stored record for a URL."""
        conn = self._get_connection()
        if conn is None:
            return None
        try:
            row = conn.execute(
                "SELECT url, value FROM download WHERE url = ?", (url,)
            ).fetchone()
        except sqlite3.Error as e:
            log.error(f"Failed to look up '{url}' in download registry: {e}")
            return None
        if row is None:
            return None
        return self._decode_row(row[0], row[1])

    def update(self, record: DownloadRecord) -> bool:
        """Inserts the record, replacing any stored record with the same URL."""
        conn = self._get_connection()
        if conn is None:
            return False
        try:
            conn.execute(
                "INSERT OR REPLACE INTO download (url, value) VALUES (?, ?)",
                (record.url, record.to_blob()),
            )
            conn.commit()
            return True
        except sqlite3.Error as e:
            log.error(f"Failed to store '{record.url}' in download registry: {e}")
            with suppress(sqlite3.Error):
                conn.rollback()
            return False

    def update_state(self, url: str, state: DownloadState) -> bool:
        """
        Changes the state of a stored record.

        Returns False if the state is unknown, no record is stored for the URL or
        the write fails. The read and the write are separate statements.
        """
        try:
            new_state = DownloadState(state)
        except (TypeError, ValueError):
            log.warning(f"Unknown download state {state!r} for '{url}', ignored.")
            return False

        record = self.get(url)
        if record is None:
            log.debug(f"No registry entry for '{url}', state left unchanged.")
            return False
        record.url = url
        record.state = new_state
        return self.update(record)

    def get_stats(self) -> dict[str, Any] | None:
        """Counts the stored records, in total and per state."""
        records = self._scan()
        if records is None:
            return None
        by_state = dict.fromkeys(DownloadState, 0)
        for record in records:
            by_state[record.state] += 1
        return {"total": len(records), "by_state": by_state}

    def vacuum(self) -> bool:
        """Optimizes the database file by rebuilding it."""
        conn = self._get_connection()
        if conn is None:
            return False
        try:
            conn.execute("VACUUM;")
            conn.execute("ANALYZE;")
            conn.commit()
            log.info("Download registry optimized successfully.")
            return True
        except sqlite3.Error as e:
            log.error(f"Database vacuum failed: {e}")
            return False
