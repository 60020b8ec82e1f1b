# src/cache/sqlite_store.py - v1
"""SQLite-backed upload cache.

Uses stdlib sqlite3 with a single shared connection. All statements run
under one lock so only one write transaction is ever open.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path

from imgup.cache.base_cache_store import BaseCacheStore
from imgup.cache.models import UploadRecord
from imgup.core.errors import StorageError

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS uploads (
    file_md5 TEXT PRIMARY KEY,
    service TEXT NOT NULL,
    remote_id TEXT NOT NULL,
    remote_url TEXT NOT NULL,
    image_url TEXT,
    upload_time INTEGER,
    filename TEXT,
    file_size INTEGER
);
CREATE INDEX IF NOT EXISTS idx_service_id ON uploads(service, remote_id);
CREATE INDEX IF NOT EXISTS idx_filename ON uploads(filename);
"""

_COLUMNS = (
    "file_md5, service, remote_id, remote_url, image_url, "
    "upload_time, filename, file_size"
)


class SqliteCacheStore(BaseCacheStore):
    """Upload cache stored in a single SQLite file."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._lock = threading.Lock()
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"create cache directory {self._db_path.parent}: {e}"
            ) from e

        try:
            self._conn = sqlite3.connect(
                str(self._db_path), check_same_thread=False
            )
        except sqlite3.Error as e:
            raise StorageError(f"open cache database {self._db_path}: {e}") from e

        try:
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            self._conn.close()
            raise StorageError(f"initialize cache schema: {e}") from e

        logger.debug("Opened upload cache at %s", self._db_path)

    @property
    def path(self) -> Path:
        return self._db_path

    async def lookup(self, fingerprint: str) -> UploadRecord | None:
        """Retrieve the record for a fingerprint."""
        row = self._fetchone(
            f"SELECT {_COLUMNS} FROM uploads WHERE file_md5 = ?",
            (fingerprint,),
            what="query upload",
        )
        return _row_to_record(row) if row else None

    async def record(self, upload: UploadRecord) -> None:
        """Store a record (upsert, full row replace)."""
        params = (
            upload.fingerprint,
            upload.service,
            upload.remote_id,
            upload.remote_url,
            upload.image_url,
            int(upload.upload_time.timestamp()),
            upload.filename,
            upload.size_bytes,
        )
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(
                        f"INSERT OR REPLACE INTO uploads ({_COLUMNS}) "
                        "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                        params,
                    )
            except sqlite3.Error as e:
                raise StorageError(f"record upload: {e}") from e
        logger.debug(
            "Recorded %s -> %s/%s",
            upload.fingerprint, upload.service, upload.remote_id,
        )

    async def find_by_remote_id(
        self, service: str, remote_id: str
    ) -> UploadRecord | None:
        """Lookup by service and remote identifier."""
        row = self._fetchone(
            f"SELECT {_COLUMNS} FROM uploads WHERE service = ? AND remote_id = ?",
            (service, remote_id),
            what="query by remote ID",
        )
        return _row_to_record(row) if row else None

    async def find_by_filename(self, filename: str) -> list[UploadRecord]:
        """All uploads with this filename, newest first."""
        with self._lock:
            try:
                cursor = self._conn.execute(
                    f"SELECT {_COLUMNS} FROM uploads WHERE filename = ? "
                    "ORDER BY upload_time DESC, rowid DESC",
                    (filename,),
                )
                rows = cursor.fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"query by filename: {e}") from e
        return [_row_to_record(row) for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    def _fetchone(self, sql: str, params: tuple, what: str) -> tuple | None:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchone()
            except sqlite3.Error as e:
                raise StorageError(f"{what}: {e}") from e


def _row_to_record(row: tuple) -> UploadRecord:
    (fp, service, remote_id, remote_url, image_url,
     upload_time, filename, file_size) = row
    return UploadRecord(
        fingerprint=fp,
        service=service,
        remote_id=remote_id,
        remote_url=remote_url,
        image_url=image_url or "",
        upload_time=datetime.fromtimestamp(upload_time or 0, tz=timezone.utc),
        filename=filename or "",
        size_bytes=file_size or 0,
    )
