# src/cache/fingerprint.py - v1
"""Content fingerprinting for duplicate detection.

The fingerprint is the MD5 of the raw file bytes, so it depends only on
content and never on name, location or modification time.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from imgup.core.errors import FileError
from imgup.core.models import FileInfo

_CHUNK_SIZE = 1024 * 1024


def fingerprint(path: str | Path) -> str:
    """Stream a file through MD5 and return the lowercase hex digest.

    Raises:
        FileError: kind="not_found" if the path does not exist,
            kind="read_failure" for any other I/O error.
    """
    file_path = Path(path)
    digest = hashlib.md5()  # noqa: S324
    try:
        with file_path.open("rb") as fh:
            for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
    except FileNotFoundError as e:
        raise FileError(str(file_path), "not_found") from e
    except OSError as e:
        raise FileError(str(file_path), "read_failure", e.strerror or str(e)) from e
    return digest.hexdigest()


def get_file_info(path: str | Path) -> FileInfo:
    """Stat and fingerprint a file."""
    file_path = Path(path)
    try:
        stat = file_path.stat()
    except FileNotFoundError as e:
        raise FileError(str(file_path), "not_found") from e
    except OSError as e:
        raise FileError(str(file_path), "read_failure", e.strerror or str(e)) from e

    if not file_path.is_file():
        raise FileError(str(file_path), "read_failure", "not a regular file")

    return FileInfo(
        path=str(file_path),
        fingerprint=fingerprint(file_path),
        size_bytes=stat.st_size,
        filename=file_path.name,
    )


def checksum_tag(file_fingerprint: str, namespace: str = "imgup") -> str:
    """Machine tag that stores a fingerprint on a remote asset."""
    return f"{namespace}:checksum={file_fingerprint}"
