"""Filesystem helpers for the on-disk cache tier."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path


def atomic_write(path: str | os.PathLike[str], data: bytes) -> None:
    """Atomically write ``data`` to ``path``.

    Writes a temp file in the same directory, fsyncs it, then moves it
    over the target with ``os.replace`` so readers never see a partial file.
    """
    target = Path(path)
    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target.parent),
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as file_handle:
            file_handle.write(data)
            file_handle.flush()
            os.fsync(file_handle.fileno())
        os.replace(temp_path, target)
    except BaseException:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def directory_size(root: Path) -> tuple[int, int]:
    """Return ``(total_bytes, file_count)`` for regular files under ``root``."""
    total = 0
    count = 0
    if not root.exists():
        return 0, 0
    for path in root.rglob("*"):
        with contextlib.suppress(OSError):
            if path.is_file():
                total += path.stat().st_size
                count += 1
    return total, count
