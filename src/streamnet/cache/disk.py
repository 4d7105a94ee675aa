"""L2 disk cache: one file per key plus a persisted expiration index."""

from __future__ import annotations

import json
import logging
import shutil
import threading
from collections.abc import Iterable
from pathlib import Path

from streamnet.cache.keys import file_name_for, is_thumbnail_key
from streamnet.cache.stats import PayloadKind
from streamnet.utils.fs import atomic_write, directory_size

logger = logging.getLogger(__name__)

_DEFAULT_ROOT = Path.home() / ".cache" / "streamnet"
_METADATA_DIR = "metadata"
_THUMBNAIL_DIR = "thumbnails"
_INDEX_FILE = "expiration.json"


class DiskCache:
    """Keyed file store rooted at a writable directory.

    Payloads live in ``<root>/<sha256(key)>``; thumbnails in
    ``<root>/thumbnails/``. Every write goes through a temp file and
    ``os.replace``. Errors are raised as ``OSError``; callers decide how
    to degrade.
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root = root or _DEFAULT_ROOT
        self.ensure_layout()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def metadata_dir(self) -> Path:
        return self._root / _METADATA_DIR

    def ensure_layout(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        self.metadata_dir.mkdir(parents=True, exist_ok=True)
        (self._root / _THUMBNAIL_DIR).mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        if is_thumbnail_key(key):
            return self._root / _THUMBNAIL_DIR / file_name_for(key)
        return self._root / file_name_for(key)

    def get(self, key: str) -> bytes | None:
        try:
            return self.path_for(key).read_bytes()
        except FileNotFoundError:
            return None

    def set(self, key: str, payload: bytes) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write(path, payload)

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    def clear(self) -> None:
        shutil.rmtree(self._root, ignore_errors=True)
        self.ensure_layout()

    @property
    def size_bytes(self) -> int:
        """Bytes used by payload files (the metadata directory excluded)."""
        total, _ = directory_size(self._root)
        meta, _ = directory_size(self.metadata_dir)
        return total - meta

    @property
    def entry_count(self) -> int:
        _, count = directory_size(self._root)
        _, meta = directory_size(self.metadata_dir)
        return count - meta


class ExpirationIndex:
    """key → (expires_at, payload kind), persisted as JSON in the metadata dir.

    All mutations are serialized by one lock and each is written through to
    disk so the index survives restarts. Bare numeric records (no kind) are
    read as JSON payloads.
    """

    def __init__(self, metadata_dir: Path) -> None:
        self._path = metadata_dir / _INDEX_FILE
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, PayloadKind]] = self._load()

    def get(self, key: str) -> float | None:
        with self._lock:
            record = self._entries.get(key)
        return record[0] if record is not None else None

    def kind(self, key: str) -> PayloadKind:
        with self._lock:
            record = self._entries.get(key)
        return record[1] if record is not None else PayloadKind.JSON

    def set(self, key: str, expires_at: float, kind: PayloadKind = PayloadKind.JSON) -> None:
        with self._lock:
            self._entries[key] = (expires_at, kind)
            self._save()

    def pop(self, key: str) -> float | None:
        with self._lock:
            record = self._entries.pop(key, None)
            if record is not None:
                self._save()
        return record[0] if record is not None else None

    def pop_many(self, keys: Iterable[str]) -> int:
        """Drop several records with a single write. Returns how many existed."""
        with self._lock:
            removed = sum(self._entries.pop(key, None) is not None for key in keys)
            if removed:
                self._save()
        return removed

    def expired(self, now: float) -> list[str]:
        with self._lock:
            return [key for key, (expires_at, _) in self._entries.items() if expires_at < now]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._save()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _load(self) -> dict[str, tuple[float, PayloadKind]]:
        try:
            raw = json.loads(self._path.read_text())
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable expiration index %s: %s", self._path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Expiration index %s is not a mapping, ignoring", self._path)
            return {}
        entries: dict[str, tuple[float, PayloadKind]] = {}
        for key, value in raw.items():
            record = _parse_record(value)
            if record is not None:
                entries[key] = record
        return entries

    def _save(self) -> None:
        data = {
            key: {"expires_at": expires_at, "kind": kind.value}
            for key, (expires_at, kind) in self._entries.items()
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(self._path, json.dumps(data, sort_keys=True).encode("utf-8"))
        except OSError as e:
            logger.warning("Failed to persist expiration index: %s", e)


def _parse_record(value: object) -> tuple[float, PayloadKind] | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value), PayloadKind.JSON
    if not isinstance(value, dict):
        return None
    expires_at = value.get("expires_at")
    if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
        return None
    try:
        kind = PayloadKind(value.get("kind", PayloadKind.JSON))
    except ValueError:
        return None
    return float(expires_at), kind
