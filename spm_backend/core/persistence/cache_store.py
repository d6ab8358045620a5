"""
Keyed cache store — memoized values persisted as JSON, one file per key.

Files live at ``<cache_dir>/<prefix>-<key>.json``.  Writes are atomic
(write to temp file, then rename) so a crash mid-write never leaves a
half-written cache behind.

Thread safety:
    A per-key lock makes ``get_or_try_init`` single-flight: when two
    threads ask for the same cold key, only one runs the producer and
    the other gets the stored result.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def cache_key(raw: str) -> str:
    """Turn an arbitrary string (package identifier, URL) into a file-safe key.

    The readable part is lossy, so a digest of the raw string is appended:
    ``owner/tool`` and ``owner/tool_`` never share a file.
    """
    readable = _UNSAFE_KEY_CHARS.sub("_", raw).strip("_") or "_"
    digest = hashlib.sha256(raw.encode("utf-8")).hexdigest()[:12]
    return f"{readable}-{digest}"


class CacheStore(Generic[T]):
    """Durable get-or-init cache keyed by string.

    Args:
        cache_dir: Directory holding the cache files.
        prefix: File name prefix, e.g. ``remote_versions``.
    """

    def __init__(self, cache_dir: Path, prefix: str) -> None:
        self.cache_dir = Path(cache_dir)
        self.prefix = prefix
        self._memo: dict[str, T] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._key_locks_guard = threading.Lock()

    def path_for(self, key: str) -> Path:
        return self.cache_dir / f"{self.prefix}-{cache_key(key)}.json"

    def _lock_for(self, key: str) -> threading.Lock:
        with self._key_locks_guard:
            if key not in self._key_locks:
                self._key_locks[key] = threading.Lock()
            return self._key_locks[key]

    def get(self, key: str) -> T | None:
        """Return the cached value, or None on a miss."""
        if key in self._memo:
            return self._memo[key]
        value = self._read(key)
        if value is not None:
            self._memo[key] = value
        return value

    def get_or_try_init(self, key: str, producer: Callable[[], T]) -> T:
        """Return the cached value for ``key``, computing it on a miss.

        Exceptions from ``producer`` propagate and nothing is stored.
        """
        with self._lock_for(key):
            cached = self.get(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                return cached

            logger.debug("Cache miss for %s", key)
            value = producer()
            self._write(key, value)
            self._memo[key] = value
            return value

    def clear(self, key: str | None = None) -> int:
        """Remove one key (or every key when None). Returns files removed."""
        removed = 0
        if key is not None:
            self._memo.pop(key, None)
            paths = [self.path_for(key)]
        else:
            self._memo.clear()
            paths = list(self.cache_dir.glob(f"{self.prefix}-*.json"))

        for path in paths:
            if path.is_file():
                path.unlink()
                removed += 1
        logger.debug("Cleared %d cache file(s) with prefix %s", removed, self.prefix)
        return removed

    # ── Storage ─────────────────────────────────────────────────

    def _read(self, key: str) -> Any:
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Corrupt cache file %s: %s, ignoring", path, e)
            return None
        if not isinstance(data, dict) or "value" not in data:
            logger.warning("Unexpected cache file layout in %s, ignoring", path)
            return None
        if data.get("key") != key:
            logger.warning("Cache file %s belongs to %r, not %r", path, data.get("key"), key)
            return None
        return data["value"]

    def _write(self, key: str, value: T) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        content = json.dumps(
            {"key": key, "created_at": time.time(), "value": value},
            indent=2,
            ensure_ascii=False,
        ) + "\n"

        _fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{self.prefix}_",
            suffix=".tmp",
        )
        tmp = Path(tmp_path)
        try:
            with open(_fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp.replace(path)
            logger.debug("Cache saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
