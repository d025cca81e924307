"""Client-side cache of filing analyses, persisted to a local JSON file."""

from __future__ import annotations

import base64
import json
import logging
import os
import re
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from filing_insights.models.schemas import CachedEntry, CacheStats

logger = logging.getLogger(__name__)

CACHE_PREFIX = "ai_summary_"
CACHE_EXPIRY_DAYS = 30
MS_PER_DAY = 24 * 60 * 60 * 1000

# One lock per cache file, shared by every ResultCache in the process
_PATH_LOCKS: Dict[Path, threading.Lock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _PATH_LOCKS_GUARD:
        lock = _PATH_LOCKS.get(key)
        if lock is None:
            lock = _PATH_LOCKS[key] = threading.Lock()
        return lock


def _load_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError):
        return {}
    return payload if isinstance(payload, dict) else {}


def _save_json(path: Path, payload: Dict[str, Any]) -> None:
    """Write to a sibling temp file and swap it in, so readers never see a partial file."""
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as handle:
            tmp_name = handle.name
            handle.write(json.dumps(payload, indent=2))
        os.replace(tmp_name, path)
    except OSError as exc:  # pragma: no cover - best-effort persistence
        logger.warning("Unable to persist local cache %s: %s", path, exc)
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)


class ResultCache:
    """
    Analysis results keyed by document URL, expiring after ``expiry_days``.

    Expired entries are evicted lazily when read. Every read-modify-write of
    the file runs under a per-path lock, so concurrent writers for different
    URLs never drop each other's entries; writers for the same URL overwrite.
    """

    def __init__(
        self,
        path: Path | str,
        expiry_days: int = CACHE_EXPIRY_DAYS,
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(path)
        self.expiry_ms = expiry_days * MS_PER_DAY
        self._clock = clock
        self._lock = _lock_for(self.path)

    @staticmethod
    def get_key(document_url: str) -> str:
        encoded = base64.b64encode(document_url.encode("utf-8")).decode("ascii")
        return CACHE_PREFIX + re.sub(r"[^a-zA-Z0-9]", "", encoded)

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _entries(self) -> Dict[str, Any]:
        return {key: value for key, value in _load_json(self.path).items() if key.startswith(CACHE_PREFIX)}

    def get(self, document_url: str) -> Optional[CachedEntry]:
        """Return the cached entry for a URL, or None when absent or expired."""
        key = self.get_key(document_url)
        with self._lock:
            entries = _load_json(self.path)
            raw = entries.get(key)
            if raw is None:
                return None

            try:
                entry = CachedEntry.model_validate(raw)
            except ValueError as exc:
                logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
                entries.pop(key, None)
                _save_json(self.path, entries)
                return None

            if self._now_ms() > entry.timestamp + self.expiry_ms:
                entries.pop(key, None)
                _save_json(self.path, entries)
                return None

        if entry.document_url != document_url:
            return None

        return entry

    def set(
        self,
        document_url: str,
        summary: str,
        insights: List[str],
        financial_highlights: Optional[Dict[str, str]] = None,
    ) -> CachedEntry:
        entry = CachedEntry(
            summary=summary,
            insights=list(insights),
            financial_highlights=financial_highlights,
            timestamp=self._now_ms(),
            document_url=document_url,
        )
        with self._lock:
            entries = _load_json(self.path)
            entries[self.get_key(document_url)] = entry.model_dump()
            _save_json(self.path, entries)
        return entry

    def has(self, document_url: str) -> bool:
        return self.get(document_url) is not None

    def clear(self) -> None:
        with self._lock:
            entries = _load_json(self.path)
            remaining = {key: value for key, value in entries.items() if not key.startswith(CACHE_PREFIX)}
            _save_json(self.path, remaining)

    def stats(self) -> CacheStats:
        with self._lock:
            entries = self._entries()
        size = sum(len(json.dumps(value)) for value in entries.values())
        return CacheStats(total=len(entries), size=size)
