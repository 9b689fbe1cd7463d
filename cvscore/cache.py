"""JSON file cache for composed ATS scores."""

import hashlib
import json
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError

from .grader import strip_for_ai
from .models import AtsScoreResponse, CvDocument, normalize_locale

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path(os.getenv("CVSCORE_CACHE_DIR", ".cvscore_cache"))
DEFAULT_TTL = timedelta(hours=float(os.getenv("CVSCORE_CACHE_TTL_HOURS", "24")))
DEFAULT_MAX_ENTRIES = 256


def _hash(text: str) -> str:
    """Return a short SHA-256 hex digest."""
    return hashlib.sha256(text.encode()).hexdigest()[:16]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ScoreCache:
    """Stores one JSON file per (CV content, locale, mode) with a time-to-live."""

    def __init__(
        self,
        cache_dir: Path = DEFAULT_CACHE_DIR,
        ttl: timedelta = DEFAULT_TTL,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        self.cache_dir = Path(cache_dir)
        self.ttl = ttl
        self.max_entries = max_entries
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def key(cv: CvDocument, locale: str, mode: str = "rules") -> str:
        """Content hash of the CV (layout fields excluded), locale and mode."""
        payload = {"cv": strip_for_ai(cv), "locale": normalize_locale(locale), "mode": mode}
        return _hash(json.dumps(payload, sort_keys=True, ensure_ascii=False))

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def _load(self, path: Path) -> dict | None:
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError):
            return None
        return data if isinstance(data, dict) else None

    @staticmethod
    def _cached_at(data: dict | None) -> datetime | None:
        if not data:
            return None
        try:
            cached_at = datetime.fromisoformat(data["cached_at"])
        except (KeyError, TypeError, ValueError):
            return None
        # Timestamps written without an offset are taken as UTC
        if cached_at.tzinfo is None:
            cached_at = cached_at.replace(tzinfo=timezone.utc)
        return cached_at

    def _entries(self) -> list[Path]:
        return sorted(self.cache_dir.glob("*.json"))

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    def load(self, cv: CvDocument, locale: str, mode: str = "rules") -> AtsScoreResponse | None:
        """Return the cached response, or None on a miss, expiry or corrupt entry."""
        key = self.key(cv, locale, mode)
        data = self._load(self._path(key))
        cached_at = self._cached_at(data)
        if data is None or cached_at is None:
            logger.debug("Cache miss for %s", key)
            return None
        if _now() - cached_at > self.ttl:
            logger.debug("Cache entry %s expired (cached at %s)", key, cached_at.isoformat())
            return None
        try:
            response = AtsScoreResponse.model_validate(data.get("response"))
        except ValidationError:
            logger.debug("Cache entry %s is unreadable, ignoring", key)
            return None
        logger.debug("Cache hit for %s", key)
        return response

    def save(self, cv: CvDocument, locale: str, response: AtsScoreResponse, mode: str = "rules") -> None:
        key = self.key(cv, locale, mode)
        self._path(key).write_text(
            json.dumps(
                {
                    "cached_at": _now().isoformat(),
                    "locale": normalize_locale(locale),
                    "mode": mode,
                    "response": response.model_dump(by_alias=True, mode="json"),
                },
                indent=2,
                ensure_ascii=False,
            )
        )
        self._evict()

    def _evict(self) -> None:
        """Drop the oldest entries beyond ``max_entries``. Corrupt entries go first."""
        entries = self._entries()
        excess = len(entries) - self.max_entries
        if excess <= 0:
            return
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        entries.sort(key=lambda p: self._cached_at(self._load(p)) or oldest)
        for path in entries[:excess]:
            logger.debug("Evicting cache entry %s", path.stem)
            path.unlink(missing_ok=True)

    def clear(self) -> int:
        """Remove every entry and return how many were deleted."""
        removed = 0
        for path in self._entries():
            path.unlink(missing_ok=True)
            removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._entries())
