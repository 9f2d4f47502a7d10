"""
Rate Limiting
=============
Decides whether an automatic sync may run, based on the time of the last
automatic sync kept in a durable key-value store.

Manual syncs never consult this.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

LAST_SYNC_KEY = "lastAutoSyncTime"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class JsonFileStore:
    """Key-value store persisted as a JSON object in a file. Last write wins."""

    def __init__(self, path: str):
        self.path = path

    def _load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read state file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC"""
    if not value:
        return None
    text = value.strip()
    # JavaScript toISOString() ends in Z
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class RateLimiter:
    """Suppresses automatic syncs within threshold_hours of the last one"""

    def __init__(self, store: KeyValueStore, threshold_hours: float,
                 clock: Callable[[], datetime] = utc_now, key: str = LAST_SYNC_KEY):
        self.store = store
        self.threshold_hours = threshold_hours
        self.clock = clock
        self.key = key

    def last_sync_time(self) -> Optional[datetime]:
        raw = self.store.get(self.key)
        if not raw:
            return None
        parsed = parse_timestamp(raw)
        if parsed is None:
            logger.warning(f"Ignoring unreadable last sync time: {raw!r}")
        return parsed

    def should_skip(self, now: datetime = None) -> bool:
        """True if the last automatic sync was less than threshold_hours ago"""
        last_sync = self.last_sync_time()
        if last_sync is None:
            return False

        now = now or self.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        hours_elapsed = (now - last_sync).total_seconds() / 3600
        return hours_elapsed < self.threshold_hours

    def record_sync_now(self) -> None:
        self.store.set(self.key, self.clock().isoformat())
