"""
AnalyticsStore - local JSON persistence for session records and usage events.

File layout:
    {"version": 1, "sessions": [...], "events": [...]}

Sessions are appended and never rewritten; events are capped to the most
recent entries. A missing or unreadable file starts an empty store.
"""
import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from vocalflow.errors import PersistenceError
from vocalflow.types import TranscriptionSession

logger = logging.getLogger(__name__)

STORE_VERSION = 1


class AnalyticsStore:
    """
    Args:
        path: Store file location
        max_events: Number of most recent events kept
    """

    def __init__(self, path: Path, max_events: int = 500) -> None:
        self._path = Path(path)
        self._max_events = max_events
        self._lock = threading.Lock()
        self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        empty = {"version": STORE_VERSION, "sessions": [], "events": []}
        if not self._path.exists():
            return empty
        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("AnalyticsStore: failed to read %s (%s), starting fresh", self._path, e)
            return empty
        if not isinstance(data, dict):
            logger.error("AnalyticsStore: unexpected content in %s, starting fresh", self._path)
            return empty

        data.setdefault("version", STORE_VERSION)
        data.setdefault("sessions", [])
        data.setdefault("events", [])
        return data

    def _persist(self) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + '.tmp')
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path.exists():
                tmp_path.unlink()
            raise PersistenceError(f"Failed to write analytics store {self._path}: {e}") from e

    def save_session(self, session: TranscriptionSession) -> None:
        """
        Append a session record.

        Raises:
            PersistenceError: the store file could not be written; the
                session is not kept in memory either
        """
        with self._lock:
            self._data["sessions"].append(session.to_dict())
            try:
                self._persist()
            except PersistenceError:
                self._data["sessions"].pop()
                raise
        logger.info("AnalyticsStore: saved session %s", session.id)

    def get_sessions(self, limit: Optional[int] = None) -> List[TranscriptionSession]:
        """Sessions newest first."""
        with self._lock:
            raw_sessions = list(self._data["sessions"])

        sessions = []
        for raw in raw_sessions:
            try:
                sessions.append(TranscriptionSession.from_dict(raw))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("AnalyticsStore: skipping malformed session record (%s)", e)

        sessions.sort(key=lambda s: s.start_time.timestamp(), reverse=True)
        return sessions[:limit] if limit is not None else sessions

    def get_sessions_in_range(self, start: datetime, end: datetime) -> List[TranscriptionSession]:
        start_ts, end_ts = start.timestamp(), end.timestamp()
        return [s for s in self.get_sessions() if start_ts <= s.start_time.timestamp() <= end_ts]

    def track_event(self, name: str, properties: Optional[Dict[str, Any]] = None) -> None:
        with self._lock:
            previous = self._data["events"]
            self._data["events"] = (previous + [{
                "name": name,
                "properties": properties or {},
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }])[-self._max_events:]
            try:
                self._persist()
            except PersistenceError:
                self._data["events"] = previous
                logger.exception("AnalyticsStore: failed to persist event %s", name)
                return
        logger.debug("AnalyticsStore: tracked event %s", name)

    def get_events(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._data["events"])

    def clear(self) -> None:
        with self._lock:
            self._data = {"version": STORE_VERSION, "sessions": [], "events": []}
            self._persist()
