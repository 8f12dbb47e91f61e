"""In-process registry of live (not yet finished) quiz, interview and discussion sessions.

Sessions live in worker memory, keyed by ``(kind, user_id)``; each user has at
most one live session of each kind. Run the API with a single worker, or pin
users to workers, when relying on live sessions.
"""

from __future__ import annotations

import time
from threading import Lock
from typing import Any

APTITUDE_QUIZ = "aptitude-quiz"
MOCK_INTERVIEW = "mock-interview"
TECHNICAL_PRACTICE = "technical-practice"
HR_PRACTICE = "hr-practice"
GROUP_DISCUSSION = "group-discussion"


class LiveSessionRegistry:
    def __init__(self) -> None:
        self._lock = Lock()
        self._sessions: dict[tuple[str, str], dict[str, Any]] = {}

    def put(self, kind: str, user_id: str, session: Any) -> Any:
        """Register ``session``; returns the session it replaced, if any."""
        with self._lock:
            previous = self._sessions.get((kind, user_id))
            self._sessions[(kind, user_id)] = {"session": session, "updated_at": time.time()}
        return previous["session"] if previous else None

    def get(self, kind: str, user_id: str) -> Any | None:
        with self._lock:
            item = self._sessions.get((kind, user_id))
            if item is None:
                return None
            item["updated_at"] = time.time()
            return item["session"]

    def pop(self, kind: str, user_id: str) -> Any | None:
        with self._lock:
            item = self._sessions.pop((kind, user_id), None)
        return item["session"] if item else None

    def cleanup_idle(self, ttl_sec: float) -> int:
        cutoff = time.time() - max(30.0, float(ttl_sec))
        removed = 0
        with self._lock:
            for key, item in list(self._sessions.items()):
                if float(item.get("updated_at") or 0.0) <= cutoff:
                    self._sessions.pop(key, None)
                    removed += 1
        return removed


live_sessions = LiveSessionRegistry()
