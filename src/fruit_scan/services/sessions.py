"""In-memory registry of pipeline sessions."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from fruit_scan.services.pipeline import PipelineController


@dataclass
class _SessionEntry:
    controller: PipelineController
    expires_at: datetime


@dataclass
class PipelineSessions:
    """Keeps one pipeline controller per client session.

    Sessions expire after ``idle_ttl_seconds`` without access; expired
    controllers are closed so their captured photos are deleted.
    """

    factory: Callable[[str], PipelineController]
    idle_ttl_seconds: int = 1800
    _entries: dict[str, _SessionEntry] = field(default_factory=dict, init=False)

    def get(self, session_id: str) -> PipelineController:
        """Return the controller for a session, creating it on first use."""
        controller = self.peek(session_id)
        if controller is None:
            controller = self.factory(session_id)
        self._entries[session_id] = _SessionEntry(
            controller=controller, expires_at=self._expiry()
        )
        return controller

    def peek(self, session_id: str) -> PipelineController | None:
        """Return a live session's controller without creating or renewing it."""
        self.expire()
        entry = self._entries.get(session_id)
        return entry.controller if entry else None

    def expire(self) -> int:
        """Close sessions idle past their TTL and return how many were closed."""
        now = datetime.now(tz=UTC)
        expired = [
            session_id
            for session_id, entry in self._entries.items()
            if now >= entry.expires_at
        ]
        for session_id in expired:
            self.end(session_id)
        return len(expired)

    def end(self, session_id: str) -> bool:
        """Close a session and forget it; return False if it was unknown."""
        entry = self._entries.pop(session_id, None)
        if entry is None:
            return False
        entry.controller.close()
        return True

    def close_all(self) -> None:
        """Close every session."""
        for session_id in list(self._entries):
            self.end(session_id)

    def __len__(self) -> int:
        return len(self._entries)

    def _expiry(self) -> datetime:
        return datetime.now(tz=UTC) + timedelta(seconds=self.idle_ttl_seconds)
