"""Audit trail for destructive moderation actions.

Each team removal and deactivation performed by the lifecycle controller is
appended as one JSON line to a daily file, so administrators can review or
undo what the moderation layer did to an account.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class AuditAction:
    REMOVE_TEAM_MEMBER = "remove_team_member"
    DEACTIVATE_USER = "deactivate_user"


@dataclass
class AuditEntry:
    """A single moderation action."""

    id: str
    timestamp: str
    action: str
    user_id: str
    username: str = ""
    email: str = ""
    team_id: str = ""
    acting_admin_id: str = ""
    reasons: list[str] = field(default_factory=list)
    success: bool = True
    error: str = ""


class ModerationAuditLog:
    """File-based JSON-lines audit log under ``base_dir``."""

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _log_file_for_date(self, dt: datetime) -> Path:
        return self._base_dir / f"{dt.strftime('%Y-%m-%d')}.jsonl"

    def record(
        self,
        action: str,
        user_id: str,
        *,
        username: str = "",
        email: str = "",
        team_id: str = "",
        acting_admin_id: str = "",
        reasons: Optional[list[str]] = None,
        success: bool = True,
        error: str = "",
    ) -> AuditEntry:
        """Append an entry and return it."""
        now = datetime.now(timezone.utc)
        entry = AuditEntry(
            id=uuid.uuid4().hex[:16],
            timestamp=now.isoformat(),
            action=action,
            user_id=user_id,
            username=username,
            email=email,
            team_id=team_id,
            acting_admin_id=acting_admin_id,
            reasons=reasons or [],
            success=success,
            error=error,
        )
        line = json.dumps(asdict(entry)) + "\n"
        with self._lock:
            with self._log_file_for_date(now).open("a", encoding="utf-8") as fh:
                fh.write(line)
        return entry

    def entries(
        self,
        *,
        user_id: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 200,
    ) -> list[AuditEntry]:
        """Return matching entries, newest first."""
        entries: list[AuditEntry] = []
        for path in sorted(self._base_dir.glob("*.jsonl")):
            for number, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
                if not line.strip():
                    continue
                try:
                    entries.append(AuditEntry(**json.loads(line)))
                except (json.JSONDecodeError, TypeError) as e:
                    logger.warning("Skipping unreadable audit line %s:%d: %s", path.name, number, e)

        if user_id:
            entries = [e for e in entries if e.user_id == user_id]
        if action:
            entries = [e for e in entries if e.action == action]

        entries.sort(key=lambda e: e.timestamp, reverse=True)
        return entries[:limit]

    def export(self, **filters: Any) -> str:
        """Export matching entries as a JSON array."""
        return json.dumps([asdict(e) for e in self.entries(**filters)], indent=2)
