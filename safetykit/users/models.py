"""User snapshot model shared by the cache, the rules and the host ports."""

from __future__ import annotations

import time
from dataclasses import dataclass

ADMIN_ROLE = "system_admin"


def now_millis() -> int:
    """Current time as milliseconds since the epoch (the host's timestamp unit)."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class UserSnapshot:
    """Read-only view of a host user record.

    Timestamps are milliseconds since the epoch. ``delete_at`` is zero for
    active accounts. ``roles`` is the host's space-separated role string,
    e.g. ``"system_user system_admin"``.
    """

    id: str
    username: str = ""
    nickname: str = ""
    email: str = ""
    create_at: int = 0
    delete_at: int = 0
    roles: str = ""

    @property
    def role_list(self) -> list[str]:
        return self.roles.split()

    def describe(self) -> str:
        """Context string for log lines that support manual remediation."""
        return f"user_id={self.id} username={self.username!r} email={self.email!r}"
