"""Account lifecycle moderation (creation, team joins, logins)."""

from safetykit.lifecycle.controller import AccountLifecycleController

__all__ = ["AccountLifecycleController"]
