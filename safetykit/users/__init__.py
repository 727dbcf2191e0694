"""User snapshots, the bounded user cache, and look-aside resolution."""

from safetykit.users.cache import DEFAULT_CAPACITY, UserRecordCache
from safetykit.users.directory import UserDirectory
from safetykit.users.models import ADMIN_ROLE, UserSnapshot

__all__ = [
    "ADMIN_ROLE",
    "DEFAULT_CAPACITY",
    "UserDirectory",
    "UserRecordCache",
    "UserSnapshot",
]
