"""Ports to the chat host.

SafetyKit never talks to the chat server directly. Each capability it needs
is a small abstract class; a host adapter (or a test double) implements only
the ports the component it feeds actually uses. Implementations signal
failure by raising :class:`~safetykit.errors.HostError`, and
:class:`~safetykit.errors.NotFoundError` when a record does not exist.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from safetykit.moderation.models import FileInfo
from safetykit.users.models import UserSnapshot


class UserFetcher(ABC):
    """Fetch a user by id."""

    @abstractmethod
    def get_user(self, user_id: str) -> UserSnapshot:
        """Return the user or raise ``NotFoundError``."""


class UserLookup(ABC):
    """Fetch a user by username."""

    @abstractmethod
    def get_user_by_username(self, username: str) -> UserSnapshot:
        """Return the user or raise ``NotFoundError``."""


class RoleDirectory(ABC):
    """List users holding a role."""

    @abstractmethod
    def list_users_by_role(self, role: str) -> list[UserSnapshot]:
        """Return every user with *role*; an empty list is valid."""


class TeamMembership(ABC):
    """Enumerate and remove team memberships."""

    @abstractmethod
    def get_teams_for_user(self, user_id: str) -> list[str]:
        """Return the ids of the teams *user_id* belongs to."""

    @abstractmethod
    def remove_team_member(self, team_id: str, user_id: str, acting_admin_id: str = "") -> None:
        """Remove *user_id* from *team_id*; *acting_admin_id* may be empty."""


class AccountDeactivator(ABC):
    """Soft-deactivate accounts."""

    @abstractmethod
    def deactivate_user(self, user_id: str) -> None:
        """Deactivate *user_id*. Must be idempotent."""


class Notifier(ABC):
    """Send ephemeral (sender-only) notices."""

    @abstractmethod
    def send_ephemeral(
        self, user_id: str, channel_id: str, message: str, root_id: str = ""
    ) -> None:
        """Fire-and-forget; failures are not retried."""


class ChannelClassifier(ABC):
    """Classify post destinations."""

    @abstractmethod
    def is_direct_message(self, channel_id: str) -> bool:
        """Return True for a one-to-one conversation."""


class FileInfoSource(ABC):
    """Resolve attachment metadata from file ids."""

    @abstractmethod
    def get_file_info(self, file_id: str) -> FileInfo:
        """Return the file's metadata or raise ``HostError``."""


class ConfigSource(ABC):
    """Load the administrator-edited configuration fields."""

    @abstractmethod
    def load_configuration(self) -> Mapping[str, Any]:
        """Return the raw configuration mapping (host field names)."""
