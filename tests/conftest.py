"""Shared fixtures: an in-memory chat host implementing every port."""

import tempfile

import pytest

from safetykit.audit import ModerationAuditLog
from safetykit.config.loader import build_snapshot
from safetykit.config.store import ConfigStore
from safetykit.errors import NotFoundError
from safetykit.host import (
    AccountDeactivator,
    ChannelClassifier,
    ConfigSource,
    FileInfoSource,
    Notifier,
    RoleDirectory,
    TeamMembership,
    UserFetcher,
    UserLookup,
)
from safetykit.users.cache import UserRecordCache
from safetykit.users.directory import UserDirectory
from safetykit.users.models import UserSnapshot

NOW = 1_700_000_000_000
HOUR = 3_600_000


class FakeHost(
    UserFetcher,
    UserLookup,
    RoleDirectory,
    TeamMembership,
    AccountDeactivator,
    Notifier,
    ChannelClassifier,
    FileInfoSource,
    ConfigSource,
):
    """Records every call; ``fail`` maps a method name to the error it raises."""

    def __init__(self):
        self.users: dict[str, UserSnapshot] = {}
        self.teams: dict[str, list[str]] = {}
        self.files = {}
        self.dm_channels: set[str] = set()
        self.configuration: dict = {}
        self.fail: dict[str, Exception] = {}
        self.fetches: list[str] = []
        self.removed: list[tuple[str, str, str]] = []
        self.deactivated: list[str] = []
        self.notices: list[tuple[str, str, str]] = []

    def add_user(self, user: UserSnapshot, teams=()):
        self.users[user.id] = user
        self.teams[user.id] = list(teams)
        return user

    def _maybe_fail(self, name):
        if name in self.fail:
            raise self.fail[name]

    def get_user(self, user_id):
        self.fetches.append(user_id)
        self._maybe_fail("get_user")
        if user_id not in self.users:
            raise NotFoundError(f"user {user_id} not found")
        return self.users[user_id]

    def get_user_by_username(self, username):
        self._maybe_fail("get_user_by_username")
        for user in self.users.values():
            if user.username == username:
                return user
        raise NotFoundError(f"user {username} not found")

    def list_users_by_role(self, role):
        self._maybe_fail("list_users_by_role")
        return [u for u in self.users.values() if role in u.role_list]

    def get_teams_for_user(self, user_id):
        self._maybe_fail("get_teams_for_user")
        teams = self.teams.get(user_id)
        if not teams:
            raise NotFoundError(f"no teams for {user_id}")
        return list(teams)

    def remove_team_member(self, team_id, user_id, acting_admin_id=""):
        self._maybe_fail("remove_team_member")
        self.removed.append((team_id, user_id, acting_admin_id))

    def deactivate_user(self, user_id):
        self._maybe_fail("deactivate_user")
        self.deactivated.append(user_id)

    def send_ephemeral(self, user_id, channel_id, message, root_id=""):
        self._maybe_fail("send_ephemeral")
        self.notices.append((user_id, channel_id, message))

    def is_direct_message(self, channel_id):
        self._maybe_fail("is_direct_message")
        return channel_id in self.dm_channels

    def get_file_info(self, file_id):
        self._maybe_fail("get_file_info")
        if file_id not in self.files:
            raise NotFoundError(f"file {file_id} not found")
        return self.files[file_id]

    def load_configuration(self):
        self._maybe_fail("load_configuration")
        return dict(self.configuration)

    @property
    def notice_texts(self) -> list[str]:
        return [n[2] for n in self.notices]


def make_store(**settings) -> ConfigStore:
    return ConfigStore(build_snapshot(settings))


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def directory(host):
    return UserDirectory(host, UserRecordCache())


@pytest.fixture
def audit_log():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield ModerationAuditLog(tmpdir)
