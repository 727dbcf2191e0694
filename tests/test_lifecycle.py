"""Tests for account lifecycle moderation."""

import shutil
import tempfile
from pathlib import Path

import pytest
from conftest import make_store

from safetykit.audit import AuditAction, ModerationAuditLog
from safetykit.errors import AdminResolutionError, CleanupError, HostError
from safetykit.lifecycle.controller import AccountLifecycleController
from safetykit.rules.validators import RuleKind
from safetykit.users.models import UserSnapshot


def _controller(host, directory, audit_log=None, **settings):
    return AccountLifecycleController(
        make_store(**settings),
        directory,
        lookup=host,
        roles=host,
        teams=host,
        deactivator=host,
        audit=audit_log,
    )


def _admin(host, user_id="admin1", username="root", **kwargs):
    return host.add_user(
        UserSnapshot(id=user_id, username=username, roles="system_user system_admin", **kwargs)
    )


def _flagged(host, teams=("t1", "t2")):
    return host.add_user(
        UserSnapshot(id="u1", username="ihateneil", email="neil@example.com"), teams=teams
    )


# --- Account created ---


def test_clean_account_is_left_alone(host, directory):
    user = host.add_user(UserSnapshot(id="u1", username="neil"), teams=["t1"])
    report = _controller(host, directory, BadUsernamesList="hate").on_user_created(user)
    assert not report.requires_cleanup
    assert host.removed == []
    assert host.deactivated == []


def test_flagged_account_is_removed_and_deactivated(host, directory):
    _admin(host)
    user = _flagged(host)
    report = _controller(host, directory, BadUsernamesList="hate").on_user_created(user)
    assert report.kinds == [RuleKind.BAD_USERNAME]
    assert host.removed == [("t1", "u1", "admin1"), ("t2", "u1", "admin1")]
    assert host.deactivated == ["u1"]


def test_no_teams_is_not_an_error(host, directory):
    user = _flagged(host, teams=())
    _controller(host, directory, BadUsernamesList="hate").on_user_created(user)
    assert host.removed == []
    assert host.deactivated == ["u1"]


def test_team_failures_do_not_block_deactivation(host, directory):
    user = _flagged(host)
    host.fail["remove_team_member"] = HostError("forbidden")
    _controller(host, directory, BadUsernamesList="hate").on_user_created(user)
    assert host.deactivated == ["u1"]

    host.deactivated.clear()
    host.fail = {"get_teams_for_user": HostError("timeout")}
    _controller(host, directory, BadUsernamesList="hate").on_user_created(user)
    assert host.deactivated == ["u1"]


def test_deactivation_failure_raises(host, directory):
    user = _flagged(host)
    host.fail["deactivate_user"] = HostError("database locked")
    with pytest.raises(CleanupError) as exc:
        _controller(host, directory, BadUsernamesList="hate").on_user_created(user)
    assert "unable to deactivate user u1" in str(exc.value)


def test_cache_entry_invalidated_after_deactivation(host, directory):
    user = _flagged(host)
    directory.get_user("u1")
    _controller(host, directory, BadUsernamesList="hate").on_user_created(user)
    assert not directory.cache.get("u1")[1]


def test_cleanup_is_audited(host, directory, audit_log):
    _admin(host)
    user = _flagged(host, teams=["t1"])
    host.fail["remove_team_member"] = HostError("forbidden")
    _controller(host, directory, audit_log, BadUsernamesList="hate").on_user_created(user)

    removal = audit_log.entries(action=AuditAction.REMOVE_TEAM_MEMBER)
    assert len(removal) == 1
    assert not removal[0].success
    assert removal[0].team_id == "t1"
    assert removal[0].acting_admin_id == "admin1"

    deactivation = audit_log.entries(action=AuditAction.DEACTIVATE_USER)
    assert deactivation[0].success
    assert deactivation[0].username == "ihateneil"
    assert "username matches moderation list" in deactivation[0].reasons[0]


def test_unwritable_audit_log_does_not_stop_cleanup(host, directory):
    _admin(host)
    user = _flagged(host, teams=["t1"])
    directory.get_user("u1")
    with tempfile.TemporaryDirectory() as tmpdir:
        audit_dir = Path(tmpdir) / "audit"
        audit_log = ModerationAuditLog(audit_dir)
        shutil.rmtree(audit_dir)
        controller = _controller(host, directory, audit_log, BadUsernamesList="hate")
        controller.on_user_created(user)

    assert host.removed == [("t1", "u1", "admin1")]
    assert host.deactivated == ["u1"]
    assert not directory.cache.get("u1")[1]


# --- Team joined ---


def test_flagged_user_removed_from_joined_team(host, directory):
    _admin(host)
    _flagged(host)
    controller = _controller(host, directory, BadUsernamesList="hate")
    assert controller.on_user_joined_team("t9", "u1")
    assert host.removed == [("t9", "u1", "admin1")]


def test_deactivated_user_removed_from_joined_team(host, directory):
    _admin(host)
    host.add_user(UserSnapshot(id="u2", username="gone", delete_at=5))
    assert _controller(host, directory).on_user_joined_team("t1", "u2")


def test_clean_user_keeps_team(host, directory):
    host.add_user(UserSnapshot(id="u1", username="neil"))
    assert not _controller(host, directory, BadUsernamesList="hate").on_user_joined_team("t1", "u1")
    assert host.removed == []


def test_unknown_user_joining_team(host, directory):
    assert not _controller(host, directory).on_user_joined_team("t1", "ghost")


def test_removal_without_admin_identity(host, directory):
    _flagged(host)
    assert _controller(host, directory, BadUsernamesList="hate").on_user_joined_team("t1", "u1")
    assert host.removed == [("t1", "u1", "")]


def test_join_with_non_admin_configured_removes_without_admin(host, directory):
    _admin(host)
    host.add_user(UserSnapshot(id="u5", username="mallory", roles="system_user"))
    _flagged(host)
    controller = _controller(
        host, directory, BadUsernamesList="hate", AdminUsername="mallory"
    )
    assert controller.on_user_joined_team("t1", "u1")
    assert host.removed == [("t1", "u1", "")]


# --- Admin resolution ---


def test_configured_admin_preferred(host, directory):
    _admin(host, "admin1", "first")
    _admin(host, "admin2", "second")
    controller = _controller(host, directory, AdminUsername="second")
    assert controller.resolve_admin().id == "admin2"


def test_configured_non_admin_is_an_error(host, directory):
    _admin(host)
    host.add_user(UserSnapshot(id="u5", username="mallory", roles="system_user"))
    controller = _controller(host, directory, AdminUsername="mallory")
    with pytest.raises(AdminResolutionError) as exc:
        controller.resolve_admin()
    assert "does not have system_admin role" in str(exc.value)


def test_missing_configured_admin_falls_back(host, directory):
    _admin(host, "admin1", "root")
    assert _controller(host, directory, AdminUsername="nobody").resolve_admin().id == "admin1"


def test_inactive_admins_skipped(host, directory):
    _admin(host, "old", "old-root", delete_at=5)
    _admin(host, "new", "new-root")
    assert _controller(host, directory).resolve_admin().id == "new"


def test_no_admin_at_all(host, directory):
    with pytest.raises(AdminResolutionError):
        _controller(host, directory).resolve_admin()


# --- Login ---


def test_login_gate(host, directory):
    controller = _controller(host, directory, BadUsernamesList="hate")
    assert controller.on_user_login(UserSnapshot(id="a", username="neil")) == ""

    message = controller.on_user_login(UserSnapshot(id="b", username="neil", delete_at=1))
    assert "deactivated" in message
    assert "policy violations" in message

    message = controller.on_user_login(UserSnapshot(id="c", username="ihateneil"))
    assert "community guidelines" in message
