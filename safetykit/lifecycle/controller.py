"""Account lifecycle moderation: creation, team joins and logins.

Accounts that match the username or email rules are removed from their
teams and soft-deactivated. Team removal is best effort (a later team-join
event retries it); deactivation is not, and its failure aborts cleanup with
a :class:`~safetykit.errors.CleanupError`.
"""

from __future__ import annotations

import logging

from safetykit.audit import AuditAction, ModerationAuditLog
from safetykit.config.store import ConfigStore
from safetykit.errors import (
    AdminResolutionError,
    CleanupError,
    HostError,
    NotFoundError,
    UserLookupError,
)
from safetykit.host import AccountDeactivator, RoleDirectory, TeamMembership, UserLookup
from safetykit.rules.validators import (
    RuleReport,
    evaluate_rules,
    is_exempt,
    is_soft_deleted,
    requires_cleanup,
)
from safetykit.users.directory import UserDirectory
from safetykit.users.models import ADMIN_ROLE, UserSnapshot

logger = logging.getLogger(__name__)

DEACTIVATED_LOGIN_MESSAGE = (
    "Your account has been deactivated due to policy violations. "
    "Contact an administrator."
)
GUIDELINES_LOGIN_MESSAGE = (
    "Your account does not meet the community guidelines. Contact an administrator."
)


class AccountLifecycleController:
    """Reacts to account events reported by the host."""

    def __init__(
        self,
        config: ConfigStore,
        users: UserDirectory,
        lookup: UserLookup,
        roles: RoleDirectory,
        teams: TeamMembership,
        deactivator: AccountDeactivator,
        audit: ModerationAuditLog | None = None,
    ) -> None:
        self.config = config
        self.users = users
        self.lookup = lookup
        self.roles = roles
        self.teams = teams
        self.deactivator = deactivator
        self.audit = audit

    # -- events --------------------------------------------------------------

    def on_user_created(self, user: UserSnapshot) -> RuleReport:
        """Check a new account and clean it up if any rule fires.

        Raises:
            CleanupError: the account was flagged but could not be deactivated.
        """
        report = evaluate_rules(user, self.config.get().rules)
        if not report.requires_cleanup:
            return report

        logger.warning("New account flagged (%s): %s", user.describe(), report.summary())
        self.cleanup_user(user, report)
        return report

    def on_user_joined_team(self, team_id: str, user_id: str) -> bool:
        """Remove a flagged or deactivated user from the team they just joined.

        Covers accounts that joined a team before their creation cleanup
        finished. Returns True when the user was removed.
        """
        try:
            user = self.users.get_user(user_id)
        except UserLookupError as e:
            logger.error("Cannot check team join team_id=%s: %s", team_id, e)
            return False

        rules = self.config.get().rules
        if not (is_soft_deleted(user) or requires_cleanup(user, rules)):
            return False

        report = evaluate_rules(user, rules)
        reasons = [v.detail for v in report.violations] or ["account is deactivated"]
        logger.warning(
            "Flagged account joined team team_id=%s (%s): %s",
            team_id,
            user.describe(),
            "; ".join(reasons),
        )
        return self._remove_from_team(user, team_id, self._admin_id_or_empty(), reasons)

    def on_user_login(self, user: UserSnapshot) -> str:
        """Return an empty string to allow the login, or the refusal message."""
        if is_soft_deleted(user):
            logger.info("Refusing login for deactivated account %s", user.describe())
            return DEACTIVATED_LOGIN_MESSAGE
        if requires_cleanup(user, self.config.get().rules):
            logger.info("Refusing login for flagged account %s", user.describe())
            return GUIDELINES_LOGIN_MESSAGE
        return ""

    # -- cleanup -------------------------------------------------------------

    def cleanup_user(self, user: UserSnapshot, report: RuleReport | None = None) -> None:
        """Remove *user* from every team, deactivate it, and drop it from the cache.

        Raises:
            CleanupError: deactivation failed; the cache entry is kept.
        """
        reasons = [v.detail for v in report.violations] if report else []

        team_ids = self._teams_for(user)
        if team_ids:
            admin_id = self._admin_id_or_empty()
            for team_id in team_ids:
                self._remove_from_team(user, team_id, admin_id, reasons)

        try:
            self.deactivator.deactivate_user(user.id)
        except HostError as e:
            logger.error("Failed to deactivate %s: %s", user.describe(), e)
            self._audit(AuditAction.DEACTIVATE_USER, user, reasons=reasons, error=str(e))
            raise CleanupError(f"unable to deactivate user {user.id}: {e}") from e

        self._audit(AuditAction.DEACTIVATE_USER, user, reasons=reasons)
        self.users.invalidate(user.id)
        logger.info("Deactivated flagged account %s", user.describe())

    def _teams_for(self, user: UserSnapshot) -> list[str]:
        try:
            return list(self.teams.get_teams_for_user(user.id))
        except NotFoundError:
            return []
        except HostError as e:
            logger.error("Failed to list teams for %s: %s", user.describe(), e)
            return []

    def _remove_from_team(
        self, user: UserSnapshot, team_id: str, admin_id: str, reasons: list[str]
    ) -> bool:
        try:
            self.teams.remove_team_member(team_id, user.id, admin_id)
        except HostError as e:
            logger.error(
                "Failed to remove %s from team team_id=%s: %s", user.describe(), team_id, e
            )
            self._audit(
                AuditAction.REMOVE_TEAM_MEMBER,
                user,
                team_id=team_id,
                acting_admin_id=admin_id,
                reasons=reasons,
                error=str(e),
            )
            return False

        self._audit(
            AuditAction.REMOVE_TEAM_MEMBER,
            user,
            team_id=team_id,
            acting_admin_id=admin_id,
            reasons=reasons,
        )
        return True

    # -- administrator identity ----------------------------------------------

    def resolve_admin(self) -> UserSnapshot:
        """Find the administrator identity used for team removals.

        The configured admin username wins, but only if that account really
        holds the administrator role. Otherwise any active administrator is
        used.

        Raises:
            AdminResolutionError: the configured user is not an administrator,
                or no active administrator exists.
        """
        username = self.config.get().configuration.admin_username.strip()
        if username:
            try:
                admin = self.lookup.get_user_by_username(username)
            except HostError as e:
                logger.warning(
                    "Configured admin %r not found (%s); searching by role", username, e
                )
            else:
                if not is_exempt(admin):
                    raise AdminResolutionError(
                        f"configured admin user {username!r} does not have {ADMIN_ROLE} role"
                    )
                return admin

        try:
            candidates = self.roles.list_users_by_role(ADMIN_ROLE)
        except HostError as e:
            raise AdminResolutionError(f"failed to list {ADMIN_ROLE} users: {e}") from e

        for candidate in candidates:
            if not is_soft_deleted(candidate):
                return candidate
        raise AdminResolutionError(f"no active {ADMIN_ROLE} user found")

    def _admin_id_or_empty(self) -> str:
        try:
            return self.resolve_admin().id
        except AdminResolutionError as e:
            logger.error("No administrator identity (%s); attempting removal without one", e)
            return ""

    def _audit(self, action: str, user: UserSnapshot, *, error: str = "", **details) -> None:
        if self.audit is None:
            return
        try:
            self.audit.record(
                action,
                user.id,
                username=user.username,
                email=user.email,
                success=not error,
                error=error,
                **details,
            )
        except OSError as e:
            logger.error("Failed to write audit entry %s for %s: %s", action, user.describe(), e)
