"""Pure account rules evaluated against a user snapshot.

The account rules form a closed set (:class:`RuleKind`) evaluated in a fixed
order by :func:`evaluate_rules`. None of these functions perform I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from safetykit.config.models import RuleSet
from safetykit.rules.domains import email_domain, in_domain_list
from safetykit.users.models import ADMIN_ROLE, UserSnapshot


class RuleKind(Enum):
    """Account rules that trigger cleanup, in evaluation order."""

    BAD_USERNAME = "bad_username"
    BUILTIN_DOMAIN = "builtin_domain"
    BAD_DOMAIN = "bad_domain"


@dataclass
class RuleViolation:
    kind: RuleKind
    detail: str


@dataclass
class RuleReport:
    """Which account rules fired for a user."""

    user: UserSnapshot
    violations: list[RuleViolation] = field(default_factory=list)

    @property
    def requires_cleanup(self) -> bool:
        return len(self.violations) > 0

    @property
    def kinds(self) -> list[RuleKind]:
        return [v.kind for v in self.violations]

    def summary(self) -> str:
        if not self.violations:
            return f"{self.user.username}: clean"
        return f"{self.user.username}: " + "; ".join(v.detail for v in self.violations)


def is_bad_username(user: UserSnapshot, rules: RuleSet) -> bool:
    """True if the username pattern matches the username or the nickname."""
    if rules.bad_usernames is None:
        return False
    return bool(
        rules.bad_usernames.search(user.username) or rules.bad_usernames.search(user.nickname)
    )


def is_builtin_domain(user: UserSnapshot, rules: RuleSet) -> bool:
    """True if the builtin list is enabled and holds the exact email domain."""
    return rules.use_builtin_domains and in_domain_list(rules.builtin_domains, user.email)


def is_bad_domain(user: UserSnapshot, rules: RuleSet) -> bool:
    """True if the bad-domains pattern matches anywhere in the email domain."""
    if rules.bad_domains is None:
        return False
    domain = email_domain(user.email)
    if domain is None:
        return False
    return bool(rules.bad_domains.search(domain))


def is_bad_email(user: UserSnapshot, rules: RuleSet) -> bool:
    return is_builtin_domain(user, rules) or is_bad_domain(user, rules)


def is_soft_deleted(user: UserSnapshot) -> bool:
    return user.delete_at != 0


def is_exempt(user: UserSnapshot) -> bool:
    """Administrators bypass the new-account throttles (not profanity)."""
    return ADMIN_ROLE in user.role_list


def requires_cleanup(user: UserSnapshot, rules: RuleSet) -> bool:
    return is_bad_username(user, rules) or is_bad_email(user, rules)


def should_block(user: UserSnapshot, rules: RuleSet) -> bool:
    """True for accounts that are deactivated or about to be."""
    return is_soft_deleted(user) or requires_cleanup(user, rules)


_CHECKS = (
    (RuleKind.BAD_USERNAME, is_bad_username, "username matches moderation list: {u.username}"),
    (RuleKind.BUILTIN_DOMAIN, is_builtin_domain, "email domain is in builtin list of bad domains: {u.email}"),
    (RuleKind.BAD_DOMAIN, is_bad_domain, "email domain matches moderation list: {u.email}"),
)


def evaluate_rules(user: UserSnapshot, rules: RuleSet) -> RuleReport:
    """Run every account rule and report which ones fired."""
    report = RuleReport(user=user)
    for kind, check, message in _CHECKS:
        if check(user, rules):
            report.violations.append(RuleViolation(kind=kind, detail=message.format(u=user)))
    return report
