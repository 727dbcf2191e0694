"""Exception hierarchy for SafetyKit."""

from __future__ import annotations


class SafetyKitError(Exception):
    """Base class for all SafetyKit errors."""


class ConfigurationError(SafetyKitError):
    """A configuration reload was rejected; the previous snapshot stays active."""


class CompileError(ConfigurationError):
    """A word list could not be compiled into a regular expression."""


class DurationParseError(ConfigurationError):
    """A duration string could not be parsed."""


class ConfigurationAliasError(SafetyKitError):
    """The active configuration snapshot was set again by identity.

    This means a caller is holding on to (and possibly mutating) the live
    snapshot instead of building a new one.
    """


class HostError(SafetyKitError):
    """An external collaborator call failed."""


class NotFoundError(HostError):
    """The host has no record for the requested id or name."""


class UserLookupError(SafetyKitError):
    """A user record could not be fetched from the host."""

    def __init__(self, user_id: str, cause: Exception | None = None) -> None:
        super().__init__(f"failed to find user with id {user_id}: {cause}")
        self.user_id = user_id
        self.cause = cause


class AdminResolutionError(SafetyKitError):
    """No usable administrator identity could be resolved."""


class CleanupError(SafetyKitError):
    """Account cleanup failed at a step that cannot be skipped."""
