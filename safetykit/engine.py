"""Host-facing facade wiring the moderation components together.

A host adapter creates one :class:`ModerationEngine` and forwards its hook
calls to it. The adapter object itself implements the ports in
:mod:`safetykit.host`.
"""

from __future__ import annotations

import logging
from typing import Callable

from safetykit.audit import ModerationAuditLog
from safetykit.config.loader import build_snapshot
from safetykit.config.models import PolicySnapshot
from safetykit.config.store import ConfigStore
from safetykit.errors import ConfigurationError
from safetykit.host import ConfigSource, FileInfoSource
from safetykit.lifecycle.controller import AccountLifecycleController
from safetykit.moderation.models import FilterResult, Post
from safetykit.moderation.pipeline import ContentFilterPipeline
from safetykit.rules.validators import RuleReport
from safetykit.users.cache import DEFAULT_CAPACITY, UserRecordCache
from safetykit.users.directory import UserDirectory
from safetykit.users.models import UserSnapshot, now_millis

logger = logging.getLogger(__name__)


class ModerationEngine:
    """Entry point for the host's plugin hooks.

    *host* must implement the user, role, team, deactivation, notification
    and channel ports. When it also implements :class:`FileInfoSource`,
    attachments referenced by id are resolved for the image throttle. The
    configuration is read from *config_source*, or from *host* when it is a
    :class:`ConfigSource`.
    """

    def __init__(
        self,
        host,
        config_source: ConfigSource | None = None,
        *,
        cache_capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], int] = now_millis,
        audit_log: ModerationAuditLog | None = None,
    ) -> None:
        if config_source is None and isinstance(host, ConfigSource):
            config_source = host
        self.config_source = config_source

        self.config = ConfigStore()
        self.cache = UserRecordCache(cache_capacity)
        self.users = UserDirectory(host, self.cache)
        self.pipeline = ContentFilterPipeline(
            self.config,
            self.users,
            notifier=host,
            channels=host,
            files=host if isinstance(host, FileInfoSource) else None,
            clock=clock,
        )
        self.lifecycle = AccountLifecycleController(
            self.config,
            self.users,
            lookup=host,
            roles=host,
            teams=host,
            deactivator=host,
            audit=audit_log,
        )

    # -- configuration -------------------------------------------------------

    def on_configuration_change(self) -> PolicySnapshot:
        """Reload, validate and publish the configuration.

        Raises:
            ConfigurationError: the new configuration is invalid; the
                previous snapshot stays active.
        """
        if self.config_source is None:
            raise ConfigurationError("no configuration source available")

        try:
            snapshot = build_snapshot(self.config_source.load_configuration())
        except ConfigurationError as e:
            logger.error("Configuration change rejected, keeping previous settings: %s", e)
            raise

        self.config.set(snapshot)
        logger.info("Configuration updated")
        return snapshot

    # -- hooks ---------------------------------------------------------------

    def message_will_be_posted(self, post: Post) -> FilterResult:
        return self.pipeline.filter_post(post)

    def message_will_be_updated(self, new_post: Post, old_post: Post | None = None) -> FilterResult:
        """Edits go through the same filter as new posts."""
        return self.pipeline.filter_post(new_post)

    def user_has_been_created(self, user: UserSnapshot) -> RuleReport:
        return self.lifecycle.on_user_created(user)

    def user_has_joined_team(self, team_id: str, user_id: str) -> bool:
        return self.lifecycle.on_user_joined_team(team_id, user_id)

    def user_will_log_in(self, user: UserSnapshot) -> str:
        return self.lifecycle.on_user_login(user)
