"""Look-aside user resolution: cache first, host on a miss."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from safetykit.errors import HostError, UserLookupError
from safetykit.users.cache import UserRecordCache
from safetykit.users.models import UserSnapshot

if TYPE_CHECKING:
    from safetykit.host import UserFetcher

logger = logging.getLogger(__name__)


class UserDirectory:
    """Resolves user ids through a :class:`UserRecordCache`.

    Failed fetches are never cached, so a transient host error does not
    poison later lookups.
    """

    def __init__(self, fetcher: UserFetcher, cache: UserRecordCache) -> None:
        self.fetcher = fetcher
        self.cache = cache

    def get_user(self, user_id: str) -> UserSnapshot:
        """Return the user, fetching and caching it on a miss.

        Raises:
            UserLookupError: the host could not return the user.
        """
        user, found = self.cache.get(user_id)
        if found and user is not None:
            return user

        try:
            user = self.fetcher.get_user(user_id)
        except HostError as e:
            logger.error("Failed to fetch user user_id=%s: %s", user_id, e)
            raise UserLookupError(user_id, e) from e

        self.cache.put(user_id, user)
        return user

    def invalidate(self, user_id: str) -> None:
        self.cache.remove(user_id)
