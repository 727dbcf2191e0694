"""Configuration data models.

A :class:`PolicySnapshot` is built once per configuration change and never
mutated afterwards; concurrent readers always see a complete snapshot.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields

DEFAULT_CENSOR_CHARACTER = "*"
DEFAULT_WARNING_MESSAGE = (
    "Your post has been rejected because it contains the following "
    "words that are not allowed in this community: %s"
)

# Host field name -> Configuration attribute.
HOST_FIELD_NAMES: dict[str, str] = {
    "BadWordsList": "bad_words_list",
    "BadDomainsList": "bad_domains_list",
    "BadUsernamesList": "bad_usernames_list",
    "BuiltinBadDomains": "builtin_bad_domains",
    "BlockNewUserPM": "block_new_user_pm",
    "BlockNewUserPMTime": "block_new_user_pm_time",
    "BlockNewUserLinks": "block_new_user_links",
    "BlockNewUserLinksTime": "block_new_user_links_time",
    "BlockNewUserImages": "block_new_user_images",
    "BlockNewUserImagesTime": "block_new_user_images_time",
    "CensorCharacter": "censor_character",
    "ExcludeBots": "exclude_bots",
    "RejectPosts": "reject_posts",
    "WarningMessage": "warning_message",
    "AdminUsername": "admin_username",
}


@dataclass(frozen=True)
class Configuration:
    """Administrator-facing settings, as entered in the host's console."""

    bad_words_list: str = ""
    bad_domains_list: str = ""
    bad_usernames_list: str = ""
    builtin_bad_domains: bool = False
    block_new_user_pm: bool = False
    block_new_user_pm_time: str = ""
    block_new_user_links: bool = False
    block_new_user_links_time: str = ""
    block_new_user_images: bool = False
    block_new_user_images_time: str = ""
    censor_character: str = DEFAULT_CENSOR_CHARACTER
    exclude_bots: bool = False
    reject_posts: bool = False
    warning_message: str = DEFAULT_WARNING_MESSAGE
    admin_username: str = ""

    @classmethod
    def field_types(cls) -> dict[str, type]:
        return {f.name: (bool if f.type in ("bool", bool) else str) for f in fields(cls)}

    def durations(self) -> dict[str, str]:
        """Duration settings keyed by their host field name."""
        return {
            "BlockNewUserPMTime": self.block_new_user_pm_time,
            "BlockNewUserLinksTime": self.block_new_user_links_time,
            "BlockNewUserImagesTime": self.block_new_user_images_time,
        }


@dataclass(frozen=True)
class RuleSet:
    """Matchers compiled from a :class:`Configuration`.

    A ``None`` pattern means the corresponding list is empty (no restriction).
    """

    bad_words: re.Pattern[str] | None = None
    bad_domains: re.Pattern[str] | None = None
    bad_usernames: re.Pattern[str] | None = None
    builtin_domains: frozenset[str] = field(default_factory=frozenset)
    use_builtin_domains: bool = False


@dataclass(frozen=True)
class PolicySnapshot:
    """A configuration together with the rules compiled from it."""

    configuration: Configuration = field(default_factory=Configuration)
    rules: RuleSet = field(default_factory=RuleSet)
