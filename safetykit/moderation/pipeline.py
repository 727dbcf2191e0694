"""The content filter pipeline applied to every outgoing or edited post.

Stages run top to bottom and the first one that produces a final decision
wins:

1. bot exemption
2. blocked author (deactivated, or matching the account rules)
3. direct-message age gate
4. image age gate (before links: an image URL is also a link)
5. link age gate
6. profanity filter (reject or censor)

Every failure inside the pipeline rejects the post (fail closed) and shows
the author a generic notice; details go to the log only.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import replace
from typing import Callable

from safetykit.config.models import Configuration, PolicySnapshot
from safetykit.config.store import ConfigStore
from safetykit.errors import DurationParseError, HostError, UserLookupError
from safetykit.host import ChannelClassifier, FileInfoSource, Notifier
from safetykit.moderation.gate import GATE_NOTICES, ContentType, check_account_age
from safetykit.moderation.models import FilterResult, Post
from safetykit.moderation.text import (
    contains_images,
    contains_links,
    is_image_file,
    strip_accents_with_offsets,
)
from safetykit.rules.validators import should_block
from safetykit.users.directory import UserDirectory
from safetykit.users.models import UserSnapshot, now_millis

logger = logging.getLogger(__name__)

GENERIC_ERROR_NOTICE = "Something went wrong when sending your message. Contact an administrator."
FLAGGED_NOTICE = "Your account has been flagged for moderation. Contact an administrator."
FLAGGED_REASON = "User account has been flagged for moderation."
USER_LOOKUP_REASON = "Failed to get user"
CHANNEL_LOOKUP_REASON = "Failed to classify post destination"


def render_warning(template: str, words: list[str]) -> str:
    """Substitute the matched words into the first ``%s`` of *template*."""
    return template.replace("%s", ", ".join(words), 1)


def find_bad_words(pattern: re.Pattern[str] | None, message: str) -> list[re.Match[str]]:
    """Match *pattern* against the accent-stripped *message*."""
    if pattern is None:
        return []
    stripped, _ = strip_accents_with_offsets(message)
    return [m for m in pattern.finditer(stripped) if m.group(0)]


def censor_message(message: str, pattern: re.Pattern[str] | None, censor: str) -> str:
    """Replace every match with a run of *censor* as long as the match.

    Matching happens on the accent-stripped text, so "bâd" is censored when
    "bad" is listed; the replaced characters are those of *message*.
    """
    if pattern is None:
        return message
    stripped, offsets = strip_accents_with_offsets(message)
    pieces: list[str] = []
    cursor = 0
    for match in pattern.finditer(stripped):
        word = match.group(0)
        if not word:
            continue
        start = offsets[match.start()]
        end = offsets[match.end() - 1] + 1
        # swallow combining marks that belonged to the last matched letter
        while end < len(message) and unicodedata.category(message[end]) == "Mn":
            end += 1
        pieces.append(message[cursor:start])
        pieces.append(censor * len(word))
        cursor = end
    pieces.append(message[cursor:])
    return "".join(pieces)


class ContentFilterPipeline:
    """Runs the moderation stages over a post."""

    def __init__(
        self,
        config: ConfigStore,
        users: UserDirectory,
        notifier: Notifier,
        channels: ChannelClassifier,
        files: FileInfoSource | None = None,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self.config = config
        self.users = users
        self.notifier = notifier
        self.channels = channels
        self.files = files
        self.clock = clock

    def filter_post(self, post: Post) -> FilterResult:
        snapshot = self.config.get()
        config = snapshot.configuration

        if config.exclude_bots and post.from_bot:
            return FilterResult.allow(post)

        try:
            author = self.users.get_user(post.user_id)
        except UserLookupError as e:
            logger.error("Rejecting post in channel %s: %s", post.channel_id, e)
            self._notify(post, GENERIC_ERROR_NOTICE)
            return FilterResult.reject(USER_LOOKUP_REASON)

        if should_block(author, snapshot.rules):
            logger.info("Rejecting post from flagged account %s", author.describe())
            self._notify(post, FLAGGED_NOTICE)
            return FilterResult.reject(FLAGGED_REASON)

        rejection = self._apply_gates(post, author, config)
        if rejection is not None:
            return rejection

        return self._filter_profanity(snapshot, post)

    # -- gates ---------------------------------------------------------------

    def _apply_gates(
        self, post: Post, author: UserSnapshot, config: Configuration
    ) -> FilterResult | None:
        if config.block_new_user_pm:
            try:
                is_dm = self.channels.is_direct_message(post.channel_id)
            except HostError as e:
                logger.error("Failed to classify channel %s: %s", post.channel_id, e)
                self._notify(post, GENERIC_ERROR_NOTICE)
                return FilterResult.reject(CHANNEL_LOOKUP_REASON)
            if is_dm:
                rejection = self._apply_gate(
                    post, author, config.block_new_user_pm_time, ContentType.DIRECT_MESSAGES
                )
                if rejection is not None:
                    return rejection

        # An image URL is also a link; a post classified as images skips the link gate.
        if config.block_new_user_images and self._contains_images(post):
            return self._apply_gate(
                post, author, config.block_new_user_images_time, ContentType.IMAGES
            )
        if config.block_new_user_links and contains_links(post):
            return self._apply_gate(
                post, author, config.block_new_user_links_time, ContentType.LINKS
            )
        return None

    def _apply_gate(
        self, post: Post, author: UserSnapshot, duration: str, content_type: str
    ) -> FilterResult | None:
        try:
            decision = check_account_age(author, duration, content_type, self.clock())
        except DurationParseError as e:
            logger.error("Failed to parse duration for %s throttle: %s", content_type, e)
            self._notify(post, GENERIC_ERROR_NOTICE)
            return FilterResult.reject(f"failed to parse duration {duration!r}")

        if decision.allowed:
            return None

        logger.info("%s (%s)", decision.reason, author.describe())
        self._notify(post, GATE_NOTICES[content_type])
        return FilterResult.reject(decision.reason)

    def _contains_images(self, post: Post) -> bool:
        if contains_images(post):
            return True
        if self.files is None:
            return False
        for file_id in post.file_ids:
            try:
                info = self.files.get_file_info(file_id)
            except HostError as e:
                logger.warning("Failed to get file info for %s: %s", file_id, e)
                continue
            if is_image_file(info.name, info.extension):
                return True
        return False

    # -- profanity -----------------------------------------------------------

    def _filter_profanity(self, snapshot: PolicySnapshot, post: Post) -> FilterResult:
        config = snapshot.configuration
        pattern = snapshot.rules.bad_words
        matches = find_bad_words(pattern, post.message)
        if not matches:
            return FilterResult.allow(post)

        words = [m.group(0) for m in matches]
        if config.reject_posts:
            self._notify(post, render_warning(config.warning_message, words))
            return FilterResult.reject(f"Profane word not allowed: {', '.join(words)}")

        censored = censor_message(post.message, pattern, config.censor_character)
        return FilterResult.allow(replace(post, message=censored))

    def _notify(self, post: Post, message: str) -> None:
        try:
            self.notifier.send_ephemeral(post.user_id, post.channel_id, message, post.root_id)
        except HostError as e:
            logger.warning("Failed to send ephemeral notice to %s: %s", post.user_id, e)
