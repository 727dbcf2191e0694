"""The new-account gate shared by the DM, link and image throttles."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from safetykit.moderation.durations import FOREVER, parse_duration
from safetykit.rules.validators import is_exempt
from safetykit.users.models import UserSnapshot


class ContentType:
    DIRECT_MESSAGES = "direct messages"
    IMAGES = "images"
    LINKS = "links"


# Ephemeral notices shown to the author when the gate rejects a post.
GATE_NOTICES = {
    ContentType.DIRECT_MESSAGES: "Configuration settings limit new users from sending private messages.",
    ContentType.IMAGES: "Configuration settings limit new users from posting images.",
    ContentType.LINKS: "Configuration settings limit new users from posting links.",
}


@dataclass
class GateDecision:
    """Outcome of the gate. ``reason`` is empty when the post may pass."""

    allowed: bool
    reason: str = ""

    @property
    def too_new(self) -> bool:
        return not self.allowed


def check_account_age(
    user: UserSnapshot, duration: str, content_type: str, now_ms: int
) -> GateDecision:
    """Decide whether *user* is old enough to post *content_type*.

    An account exactly as old as *duration* is allowed; the comparison is
    strictly "younger than". Administrators are always allowed.

    Raises:
        DurationParseError: *duration* is neither the forever flag nor a
            valid duration (the empty string included).
    """
    if is_exempt(user):
        return GateDecision(allowed=True)

    if duration == FOREVER:
        return GateDecision(
            allowed=False,
            reason=f"New user not allowed to post {content_type} indefinitely.",
        )

    limit = parse_duration(duration)
    age = timedelta(milliseconds=now_ms - user.create_at)
    if age < limit:
        return GateDecision(
            allowed=False,
            reason=f"New user not allowed to post {content_type} for {duration}.",
        )
    return GateDecision(allowed=True)
