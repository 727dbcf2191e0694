"""SafetyKit: content moderation engine for chat platforms.

Filters outgoing posts (profanity, new-account throttles for direct
messages, links and images) and reacts to account lifecycle events by
deactivating accounts that match username or email-domain block lists.
"""

__version__ = "0.3.0"
