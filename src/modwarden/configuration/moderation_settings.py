from typing import Any, Dict

from modwarden.configuration.trust_settings import coerce_number


class ModerationSettings:
    """Typed accessors for the ``moderation`` config section.

    Holds the base limits that the trust policy adjusts per user. Values
    that are missing or not numeric fall back to the defaults below.
    """

    DEFAULT_MAX_WARNINGS = 3
    DEFAULT_MUTE_DURATION_MS = 10 * 60 * 1000
    DEFAULT_MAX_MESSAGES = 5
    DEFAULT_SPAM_INTERVAL_MS = 7_000
    DEFAULT_SPAM_MUTE_DURATION_MS = 60_000
    DEFAULT_SPAM_COOLDOWN_MS = 60_000

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    @property
    def max_warnings(self) -> int:
        return int(coerce_number(self.data.get("max_warnings"), self.DEFAULT_MAX_WARNINGS))

    @property
    def mute_duration_ms(self) -> int:
        return int(coerce_number(self.data.get("mute_duration_ms"), self.DEFAULT_MUTE_DURATION_MS))

    @property
    def max_messages(self) -> int:
        return int(coerce_number(self.data.get("max_messages"), self.DEFAULT_MAX_MESSAGES))

    @property
    def spam_interval_ms(self) -> int:
        """Window the spam filter counts a member's messages over."""
        return int(coerce_number(self.data.get("spam_interval_ms"), self.DEFAULT_SPAM_INTERVAL_MS))

    @property
    def spam_mute_duration_ms(self) -> int:
        return int(coerce_number(self.data.get("spam_mute_duration_ms"), self.DEFAULT_SPAM_MUTE_DURATION_MS))

    @property
    def spam_cooldown_ms(self) -> int:
        """Quiet period after a spam mute during which the same member is not muted again."""
        return int(coerce_number(self.data.get("spam_cooldown_ms"), self.DEFAULT_SPAM_COOLDOWN_MS))
