"""Cache TTL table and namespaced key generators."""

from enum import IntEnum


class CacheTTL(IntEnum):
    """Time-to-live per data category, in seconds."""

    USER_CONTEXT = 5 * 60  # user data changes rarely
    DREAMS = 2 * 60
    PATTERNS = 10 * 60  # consolidated infrequently
    SESSIONS = 1 * 60  # updated with every message
    REFLECTIONS = 5 * 60


CACHE_TTL = CacheTTL


class CacheKeys:
    """Builds ``<prefix>:<category>:<entity_id>`` cache keys.

    Example:
        >>> keys = CacheKeys(prefix="ctx")
        >>> keys.user_context("42")
        'ctx:user:42'
    """

    def __init__(self, prefix: str = "ctx"):
        self.prefix = prefix

    def _key(self, category: str, entity_id: str) -> str:
        return f"{self.prefix}:{category}:{entity_id}"

    def user_context(self, user_id: str) -> str:
        return self._key("user", user_id)

    def dreams(self, user_id: str) -> str:
        return self._key("dreams", user_id)

    def patterns(self, user_id: str) -> str:
        return self._key("patterns", user_id)

    def sessions(self, user_id: str) -> str:
        return self._key("sessions", user_id)

    def reflections(self, user_id: str) -> str:
        return self._key("reflections", user_id)

    def all_for_user(self, user_id: str) -> list[str]:
        """Every context key cached for a user."""
        return [
            self.user_context(user_id),
            self.dreams(user_id),
            self.patterns(user_id),
            self.sessions(user_id),
            self.reflections(user_id),
        ]


cache_keys = CacheKeys()
