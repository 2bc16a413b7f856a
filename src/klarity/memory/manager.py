"""Per-session conversation memory.

Buffers live in process memory and are keyed by session id. They are
created lazily and trimmed to the newest ``max_messages``. At most
``max_sessions`` buffers are kept (least recently used go first) and, when
a TTL is set, a buffer is evicted after sitting idle for ``ttl_seconds``.
Eviction has the same effect as an explicit ``clear``.
"""

import logging
import time
from collections.abc import Callable

from cachetools import Cache, LRUCache, TTLCache
from langchain_core.chat_history import InMemoryChatMessageHistory
from langchain_core.messages import BaseMessage

logger = logging.getLogger(__name__)


class ConversationMemoryManager:
    """Cache of chat histories keyed by session id."""

    def __init__(
        self,
        max_messages: int | None = None,
        ttl_seconds: float | None = None,
        max_sessions: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_messages = max_messages
        self.ttl_seconds = ttl_seconds
        self._histories: Cache
        if ttl_seconds is None:
            self._histories = LRUCache(maxsize=max_sessions)
        else:
            self._histories = TTLCache(maxsize=max_sessions, ttl=ttl_seconds, timer=clock)

    def get_or_create(self, session_id: str | int) -> InMemoryChatMessageHistory:
        """Return the session's history, creating an empty one if needed.

        Raises:
            ValueError: If session_id is empty
        """
        if session_id is None or session_id == "":
            raise ValueError("Session ID is required.")

        key = str(session_id)
        self.evict_expired()

        history = self._histories.get(key)
        if history is None:
            logger.info(f"Creating conversation memory for session {key}")
            history = InMemoryChatMessageHistory()

        # (re)inserting refreshes both the idle timer and the LRU position
        self._histories[key] = history
        return history

    def add_messages(self, session_id: str | int, messages: list[BaseMessage]) -> None:
        """Append messages to a session and apply the size bound."""
        history = self.get_or_create(session_id)
        history.add_messages(messages)
        self._trim(history)

    def clear(self, session_id: str | int) -> bool:
        """Drop a session's history.

        Returns:
            True if a history was removed
        """
        key = str(session_id)
        if self._histories.pop(key, None) is None:
            logger.warning(f"Attempted to clear memory for non-existent session {key}")
            return False
        logger.info(f"Cleared memory for session {key}")
        return True

    def evict_expired(self) -> list[str]:
        """Evict sessions idle for longer than the TTL.

        Returns:
            Evicted session ids
        """
        if not isinstance(self._histories, TTLCache):
            return []

        expired = [key for key, _ in self._histories.expire()]
        if expired:
            logger.info(f"Evicted {len(expired)} idle conversation memories")
        return expired

    def _trim(self, history: InMemoryChatMessageHistory) -> None:
        if self.max_messages is not None and len(history.messages) > self.max_messages:
            history.messages = history.messages[-self.max_messages :]

    def __contains__(self, session_id: object) -> bool:
        return str(session_id) in self._histories

    def __len__(self) -> int:
        return len(self._histories)
