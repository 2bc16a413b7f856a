"""Conversation memory."""

from klarity.memory.manager import ConversationMemoryManager

__all__ = ["ConversationMemoryManager"]
