"""Runtime: per-message turn execution."""

from klarity.runtime.assistant import BookingAssistant, TurnResult
from klarity.runtime.context import RuntimeContext

__all__ = ["BookingAssistant", "RuntimeContext", "TurnResult"]
