"""Decision maker interface."""

from dataclasses import dataclass, field
from typing import Any, Protocol

from langchain_core.messages import BaseMessage

from klarity.core.types import AgentOutcome


@dataclass(frozen=True)
class DecisionContext:
    """Everything the decision maker sees for one decision."""

    user_input: str
    history: list[BaseMessage]
    tool_names: tuple[str, ...]
    telegram_id: str
    session_id: str
    # Read-only snapshot of booking facts gathered so far in the turn
    facts: dict[str, Any] = field(default_factory=dict)


class DecisionMaker(Protocol):
    """Returns either one tool request or a final response."""

    async def decide(self, context: DecisionContext) -> AgentOutcome:
        """Decide the next step.

        Returns:
            ``{"tool_calls": [{"name": ..., "args": {...}}]}`` or
            ``{"output": "..."}``
        """
        ...
