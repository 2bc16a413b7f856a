"""Decision maker interface and adapters."""

from klarity.agents.base import DecisionContext, DecisionMaker
from klarity.agents.chat_model import ChatModelDecisionMaker

__all__ = ["ChatModelDecisionMaker", "DecisionContext", "DecisionMaker"]
