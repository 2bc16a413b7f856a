"""Klarity - conversation orchestration for a multi-turn booking assistant.

One user message runs one turn: a LangGraph state machine that starts at
the decision-making agent, dispatches the requested tool and routes on the
outcome until the turn ends.

Quick start:
    from klarity import BookingAssistant, RuntimeContext, ToolRegistry

    tools = ToolRegistry()
    assistant = BookingAssistant(RuntimeContext.create(decision_maker=agent, tools=tools))
    result = await assistant.process_message("12345", "Book me in next week")
"""

from klarity.__version__ import __version__
from klarity.agents import ChatModelDecisionMaker, DecisionContext, DecisionMaker
from klarity.config import AssistantConfig, load_config
from klarity.core.constants import NodeName, ToolName
from klarity.core.errors import (
    ConfigError,
    DecisionError,
    GraphBuildError,
    KlarityError,
    StateError,
    ToolArgumentError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
)
from klarity.core.state import create_initial_state
from klarity.core.types import AgentOutcome, BookingState, Route
from klarity.dm.builder import build_booking_graph
from klarity.dm.engine import TERMINAL, OrchestrationGraph
from klarity.memory import ConversationMemoryManager
from klarity.runtime import BookingAssistant, RuntimeContext, TurnResult
from klarity.tools import ToolRegistry

__all__ = [
    "__version__",
    # Runtime
    "BookingAssistant",
    "RuntimeContext",
    "TurnResult",
    # Engine
    "OrchestrationGraph",
    "Route",
    "TERMINAL",
    "build_booking_graph",
    # State
    "AgentOutcome",
    "BookingState",
    "NodeName",
    "ToolName",
    "create_initial_state",
    # Collaborators
    "ChatModelDecisionMaker",
    "ConversationMemoryManager",
    "DecisionContext",
    "DecisionMaker",
    "ToolRegistry",
    # Config
    "AssistantConfig",
    "load_config",
    # Errors
    "KlarityError",
    "ConfigError",
    "DecisionError",
    "GraphBuildError",
    "StateError",
    "ToolError",
    "ToolArgumentError",
    "ToolExecutionError",
    "ToolNotFoundError",
]
