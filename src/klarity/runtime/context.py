from dataclasses import dataclass, field

from klarity.agents.base import DecisionMaker
from klarity.config.models import AssistantConfig
from klarity.memory.manager import ConversationMemoryManager
from klarity.tools.registry import ToolRegistry


@dataclass(frozen=True)
class RuntimeContext:
    """Dependencies bound into node handlers when the graph is built."""

    decision_maker: DecisionMaker
    tools: ToolRegistry
    memory: ConversationMemoryManager
    config: AssistantConfig = field(default_factory=AssistantConfig)

    @classmethod
    def create(
        cls,
        decision_maker: DecisionMaker,
        tools: ToolRegistry | None = None,
        config: AssistantConfig | None = None,
    ) -> "RuntimeContext":
        """Build a context with a memory manager sized from the config."""
        config = config or AssistantConfig()
        return cls(
            decision_maker=decision_maker,
            tools=tools or ToolRegistry.get_default(),
            memory=ConversationMemoryManager(
                max_messages=config.memory.max_messages,
                ttl_seconds=config.memory.ttl_seconds,
                max_sessions=config.memory.max_sessions,
            ),
            config=config,
        )
