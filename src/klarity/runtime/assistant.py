"""Per-message entry point for the booking assistant."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from klarity.agents.base import DecisionMaker
from klarity.config.loader import load_config
from klarity.core.interfaces import SessionStore
from klarity.core.state import create_initial_state
from klarity.core.types import BookingState
from klarity.dm.builder import build_booking_graph
from klarity.dm.engine import OrchestrationGraph
from klarity.observability.logging import setup_logging
from klarity.runtime.context import RuntimeContext
from klarity.tools.registry import ToolRegistry
from klarity.utils.locks import KeyedLock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResult:
    """What one turn produced.

    ``output`` is the agent's reply when the turn ended on a direct
    response; ``response`` is the generic failure message when it ended on
    an error. Both are None for silent terminals (waiver sent, state reset).
    """

    output: str | None
    error: str | None
    response: str | None
    state: BookingState

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_state(cls, state: BookingState) -> "TurnResult":
        error = state.get("error")
        outcome = state.get("agent_outcome") or {}
        output = None
        if not error and not outcome.get("tool_calls"):
            output = outcome.get("output")
        return cls(output=output, error=error, response=state.get("response"), state=state)


class BookingAssistant:
    """Runs one graph turn per incoming message.

    Turns for the same Telegram ID are serialized; different users run
    concurrently.

    Usage:
        assistant = BookingAssistant(RuntimeContext.create(decision_maker=agent, tools=tools))
        result = await assistant.process_message("12345", "I'd like to book a session")
    """

    def __init__(
        self,
        context: RuntimeContext,
        session_store: SessionStore | None = None,
        graph: OrchestrationGraph | None = None,
    ) -> None:
        self.context = context
        self.session_store = session_store
        self.graph = graph or build_booking_graph(context)
        self._user_locks = KeyedLock()

    @classmethod
    def from_config(
        cls,
        decision_maker: DecisionMaker,
        tools: ToolRegistry | None = None,
        config_path: str | Path | None = None,
        session_store: SessionStore | None = None,
    ) -> "BookingAssistant":
        """Load configuration (file, ``.env``, environment), set up logging and build."""
        config = load_config(config_path)
        setup_logging(config.logging.level, json_file=config.logging.json_file)
        context = RuntimeContext.create(decision_maker=decision_maker, tools=tools, config=config)
        return cls(context, session_store=session_store)

    async def _initial_state(
        self, telegram_id: str, text: str, session_id: str | None
    ) -> BookingState:
        fields: dict[str, Any] = {}
        if self.session_store is not None:
            snapshot = await self.session_store.load(telegram_id)
            fields = dict(snapshot or {})

        stored_session = fields.pop("session_id", None)
        return create_initial_state(
            telegram_id=telegram_id,
            session_id=session_id or stored_session or telegram_id,
            user_input=text,
            **fields,
        )

    async def process_message(
        self,
        telegram_id: str | int,
        text: str,
        session_id: str | None = None,
    ) -> TurnResult:
        """Run one turn for an incoming user message.

        Raises:
            StateError: If the initial state cannot be built
        """
        telegram_id = str(telegram_id)
        async with self._user_locks.hold(telegram_id):
            state = await self._initial_state(telegram_id, text, session_id)
            logger.info(
                f"Turn started for user {telegram_id} (session {state['session_id']})"
            )
            final_state = await self.graph.run(state)

        result = TurnResult.from_state(final_state)
        if result.ok:
            logger.info(f"Turn finished for user {telegram_id}")
        else:
            logger.warning(f"Turn for user {telegram_id} ended with error: {result.error}")
        return result

    async def end_session(self, session_id: str) -> None:
        """Session teardown: drop the conversation memory."""
        self.context.memory.clear(session_id)
