from collections.abc import Iterable
from typing import Any

from klarity.agents.base import DecisionContext
from klarity.core.types import AgentOutcome
from klarity.tools.registry import ToolRegistry


class ScriptedDecisionMaker:
    """Deterministic decision maker returning queued outcomes in order.

    Raises the outcome instead when it is an exception instance. Every
    received context is kept in ``contexts`` for assertions.
    """

    def __init__(self, outcomes: Iterable[AgentOutcome | Exception]):
        self._outcomes = list(outcomes)
        self.contexts: list[DecisionContext] = []

    async def decide(self, context: DecisionContext) -> AgentOutcome:
        self.contexts.append(context)
        if not self._outcomes:
            raise AssertionError("ScriptedDecisionMaker ran out of outcomes")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def call_count(self) -> int:
        return len(self.contexts)


class RecordingTools:
    """Builds a ToolRegistry whose handlers record calls and return canned results."""

    DEFAULT_RESULTS: dict[str, dict[str, Any]] = {
        "findFreeSlots": {
            "available_slots": ["2026-11-02T10:00:00+00:00", "2026-11-03T14:00:00+00:00"]
        },
        "storeBookingData": {"booking_id": "b1"},
        "createCalendarEvent": {"calendar_event_id": "evt-1"},
        "sendWaiverLink": {},
        "resetUserState": {},
        "deleteCalendarEvent": {},
        "sendTextMessage": {},
        "getUserProfileData": {"user_profile": {"name": "Ana", "email": "ana@example.com"}},
        "getUserPastSessions": {"past_session_dates": ["2026-09-01T10:00:00+00:00"]},
    }

    def __init__(self, **overrides: dict[str, Any] | Exception):
        self.results: dict[str, Any] = {**self.DEFAULT_RESULTS, **overrides}
        self.calls: list[tuple[str, Any]] = []
        self.registry = ToolRegistry()
        for name in self.results:
            self.registry.register_handler(name, self._handler(name))

    def _handler(self, name: str):
        async def handler(args):
            self.calls.append((name, args))
            result = self.results[name]
            if isinstance(result, Exception):
                raise result
            return dict(result)

        return handler

    def called(self, name: str) -> list[Any]:
        return [args for tool, args in self.calls if tool == name]

    @property
    def call_names(self) -> list[str]:
        return [tool for tool, _ in self.calls]


class InMemorySessionStore:
    """SessionStore backed by a dict."""

    def __init__(self, records: dict[str, dict[str, Any]] | None = None):
        self.records = records or {}

    async def load(self, telegram_id: str):
        return self.records.get(telegram_id)


def tool_call(name: str, **args: Any) -> AgentOutcome:
    return {"tool_calls": [{"name": name, "args": args}]}


def reply(text: str) -> AgentOutcome:
    return {"output": text}
