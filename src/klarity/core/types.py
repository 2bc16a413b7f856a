"""Core type definitions for the booking turn graph."""

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Annotated, Any, NamedTuple, NotRequired, TypedDict

# =============================================================================
# REDUCERS
# =============================================================================


def _last_value(current: Any | None, new: Any | None) -> Any | None:
    """Reducer that keeps the last value (allows None to clear)."""
    return new


def keep_first_error(current: str | None, new: str | None) -> str | None:
    """Reducer for ``error``: the first error of a turn wins and is never cleared."""
    if current:
        return current
    return new or None


# =============================================================================
# DECISION MAKER OUTCOME
# =============================================================================


class ToolCall(TypedDict):
    """A single tool invocation requested by the decision maker."""

    name: str
    args: dict[str, Any]


class AgentOutcome(TypedDict, total=False):
    """Decision maker result: either ``tool_calls`` or ``output``."""

    tool_calls: list[ToolCall]
    output: str


class BookingSlot(TypedDict):
    """A confirmed slot (ISO 8601 strings with offset)."""

    start: str
    end: str


class BookingState(TypedDict):
    """Per-turn workflow state threaded through every node."""

    # Identity, immutable for the turn
    user_input: Annotated[str | None, _last_value]
    telegram_id: Annotated[str, _last_value]
    session_id: Annotated[str, _last_value]

    # Booking progress
    session_type: Annotated[str | None, _last_value]
    available_slots: Annotated[list[datetime | str] | None, _last_value]
    confirmed_slot: Annotated[BookingSlot | None, _last_value]
    booking_id: Annotated[str | None, _last_value]
    calendar_event_id: Annotated[str | None, _last_value]

    # Decision and results
    agent_outcome: Annotated[AgentOutcome | None, _last_value]
    last_tool_response: Annotated[str | None, _last_value]
    response: Annotated[str | None, _last_value]
    error: Annotated[str | None, keep_first_error]

    # Read-only context fetched before the turn
    user_profile: Annotated[dict[str, Any] | None, _last_value]
    past_session_dates: Annotated[list[datetime | str] | None, _last_value]

    # Internal
    step_count: Annotated[int, _last_value]


class SessionSnapshot(TypedDict):
    """Persisted session fields used to seed a new turn."""

    session_id: NotRequired[str]
    session_type: NotRequired[str | None]
    confirmed_slot: NotRequired[BookingSlot | None]
    booking_id: NotRequired[str | None]
    calendar_event_id: NotRequired[str | None]
    user_profile: NotRequired[dict[str, Any] | None]
    past_session_dates: NotRequired[list[datetime | str] | None]


class Route(NamedTuple):
    """Router decision: the next node (or END) and an optional error to record."""

    target: str
    error: str | None = None


# =============================================================================
# NODE AND ROUTER TYPES
# =============================================================================

NodeHandler = Callable[[BookingState], Awaitable[dict[str, Any]]]
"""Async step: receives the current state, returns a partial update."""

Router = Callable[[BookingState], Route]
"""Pure function from post-node state to the next hop."""
