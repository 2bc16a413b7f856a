"""Workflow state factory and helpers."""

from typing import Any

from klarity.core.errors import StateError
from klarity.core.types import AgentOutcome, BookingState, SessionSnapshot, keep_first_error

_SESSION_FIELDS = frozenset(SessionSnapshot.__annotations__)


def create_initial_state(
    telegram_id: str,
    session_id: str,
    user_input: str | None = None,
    **session_fields: Any,
) -> BookingState:
    """Create a fresh state for one turn.

    Args:
        telegram_id: The user's Telegram ID.
        session_id: Session identifier used for memory and correlation.
        user_input: The message that triggered the turn.
        **session_fields: Persisted fields (see ``SessionSnapshot``).

    Raises:
        StateError: If an identity key is missing or a field is unknown.
    """
    if not telegram_id or not session_id:
        raise StateError("Telegram ID and Session ID are required for initial state.")

    unknown = set(session_fields) - _SESSION_FIELDS
    if unknown:
        raise StateError(f"Unknown session fields: {', '.join(sorted(unknown))}")

    return {
        "user_input": user_input,
        "telegram_id": str(telegram_id),
        "session_id": str(session_id),
        "session_type": session_fields.get("session_type"),
        "available_slots": None,
        "confirmed_slot": session_fields.get("confirmed_slot"),
        "booking_id": session_fields.get("booking_id"),
        "calendar_event_id": session_fields.get("calendar_event_id"),
        "agent_outcome": None,
        "last_tool_response": None,
        "response": None,
        "error": None,
        "user_profile": session_fields.get("user_profile"),
        "past_session_dates": session_fields.get("past_session_dates"),
        "step_count": 0,
    }


def merge_state(state: BookingState, update: dict[str, Any]) -> BookingState:
    """Return a new state with ``update`` applied.

    Mirrors the graph reducers: every field is last-value-wins except
    ``error``, which keeps the first value set in the turn.
    """
    merged: dict[str, Any] = dict(state)
    for key, value in update.items():
        if key == "error":
            merged["error"] = keep_first_error(merged.get("error"), value)
        else:
            merged[key] = value
    return merged  # type: ignore[return-value]


def describe_outcome_problem(outcome: AgentOutcome | None) -> str | None:
    """Check the shape of a decision maker outcome.

    Returns:
        None when the outcome holds a non-empty tool call list or a
        non-empty output, otherwise a description of what is wrong.
    """
    if not outcome:
        return "Agent did not produce a tool call or a direct response."

    tool_calls = outcome.get("tool_calls")
    if tool_calls:
        first = tool_calls[0]
        if not isinstance(first, dict) or not first.get("name"):
            return "Agent requested a tool but the tool name is missing."
        return None

    if outcome.get("output"):
        return None

    return "Agent did not produce a tool call or a direct response."


def first_tool_call(state: BookingState) -> tuple[str | None, dict[str, Any]]:
    """Name and args of the first requested tool call, if any."""
    outcome = state.get("agent_outcome") or {}
    tool_calls = outcome.get("tool_calls") or []
    if not tool_calls:
        return None, {}
    call = tool_calls[0]
    return call.get("name"), dict(call.get("args") or {})
