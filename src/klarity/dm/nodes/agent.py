"""Agent node: asks the decision maker for the next step."""

from typing import TYPE_CHECKING, Any

from langchain_core.messages import AIMessage, HumanMessage

from klarity.agents.base import DecisionContext
from klarity.core.constants import AVAILABLE_TOOL_NAMES, CONTEXT_TOOLS, ToolName
from klarity.core.state import first_tool_call
from klarity.core.types import BookingState
from klarity.dm.nodes.utils import node_logger, to_iso, tool_args

if TYPE_CHECKING:
    from klarity.runtime.context import RuntimeContext

_FACT_FIELDS = (
    "session_type",
    "available_slots",
    "confirmed_slot",
    "booking_id",
    "calendar_event_id",
    "user_profile",
    "past_session_dates",
    "last_tool_response",
)


def _facts(state: BookingState) -> dict[str, Any]:
    facts: dict[str, Any] = {}
    for key in _FACT_FIELDS:
        value = state.get(key)
        if value is None:
            continue
        if key in ("available_slots", "past_session_dates"):
            value = [to_iso(v) for v in value]
        facts[key] = value
    return facts


async def _run_context_tool(
    state: BookingState, context: "RuntimeContext", tool_name: str
) -> dict[str, Any]:
    """Execute a profile/past-sessions lookup requested by the previous decision."""
    result = await context.tools.execute(
        tool_name, tool_args(state, tool_name, telegram_id=state["telegram_id"])
    )
    if tool_name == ToolName.GET_USER_PROFILE_DATA.value:
        return {
            "user_profile": result.get("user_profile", result),
            "last_tool_response": "User profile loaded.",
        }
    sessions = result.get("past_session_dates") or []
    return {
        "past_session_dates": sessions,
        "last_tool_response": f"Found {len(sessions)} past sessions.",
    }


async def agent_node(state: BookingState, context: "RuntimeContext") -> dict[str, Any]:
    """Call the decision maker with history, input and the full tool set.

    When re-entered after a context tool request, runs that tool first and
    merges its result so the next decision can use it.
    """
    log = node_logger(__name__, state)
    telegram_id = state.get("telegram_id")
    user_input = state.get("user_input")
    log.debug(f"[agent] Entering for user {telegram_id}")

    if not user_input:
        log.warning(f"[agent] No user_input for user {telegram_id}, skipping agent call")
        return {"agent_outcome": None, "error": "User input missing for agent."}

    updates: dict[str, Any] = {}
    pending_tool, _ = first_tool_call(state)
    if pending_tool in CONTEXT_TOOLS:
        updates.update(await _run_context_tool(state, context, pending_tool))
        state = {**state, **updates}  # type: ignore[typeddict-item]

    session_id = state["session_id"]
    history = list(context.memory.get_or_create(session_id).messages)
    first_entry = not state.get("step_count")

    outcome = await context.decision_maker.decide(
        DecisionContext(
            user_input=user_input,
            history=history,
            tool_names=AVAILABLE_TOOL_NAMES,
            telegram_id=state["telegram_id"],
            session_id=session_id,
            facts=_facts(state),
        )
    )

    recorded = []
    if first_entry:
        recorded.append(HumanMessage(content=user_input))
    if outcome and outcome.get("output") and not outcome.get("tool_calls"):
        recorded.append(AIMessage(content=outcome["output"]))
    if recorded:
        context.memory.add_messages(session_id, recorded)

    log.info(f"[agent] Decision for user {telegram_id}: {outcome}")
    updates["agent_outcome"] = outcome
    return updates
