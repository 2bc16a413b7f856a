"""Routing functions for the booking turn graph.

Every router follows the same order:

1. ``state["error"]`` set → error node, unconditionally.
2. Node-specific success logic.
3. An invalid post-condition → error node with a descriptive message
   (returned in the ``Route``, never raised).
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType

from klarity.core.constants import AVAILABLE_TOOL_NAMES, NodeName, ToolName
from klarity.core.state import describe_outcome_problem, first_tool_call
from klarity.core.types import BookingState, Route
from klarity.dm.engine import TERMINAL

logger = logging.getLogger(__name__)

ERROR_NODE = NodeName.HANDLE_ERROR.value

# Adding a tool = one entry here plus its node and router.
TOOL_NODE_MAP: Mapping[ToolName, NodeName] = MappingProxyType(
    {
        ToolName.FIND_FREE_SLOTS: NodeName.FIND_SLOTS,
        ToolName.STORE_BOOKING_DATA: NodeName.STORE_BOOKING,
        ToolName.CREATE_CALENDAR_EVENT: NodeName.CREATE_CALENDAR_EVENT,
        ToolName.SEND_WAIVER_LINK: NodeName.SEND_WAIVER,
        ToolName.RESET_USER_STATE: NodeName.RESET_STATE,
        ToolName.DELETE_CALENDAR_EVENT: NodeName.DELETE_CALENDAR_EVENT,
        ToolName.GET_USER_PROFILE_DATA: NodeName.AGENT,
        ToolName.GET_USER_PAST_SESSIONS: NodeName.AGENT,
        ToolName.SEND_TEXT_MESSAGE: NodeName.SEND_TEXT_MESSAGE,
    }
)


def _to_error(message: str) -> Route:
    return Route(ERROR_NODE, message)


def route_agent_decision(state: BookingState) -> Route:
    """Route on the agent's decision: a tool node, END, or the error node."""
    logger.debug(f"Routing agent decision: {state.get('agent_outcome')}")
    if state.get("error"):
        logger.warning("Error detected in state before agent decision routing.")
        return Route(ERROR_NODE)

    problem = describe_outcome_problem(state.get("agent_outcome"))
    if problem:
        logger.error(f"Agent outcome unusable: {problem}")
        return _to_error(problem)

    tool_name, _ = first_tool_call(state)
    if tool_name is None:
        logger.info("Agent provided direct response, ending turn.")
        return Route(TERMINAL)

    try:
        node = TOOL_NODE_MAP[ToolName(tool_name)]
    except ValueError:
        logger.error(f"Agent requested unknown or unmapped tool: {tool_name}")
        return _to_error(f"Agent requested an unknown tool: {tool_name}")

    logger.info(f"Agent requests tool: {tool_name}")
    return Route(node.value)


def route_after_slot_finding(state: BookingState) -> Route:
    """Always return to the agent to present the results, found or not."""
    if state.get("error"):
        logger.warning("Error detected after slot finding.")
        return Route(ERROR_NODE)
    return Route(NodeName.AGENT.value)


def route_after_booking_storage(state: BookingState) -> Route:
    """Proceed to calendar event creation once a booking id exists."""
    if state.get("error"):
        logger.warning("Error detected after booking storage.")
        return Route(ERROR_NODE)
    if not state.get("booking_id"):
        logger.error("Booking storage node finished, but no booking_id found in state.")
        return _to_error("Internal error: Booking ID missing after storage step.")
    return Route(NodeName.CREATE_CALENDAR_EVENT.value)


def route_after_calendar_creation(state: BookingState) -> Route:
    """Proceed to the waiver once a calendar event id exists."""
    if state.get("error"):
        logger.warning("Error detected after calendar event creation.")
        return Route(ERROR_NODE)
    if not state.get("calendar_event_id"):
        logger.error("Calendar event creation finished, but no calendar_event_id in state.")
        return _to_error("Internal error: Calendar Event ID missing after creation step.")
    return Route(NodeName.SEND_WAIVER.value)


def route_after_waiver_sent(state: BookingState) -> Route:
    """End the turn; waiver completion happens outside it."""
    if state.get("error"):
        logger.warning("Error detected after sending waiver.")
        return Route(ERROR_NODE)
    logger.info("Waiver sent successfully, ending graph turn.")
    return Route(TERMINAL)


def route_after_reset(state: BookingState) -> Route:
    if state.get("error"):
        logger.warning("Error detected after state reset.")
        return Route(ERROR_NODE)
    logger.info("State reset successfully, ending graph turn.")
    return Route(TERMINAL)


def route_after_calendar_deletion(state: BookingState) -> Route:
    """A deleted event is always followed by resetting the user's booking fields."""
    if state.get("error"):
        logger.warning("Error detected after calendar event deletion.")
        return Route(ERROR_NODE)
    return Route(NodeName.RESET_STATE.value)


def route_after_text_message(state: BookingState) -> Route:
    if state.get("error"):
        logger.warning("Error detected after sending text message.")
        return Route(ERROR_NODE)
    return Route(TERMINAL)


ROUTERS = {
    NodeName.AGENT: route_agent_decision,
    NodeName.FIND_SLOTS: route_after_slot_finding,
    NodeName.STORE_BOOKING: route_after_booking_storage,
    NodeName.CREATE_CALENDAR_EVENT: route_after_calendar_creation,
    NodeName.SEND_WAIVER: route_after_waiver_sent,
    NodeName.RESET_STATE: route_after_reset,
    NodeName.DELETE_CALENDAR_EVENT: route_after_calendar_deletion,
    NodeName.SEND_TEXT_MESSAGE: route_after_text_message,
}

# Targets per router, for drawing the graph.
ROUTE_TARGETS: dict[NodeName, tuple[str, ...]] = {
    NodeName.AGENT: (*sorted({n.value for n in TOOL_NODE_MAP.values()}), ERROR_NODE, TERMINAL),
    NodeName.FIND_SLOTS: (NodeName.AGENT.value, ERROR_NODE),
    NodeName.STORE_BOOKING: (NodeName.CREATE_CALENDAR_EVENT.value, ERROR_NODE),
    NodeName.CREATE_CALENDAR_EVENT: (NodeName.SEND_WAIVER.value, ERROR_NODE),
    NodeName.SEND_WAIVER: (TERMINAL, ERROR_NODE),
    NodeName.RESET_STATE: (TERMINAL, ERROR_NODE),
    NodeName.DELETE_CALENDAR_EVENT: (NodeName.RESET_STATE.value, ERROR_NODE),
    NodeName.SEND_TEXT_MESSAGE: (TERMINAL, ERROR_NODE),
}
