"""Wires the booking nodes and routers into an orchestration graph.

Graph structure:
    agent ──(tool call)──> tool node ──> ... ──> END
      ↑______find_slots / context tools______|
    any router ──(error)──> handle_error ──> END
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from klarity.core.constants import NodeName
from klarity.core.types import BookingState, NodeHandler
from klarity.dm.engine import OrchestrationGraph
from klarity.dm.nodes import (
    agent_node,
    create_calendar_event_node,
    delete_calendar_event_node,
    find_slots_node,
    handle_error_node,
    reset_state_node,
    send_text_message_node,
    send_waiver_node,
    store_booking_node,
)
from klarity.dm.routing import ROUTE_TARGETS, ROUTERS

if TYPE_CHECKING:
    from klarity.runtime.context import RuntimeContext

logger = logging.getLogger(__name__)

ContextNode = Callable[[BookingState, "RuntimeContext"], Awaitable[dict[str, Any]]]

NODE_HANDLERS: dict[NodeName, ContextNode] = {
    NodeName.AGENT: agent_node,
    NodeName.FIND_SLOTS: find_slots_node,
    NodeName.STORE_BOOKING: store_booking_node,
    NodeName.CREATE_CALENDAR_EVENT: create_calendar_event_node,
    NodeName.SEND_WAIVER: send_waiver_node,
    NodeName.RESET_STATE: reset_state_node,
    NodeName.DELETE_CALENDAR_EVENT: delete_calendar_event_node,
    NodeName.SEND_TEXT_MESSAGE: send_text_message_node,
}


def bind(node_fn: ContextNode, context: "RuntimeContext") -> NodeHandler:
    """Inject the runtime context into a node handler."""

    async def bound(state: BookingState) -> dict[str, Any]:
        result = await node_fn(state, context)
        return dict(result) if result else {}

    bound.__name__ = node_fn.__name__
    return bound


def build_booking_graph(context: "RuntimeContext") -> OrchestrationGraph:
    """Build the booking turn graph with the agent as entry node."""
    graph_config = context.config.graph
    graph = OrchestrationGraph(
        node_timeout=graph_config.node_timeout_seconds,
        max_steps=graph_config.max_steps,
    )

    for name, node_fn in NODE_HANDLERS.items():
        graph.register_node(name.value, bind(node_fn, context))
    graph.set_error_node(NodeName.HANDLE_ERROR.value, bind(handle_error_node, context))

    graph.set_entry_node(NodeName.AGENT.value)

    for name, router in ROUTERS.items():
        graph.register_router(name.value, router, destinations=ROUTE_TARGETS[name])

    graph.compile()
    logger.info("Booking graph built")
    return graph
