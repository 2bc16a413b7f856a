"""Node handlers for the booking turn graph.

Each handler has the signature ``async (state, context) -> partial update``;
the builder binds ``context`` before registering it with the engine.
"""

from klarity.dm.nodes.agent import agent_node
from klarity.dm.nodes.booking import reset_state_node, store_booking_node
from klarity.dm.nodes.calendar import (
    create_calendar_event_node,
    delete_calendar_event_node,
    find_slots_node,
)
from klarity.dm.nodes.handle_error import handle_error_node
from klarity.dm.nodes.messaging import send_text_message_node, send_waiver_node

__all__ = [
    "agent_node",
    "create_calendar_event_node",
    "delete_calendar_event_node",
    "find_slots_node",
    "handle_error_node",
    "reset_state_node",
    "send_text_message_node",
    "send_waiver_node",
    "store_booking_node",
]
