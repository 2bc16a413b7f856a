"""Messaging nodes: waiver link and plain text."""

from typing import TYPE_CHECKING, Any

from klarity.core.constants import ToolName
from klarity.core.types import BookingState
from klarity.dm.nodes.utils import node_logger, tool_args

if TYPE_CHECKING:
    from klarity.runtime.context import RuntimeContext


async def send_waiver_node(state: BookingState, context: "RuntimeContext") -> dict[str, Any]:
    """Send the waiver link; the rest of the waiver flow runs outside the turn."""
    log = node_logger(__name__, state)
    args = tool_args(
        state,
        ToolName.SEND_WAIVER_LINK,
        telegram_id=state["telegram_id"],
        session_type=state.get("session_type"),
    )

    await context.tools.execute(ToolName.SEND_WAIVER_LINK.value, args)
    log.info(f"[send_waiver] Waiver link sent to user {state['telegram_id']}")
    return {"last_tool_response": "Waiver sent."}


async def send_text_message_node(
    state: BookingState, context: "RuntimeContext"
) -> dict[str, Any]:
    log = node_logger(__name__, state)
    args = tool_args(state, ToolName.SEND_TEXT_MESSAGE, telegram_id=state["telegram_id"])

    await context.tools.execute(ToolName.SEND_TEXT_MESSAGE.value, args)
    log.info(f"[send_text_message] Message sent to user {state['telegram_id']}")
    return {"last_tool_response": "Message sent."}
