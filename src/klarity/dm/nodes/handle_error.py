"""Error terminal: the single place that produces the user-facing failure message."""

from typing import TYPE_CHECKING, Any

from klarity.core.constants import GENERIC_ERROR_MESSAGE, ToolName
from klarity.core.errors import ToolError
from klarity.core.types import BookingState
from klarity.dm.nodes.utils import node_logger

if TYPE_CHECKING:
    from klarity.runtime.context import RuntimeContext


async def handle_error_node(state: BookingState, context: "RuntimeContext") -> dict[str, Any]:
    """Log the cause and notify the user with a generic message.

    The underlying error is never shown to the user. Notification failures
    are logged and do not change the outcome of the turn.
    """
    log = node_logger(__name__, state)
    telegram_id = state.get("telegram_id")
    error = str(state.get("error") or "Unknown error")
    log.error(f"[handle_error] Turn failed for user {telegram_id}: {error}")

    if telegram_id and ToolName.SEND_TEXT_MESSAGE.value in context.tools:
        try:
            await context.tools.execute(
                ToolName.SEND_TEXT_MESSAGE.value,
                {"telegram_id": telegram_id, "text": GENERIC_ERROR_MESSAGE},
            )
            log.info(f"[handle_error] Notified user {telegram_id} about the error")
        except ToolError as e:
            log.error(f"[handle_error] Failed to notify user {telegram_id}: {e}")

    return {"response": GENERIC_ERROR_MESSAGE}
