"""Booking record nodes: storage and reset."""

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from klarity.core.constants import ToolName
from klarity.core.types import BookingState
from klarity.dm.nodes.utils import node_logger, to_iso, tool_args

if TYPE_CHECKING:
    from klarity.runtime.context import RuntimeContext


async def store_booking_node(state: BookingState, context: "RuntimeContext") -> dict[str, Any]:
    """Persist the confirmed booking and record its id.

    The slot comes from the tool call (``bookingSlot``) or the session's
    confirmed slot; its end is derived from the session duration.
    """
    log = node_logger(__name__, state)
    telegram_id = state["telegram_id"]
    slot = state.get("confirmed_slot") or {}

    args = tool_args(
        state,
        ToolName.STORE_BOOKING_DATA,
        telegram_id=telegram_id,
        session_type=state.get("session_type"),
        booking_slot=slot.get("start"),
    )
    if not args.get("booking_slot"):
        log.error(f"[store_booking] Missing confirmed slot for user {telegram_id}")
        return {
            "error": "Cannot store booking without a confirmed slot.",
            "last_tool_response": "Error storing booking data.",
        }

    # validated before the booking is persisted; the stored slot derives from it
    booking = context.tools.parse_args(ToolName.STORE_BOOKING_DATA.value, args)
    result = await context.tools.execute(ToolName.STORE_BOOKING_DATA.value, args)

    start = booking.booking_slot
    duration = context.config.duration_for(booking.session_type)
    confirmed = {
        "start": to_iso(start),
        "end": to_iso(start + timedelta(minutes=duration)),
    }
    log.info(f"[store_booking] Booking stored for user {telegram_id}")
    return {
        "booking_id": result.get("booking_id"),
        "confirmed_slot": confirmed,
        "session_type": booking.session_type,
        "last_tool_response": "Booking data stored.",
    }


async def reset_state_node(state: BookingState, context: "RuntimeContext") -> dict[str, Any]:
    """Reset the user's booking-related fields in the session store."""
    log = node_logger(__name__, state)
    telegram_id = state["telegram_id"]

    await context.tools.execute(
        ToolName.RESET_USER_STATE.value, {"telegram_id": telegram_id}
    )
    log.info(f"[reset_state] User state reset for user {telegram_id}")
    return {
        "session_type": None,
        "confirmed_slot": None,
        "booking_id": None,
        "available_slots": None,
        "last_tool_response": "User state reset.",
    }
