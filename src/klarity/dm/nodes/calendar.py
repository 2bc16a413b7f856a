"""Calendar nodes: slot search, event creation and deletion."""

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from klarity.core.constants import ToolName
from klarity.core.types import BookingState
from klarity.dm.nodes.utils import node_logger, tool_args

if TYPE_CHECKING:
    from klarity.runtime.context import RuntimeContext


async def find_slots_node(state: BookingState, context: "RuntimeContext") -> dict[str, Any]:
    """Find available slots; an empty list is a valid result.

    A missing bound of the search window is derived from the other one
    (``booking.search_days`` apart); with neither, the window starts now.
    """
    log = node_logger(__name__, state)
    telegram_id = state.get("telegram_id")
    config = context.config

    requested = context.tools.parse_args(
        ToolName.FIND_FREE_SLOTS.value,
        tool_args(
            state,
            ToolName.FIND_FREE_SLOTS,
            duration_minutes=config.duration_for(state.get("session_type")),
        ),
    )
    window = timedelta(days=config.booking.search_days)
    start, end = requested.start_date, requested.end_date
    if start is None and end is None:
        start = datetime.now(timezone.utc)
        end = start + window
    elif end is None:
        end = start + window
    elif start is None:
        start = end - window

    args = {
        "start_date": start,
        "end_date": end,
        "duration_minutes": requested.duration_minutes,
    }
    result = await context.tools.execute(ToolName.FIND_FREE_SLOTS.value, args)
    slots = list(result.get("available_slots") or [])

    if slots:
        log.info(f"[find_slots] Found {len(slots)} slots for user {telegram_id}")
        message = "Found available slots."
    else:
        log.info(f"[find_slots] No slots found for user {telegram_id}")
        message = "No available slots found for the requested time."
    return {"available_slots": slots, "last_tool_response": message}


async def create_calendar_event_node(
    state: BookingState, context: "RuntimeContext"
) -> dict[str, Any]:
    """Create the calendar event for the confirmed slot."""
    log = node_logger(__name__, state)
    telegram_id = state.get("telegram_id")
    slot = state.get("confirmed_slot") or {}
    session_type = state.get("session_type") or "booking"
    profile = state.get("user_profile") or {}

    summary = context.config.booking.event_summary_template.format(
        session_type=session_type,
        name=profile.get("name") or f"User {telegram_id}",
    )
    args = tool_args(
        state,
        ToolName.CREATE_CALENDAR_EVENT,
        start=slot.get("start"),
        end=slot.get("end"),
        summary=summary,
        description=f"Session Type: {session_type}\nUser ID: {telegram_id}",
        attendee_email=profile.get("email"),
    )
    if not args.get("start") or not args.get("end"):
        log.error(f"[create_calendar_event] Missing slot bounds for user {telegram_id}")
        return {
            "error": "Cannot create calendar event without a confirmed slot.",
            "last_tool_response": "Error creating calendar event.",
        }

    result = await context.tools.execute(ToolName.CREATE_CALENDAR_EVENT.value, args)
    event_id = result.get("calendar_event_id")
    log.info(f"[create_calendar_event] Event {event_id} created for user {telegram_id}")
    return {"calendar_event_id": event_id, "last_tool_response": "Calendar event created."}


async def delete_calendar_event_node(
    state: BookingState, context: "RuntimeContext"
) -> dict[str, Any]:
    """Delete the user's calendar event; the graph resets state afterwards."""
    log = node_logger(__name__, state)
    args = tool_args(
        state,
        ToolName.DELETE_CALENDAR_EVENT,
        calendar_event_id=state.get("calendar_event_id"),
    )

    await context.tools.execute(ToolName.DELETE_CALENDAR_EVENT.value, args)
    log.info(f"[delete_calendar_event] Deleted event {args.get('calendar_event_id')}")
    return {"calendar_event_id": None, "last_tool_response": "Calendar event deleted."}
