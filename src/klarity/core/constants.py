"""Core constants and enums."""

from enum import Enum


class NodeName(str, Enum):
    """Names of the steps in the booking turn graph."""

    AGENT = "agent"
    FIND_SLOTS = "find_slots"
    STORE_BOOKING = "store_booking"
    CREATE_CALENDAR_EVENT = "create_calendar_event"
    SEND_WAIVER = "send_waiver"
    RESET_STATE = "reset_state"
    DELETE_CALENDAR_EVENT = "delete_calendar_event"
    SEND_TEXT_MESSAGE = "send_text_message"
    HANDLE_ERROR = "handle_error"


class ToolName(str, Enum):
    """Tool names as emitted by the decision maker."""

    FIND_FREE_SLOTS = "findFreeSlots"
    STORE_BOOKING_DATA = "storeBookingData"
    CREATE_CALENDAR_EVENT = "createCalendarEvent"
    SEND_WAIVER_LINK = "sendWaiverLink"
    RESET_USER_STATE = "resetUserState"
    DELETE_CALENDAR_EVENT = "deleteCalendarEvent"
    GET_USER_PROFILE_DATA = "getUserProfileData"
    GET_USER_PAST_SESSIONS = "getUserPastSessions"
    SEND_TEXT_MESSAGE = "sendTextMessage"


# Full tool set presented to the decision maker.
AVAILABLE_TOOL_NAMES: tuple[str, ...] = tuple(tool.value for tool in ToolName)

# Tools whose results only feed the next decision.
CONTEXT_TOOLS = frozenset(
    {ToolName.GET_USER_PROFILE_DATA.value, ToolName.GET_USER_PAST_SESSIONS.value}
)

GENERIC_ERROR_MESSAGE = (
    "Sorry, something went wrong while processing your request. "
    "Please try again shortly or contact support if the issue persists."
)
