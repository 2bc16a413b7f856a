"""Input schemas for tool executors.

Tool arguments arrive from the decision maker with camelCase keys; each
schema accepts those (and snake_case) and rejects malformed values before
any side effect happens.
"""

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from klarity.core.constants import ToolName


class ToolArgs(BaseModel):
    """Base for tool argument models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class FindFreeSlotsArgs(ToolArgs):
    """Input schema for finding free calendar slots."""

    start_date: AwareDatetime | None = None
    end_date: AwareDatetime | None = None
    duration_minutes: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_range(self) -> "FindFreeSlotsArgs":
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


class StoreBookingDataArgs(ToolArgs):
    """Input schema for storing confirmed booking data."""

    telegram_id: str = Field(min_length=1)
    session_type: str = Field(min_length=1)
    booking_slot: AwareDatetime


class CreateCalendarEventArgs(ToolArgs):
    """Input schema for creating a calendar event."""

    start: AwareDatetime
    end: AwareDatetime
    summary: str = Field(min_length=1)
    description: str | None = None
    attendee_email: str | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "CreateCalendarEventArgs":
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class SendWaiverLinkArgs(ToolArgs):
    """Input schema for sending the waiver link message."""

    telegram_id: str = Field(min_length=1)
    session_type: str = Field(min_length=1)
    message_text: str | None = None


class ResetUserStateArgs(ToolArgs):
    """Input schema for resetting a user's booking state."""

    telegram_id: str = Field(min_length=1)


class DeleteCalendarEventArgs(ToolArgs):
    """Input schema for deleting a calendar event."""

    calendar_event_id: str = Field(min_length=1)


class SendTextMessageArgs(ToolArgs):
    """Input schema for sending a simple text message."""

    telegram_id: str = Field(min_length=1)
    text: str = Field(min_length=1)


class UserLookupArgs(ToolArgs):
    """Input schema for profile and past-session lookups."""

    telegram_id: str = Field(min_length=1)


TOOL_SCHEMAS: dict[str, type[ToolArgs]] = {
    ToolName.FIND_FREE_SLOTS.value: FindFreeSlotsArgs,
    ToolName.STORE_BOOKING_DATA.value: StoreBookingDataArgs,
    ToolName.CREATE_CALENDAR_EVENT.value: CreateCalendarEventArgs,
    ToolName.SEND_WAIVER_LINK.value: SendWaiverLinkArgs,
    ToolName.RESET_USER_STATE.value: ResetUserStateArgs,
    ToolName.DELETE_CALENDAR_EVENT.value: DeleteCalendarEventArgs,
    ToolName.SEND_TEXT_MESSAGE.value: SendTextMessageArgs,
    ToolName.GET_USER_PROFILE_DATA.value: UserLookupArgs,
    ToolName.GET_USER_PAST_SESSIONS.value: UserLookupArgs,
}
