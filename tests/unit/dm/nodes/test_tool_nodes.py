"""Unit tests for the tool-executing nodes."""

from datetime import datetime, timedelta, timezone

import pytest

from klarity.core.constants import GENERIC_ERROR_MESSAGE
from klarity.core.errors import ToolArgumentError, ToolExecutionError
from klarity.dm.nodes import (
    create_calendar_event_node,
    delete_calendar_event_node,
    find_slots_node,
    handle_error_node,
    reset_state_node,
    send_text_message_node,
    send_waiver_node,
    store_booking_node,
)
from klarity.tools.registry import ToolRegistry
from tests.factories import make_booking_state
from tests.mocks import RecordingTools, tool_call

SLOT = "2026-11-02T10:00:00+00:00"


class TestFindSlots:
    @pytest.mark.asyncio
    async def test_slots_found(self, make_context, tools):
        context = make_context([])

        update = await find_slots_node(
            make_booking_state(agent_outcome=tool_call("findFreeSlots")), context
        )

        assert update["available_slots"] == [SLOT, "2026-11-03T14:00:00+00:00"]
        assert update["last_tool_response"] == "Found available slots."

    @pytest.mark.asyncio
    async def test_no_slots_is_not_an_error(self, make_context):
        tools = RecordingTools(findFreeSlots={"available_slots": []})
        context = make_context([], tool_registry=tools.registry)

        update = await find_slots_node(make_booking_state(), context)

        assert update["available_slots"] == []
        assert "error" not in update
        assert "No available slots" in update["last_tool_response"]

    @pytest.mark.asyncio
    async def test_defaults_fill_missing_arguments(self, make_context, tools, config):
        context = make_context([])
        before = datetime.now(timezone.utc)

        await find_slots_node(make_booking_state(session_type="private"), context)

        (args,) = tools.called("findFreeSlots")
        assert args.duration_minutes == 90
        assert args.start_date >= before
        assert args.end_date - args.start_date == timedelta(days=config.booking.search_days)

    @pytest.mark.asyncio
    async def test_agent_arguments_win(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(
            agent_outcome=tool_call(
                "findFreeSlots",
                startDate="2026-11-01T00:00:00+00:00",
                endDate="2026-11-08T00:00:00+00:00",
                durationMinutes=30,
            )
        )

        await find_slots_node(state, context)

        (args,) = tools.called("findFreeSlots")
        assert args.duration_minutes == 30
        assert args.start_date == datetime(2026, 11, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_start_only_request_derives_end(self, make_context, tools, config):
        """
        GIVEN the agent asks for slots from a start date three weeks out
        WHEN no end date is given
        THEN the window ends search_days after that start
        """
        context = make_context([])
        start = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=21)
        state = make_booking_state(
            agent_outcome=tool_call("findFreeSlots", startDate=start.isoformat())
        )

        update = await find_slots_node(state, context)

        assert "error" not in update
        (args,) = tools.called("findFreeSlots")
        assert args.start_date == start
        assert args.end_date == start + timedelta(days=config.booking.search_days)

    @pytest.mark.asyncio
    async def test_end_only_request_derives_start(self, make_context, tools, config):
        context = make_context([])
        state = make_booking_state(
            agent_outcome=tool_call("findFreeSlots", endDate="2026-12-20T00:00:00+00:00")
        )

        await find_slots_node(state, context)

        (args,) = tools.called("findFreeSlots")
        assert args.end_date == datetime(2026, 12, 20, tzinfo=timezone.utc)
        assert args.start_date == args.end_date - timedelta(days=config.booking.search_days)

    @pytest.mark.asyncio
    async def test_arguments_of_another_tool_are_ignored(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(
            agent_outcome=tool_call("getUserPastSessions", durationMinutes=15)
        )

        await find_slots_node(state, context)

        (args,) = tools.called("findFreeSlots")
        assert args.duration_minutes == 60

    @pytest.mark.asyncio
    async def test_tool_failure_raises(self, make_context):
        tools = RecordingTools(findFreeSlots=RuntimeError("calendar API down"))
        context = make_context([], tool_registry=tools.registry)

        with pytest.raises(ToolExecutionError, match="calendar API down"):
            await find_slots_node(make_booking_state(), context)


class TestStoreBooking:
    @pytest.mark.asyncio
    async def test_stores_and_derives_slot_end(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(
            agent_outcome=tool_call(
                "storeBookingData", bookingSlot=SLOT, sessionType="private"
            )
        )

        update = await store_booking_node(state, context)

        assert update["booking_id"] == "b1"
        assert update["session_type"] == "private"
        assert update["confirmed_slot"] == {
            "start": SLOT,
            "end": "2026-11-02T11:30:00+00:00",
        }
        (args,) = tools.called("storeBookingData")
        assert args.telegram_id == "12345"

    @pytest.mark.asyncio
    async def test_missing_slot_sets_error(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(
            agent_outcome=tool_call("storeBookingData", sessionType="group")
        )

        update = await store_booking_node(state, context)

        assert update["error"] == "Cannot store booking without a confirmed slot."
        assert tools.calls == []

    @pytest.mark.asyncio
    async def test_invalid_arguments_raise(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(
            agent_outcome=tool_call("storeBookingData", bookingSlot="not a date")
        )

        with pytest.raises(ToolArgumentError):
            await store_booking_node(state, context)
        assert tools.calls == []

    @pytest.mark.asyncio
    async def test_confirmed_slot_uses_validated_value(self, make_context, tools):
        """
        GIVEN the agent sends the slot as an epoch timestamp
        WHEN the booking is stored
        THEN the confirmed slot is built from the validated datetime
        """
        context = make_context([])
        epoch = 1793613600
        state = make_booking_state(
            agent_outcome=tool_call("storeBookingData", bookingSlot=epoch, sessionType="group")
        )

        update = await store_booking_node(state, context)

        start = datetime.fromtimestamp(epoch, timezone.utc)
        assert update["booking_id"] == "b1"
        assert update["confirmed_slot"] == {
            "start": start.isoformat(),
            "end": (start + timedelta(minutes=60)).isoformat(),
        }
        assert tools.call_names == ["storeBookingData"]


class TestCalendarEvents:
    @pytest.mark.asyncio
    async def test_create_event_from_confirmed_slot(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(
            session_type="private",
            booking_id="b1",
            confirmed_slot={"start": SLOT, "end": "2026-11-02T11:30:00+00:00"},
            user_profile={"name": "Ana", "email": "ana@example.com"},
        )

        update = await create_calendar_event_node(state, context)

        assert update["calendar_event_id"] == "evt-1"
        (args,) = tools.called("createCalendarEvent")
        assert args.summary == "private session with Ana"
        assert args.attendee_email == "ana@example.com"
        assert "User ID: 12345" in args.description

    @pytest.mark.asyncio
    async def test_store_call_arguments_do_not_reach_event(self, make_context, tools):
        """
        GIVEN the pending agent call is storeBookingData carrying extra keys
        WHEN the chained calendar node runs
        THEN the event keeps its computed summary and slot bounds
        """
        context = make_context([])
        state = make_booking_state(
            session_type="private",
            confirmed_slot={"start": SLOT, "end": "2026-11-02T11:30:00+00:00"},
            agent_outcome=tool_call(
                "storeBookingData",
                bookingSlot=SLOT,
                sessionType="private",
                summary="Overridden",
                end="2026-11-02T10:15:00+00:00",
            ),
        )

        await create_calendar_event_node(state, context)

        (args,) = tools.called("createCalendarEvent")
        assert args.summary == "private session with User 12345"
        assert args.end == datetime(2026, 11, 2, 11, 30, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_create_event_without_slot_sets_error(self, make_context, tools):
        context = make_context([])

        update = await create_calendar_event_node(make_booking_state(), context)

        assert "without a confirmed slot" in update["error"]
        assert tools.calls == []

    @pytest.mark.asyncio
    async def test_delete_event_clears_id(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(
            calendar_event_id="evt-9", agent_outcome=tool_call("deleteCalendarEvent")
        )

        update = await delete_calendar_event_node(state, context)

        assert update["calendar_event_id"] is None
        (args,) = tools.called("deleteCalendarEvent")
        assert args.calendar_event_id == "evt-9"

    @pytest.mark.asyncio
    async def test_delete_without_event_id_raises(self, make_context):
        context = make_context([])

        with pytest.raises(ToolArgumentError):
            await delete_calendar_event_node(make_booking_state(), context)


class TestResetAndMessaging:
    @pytest.mark.asyncio
    async def test_reset_clears_booking_fields(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(
            session_type="private", booking_id="b1", confirmed_slot={"start": SLOT}
        )

        update = await reset_state_node(state, context)

        assert update["session_type"] is None
        assert update["booking_id"] is None
        assert update["confirmed_slot"] is None
        assert tools.call_names == ["resetUserState"]

    @pytest.mark.asyncio
    async def test_send_waiver(self, make_context, tools):
        context = make_context([])

        update = await send_waiver_node(make_booking_state(session_type="private"), context)

        assert update["last_tool_response"] == "Waiver sent."
        (args,) = tools.called("sendWaiverLink")
        assert args.session_type == "private"

    @pytest.mark.asyncio
    async def test_send_waiver_uses_session_type_from_state(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(
            session_type="private",
            agent_outcome=tool_call("storeBookingData", sessionType="group", bookingSlot=SLOT),
        )

        await send_waiver_node(state, context)

        (args,) = tools.called("sendWaiverLink")
        assert args.session_type == "private"

    @pytest.mark.asyncio
    async def test_send_text_message(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(agent_outcome=tool_call("sendTextMessage", text="See you!"))

        await send_text_message_node(state, context)

        (args,) = tools.called("sendTextMessage")
        assert args.text == "See you!"
        assert args.telegram_id == "12345"


class TestHandleError:
    @pytest.mark.asyncio
    async def test_notifies_user_with_generic_message(self, make_context, tools):
        context = make_context([])
        state = make_booking_state(error="Step 'find_slots' failed: secret details")

        update = await handle_error_node(state, context)

        assert update == {"response": GENERIC_ERROR_MESSAGE}
        (args,) = tools.called("sendTextMessage")
        assert args.text == GENERIC_ERROR_MESSAGE
        assert "secret" not in args.text

    @pytest.mark.asyncio
    async def test_notification_failure_is_swallowed(self, make_context):
        tools = RecordingTools(sendTextMessage=RuntimeError("telegram down"))
        context = make_context([], tool_registry=tools.registry)

        update = await handle_error_node(make_booking_state(error="boom"), context)

        assert update == {"response": GENERIC_ERROR_MESSAGE}

    @pytest.mark.asyncio
    async def test_without_messaging_tool(self, make_context):
        context = make_context([], tool_registry=ToolRegistry())

        update = await handle_error_node(make_booking_state(error="boom"), context)

        assert update["response"] == GENERIC_ERROR_MESSAGE
