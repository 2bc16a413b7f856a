"""Helpers shared by node handlers."""

import logging
from datetime import datetime
from typing import Any

from pydantic.alias_generators import to_snake

from klarity.core.constants import ToolName
from klarity.core.state import first_tool_call
from klarity.core.types import BookingState
from klarity.observability.logging import ContextLogger


def node_logger(name: str, state: BookingState) -> logging.LoggerAdapter:
    """Logger carrying the turn's correlation ids."""
    return ContextLogger(name).with_context(
        telegram_id=state.get("telegram_id"),
        session_id=state.get("session_id"),
    )


def tool_args(state: BookingState, tool: ToolName | str, **defaults: Any) -> dict[str, Any]:
    """Arguments for ``tool``: the agent's call to it over snake_case defaults.

    Agent arguments are applied only when the pending tool call is for
    ``tool``; nodes further down a chain keep their computed values.
    ``None`` values are dropped.
    """
    args = {k: v for k, v in defaults.items() if v is not None}
    name, raw = first_tool_call(state)
    if name == ToolName(tool).value:
        args.update({to_snake(k): v for k, v in raw.items() if v is not None})
    return args


def to_iso(value: datetime | str) -> str:
    return value.isoformat() if isinstance(value, datetime) else str(value)
