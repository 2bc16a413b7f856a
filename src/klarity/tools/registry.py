"""Tool registry for side-effecting executors."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from klarity.core.errors import (
    ToolArgumentError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
)
from klarity.tools.schemas import TOOL_SCHEMAS, ToolArgs

logger = logging.getLogger(__name__)

# Type alias for tool handlers
ToolHandler = Callable[[ToolArgs], Awaitable[dict[str, Any]] | dict[str, Any]]


class ToolRegistry:
    """Registry for tool executors.

    Handlers receive one validated argument model and return a dict that
    nodes merge into the workflow state. A handler signals failure by
    raising, or by returning ``{"success": False, "error": "..."}``.

    Usage:
        registry = ToolRegistry()

        @registry.register("findFreeSlots")
        async def find_free_slots(args):
            return {"available_slots": [...]}

        result = await registry.execute("findFreeSlots", {"durationMinutes": 60})
    """

    _default_instance: "ToolRegistry | None" = None

    def __init__(self) -> None:
        self._handlers: dict[str, ToolHandler] = {}

    @classmethod
    def get_default(cls) -> "ToolRegistry":
        """Get the default global registry instance."""
        if cls._default_instance is None:
            cls._default_instance = cls()
        return cls._default_instance

    def register_handler(self, name: str, handler: ToolHandler) -> None:
        """Register a tool handler, replacing any previous one."""
        if name in self._handlers:
            logger.warning(f"Replacing handler for tool '{name}'")
        self._handlers[name] = handler

    def register(self, name: str) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator form of ``register_handler``."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register_handler(name, handler)
            return handler

        return decorator

    def parse_args(self, name: str, args: dict[str, Any] | None) -> ToolArgs:
        """Validate raw arguments against the tool's schema."""
        schema = TOOL_SCHEMAS.get(name, ToolArgs)
        try:
            return schema.model_validate(args or {})
        except ValidationError as e:
            raise ToolArgumentError(f"Invalid arguments for {name}: {e}", tool_name=name) from e

    async def execute(self, name: str, args: dict[str, Any] | None = None) -> dict[str, Any]:
        """Validate arguments and run a tool.

        Args:
            name: Registered tool name
            args: Raw arguments (camelCase or snake_case keys)

        Returns:
            Result dict from the handler (without the ``success`` flag)

        Raises:
            ToolNotFoundError: If the tool is not registered
            ToolArgumentError: If arguments fail validation
            ToolExecutionError: If the handler raises or reports ``success: False``
        """
        if name not in self._handlers:
            raise ToolNotFoundError(f"Unknown tool: {name}", tool_name=name)

        parsed = self.parse_args(name, args)
        handler = self._handlers[name]

        logger.debug(f"Executing tool {name}")
        try:
            result = handler(parsed)
            if asyncio.iscoroutine(result):
                result = await result
        except ToolError:
            raise
        except Exception as e:
            raise ToolExecutionError(f"Tool {name} failed: {e}", tool_name=name) from e

        if result is None:
            return {}
        if not isinstance(result, dict):
            raise ToolExecutionError(
                f"Tool {name} returned {type(result).__name__}, expected dict", tool_name=name
            )
        if result.get("success") is False:
            raise ToolExecutionError(
                str(result.get("error") or f"Tool {name} failed"), tool_name=name
            )
        return {k: v for k, v in result.items() if k != "success"}

    def names(self) -> list[str]:
        """Registered tool names."""
        return list(self._handlers)

    def __contains__(self, name: str) -> bool:
        """Check if tool is registered."""
        return name in self._handlers
