"""Tool executors: registry and argument schemas."""

from klarity.tools.registry import ToolHandler, ToolRegistry
from klarity.tools.schemas import TOOL_SCHEMAS, ToolArgs

__all__ = ["TOOL_SCHEMAS", "ToolArgs", "ToolHandler", "ToolRegistry"]
