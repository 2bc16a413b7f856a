"""Core errors for the booking conversation engine.

Errors raised while a turn is running never leave the graph: the engine
turns them into ``state["error"]``. Errors raised while building the graph
or loading configuration propagate to the caller.
"""


class KlarityError(Exception):
    """Base class for all Klarity errors."""

    pass


class GraphBuildError(KlarityError):
    """Error raised during graph construction."""

    pass


class ConfigError(KlarityError):
    """Raised when configuration is invalid."""


class StateError(KlarityError):
    """Raised when a workflow state cannot be built."""

    pass


class ToolError(KlarityError):
    """Base class for tool dispatch failures."""

    def __init__(self, message: str, tool_name: str | None = None):
        super().__init__(message)
        self.tool_name = tool_name


class ToolNotFoundError(ToolError):
    """Tool is not registered."""

    pass


class ToolArgumentError(ToolError):
    """Tool arguments failed schema validation."""

    pass


class ToolExecutionError(ToolError):
    """Tool executor reported a failure."""

    pass


class DecisionError(KlarityError):
    """Raised when the decision maker call fails."""

    pass
