"""Configuration models for Klarity.

Defined using Pydantic for validation and YAML serialization support.
"""

from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class GraphConfig(BaseModel):
    """Turn execution limits."""

    node_timeout_seconds: float | None = Field(
        default=30.0,
        gt=0,
        description="Per-node timeout; a node that exceeds it fails like any other node",
    )
    max_steps: int = Field(
        default=25,
        ge=2,
        description="Maximum node visits per turn (guards agent/tool loops)",
    )


class MemoryConfig(BaseModel):
    """Conversation memory bounds. None disables the bound."""

    max_messages: int | None = Field(default=50, ge=2, description="Messages kept per session")
    ttl_seconds: float | None = Field(
        default=None, gt=0, description="Idle time after which a session buffer is evicted"
    )
    max_sessions: int = Field(default=10_000, ge=1, description="Session buffers kept in memory")


class BookingConfig(BaseModel):
    """Defaults used when the agent omits slot search arguments."""

    search_days: int = Field(default=14, ge=1, description="Slot search window in days")
    default_duration_minutes: int = Field(default=60, gt=0)
    session_durations: dict[str, int] = Field(
        default_factory=lambda: {"private": 90},
        description="Duration in minutes per session type",
    )
    event_summary_template: str = Field(default="{session_type} session with {name}")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = "INFO"
    json_file: str | None = Field(default=None, description="Rotating JSON log file path")


class AssistantConfig(BaseModel):
    """Root configuration."""

    graph: GraphConfig = Field(default_factory=GraphConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    booking: BookingConfig = Field(default_factory=BookingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def duration_for(self, session_type: str | None) -> int:
        """Session length in minutes for a session type."""
        if session_type and session_type in self.booking.session_durations:
            return self.booking.session_durations[session_type]
        return self.booking.default_duration_minutes
