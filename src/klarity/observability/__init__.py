"""Observability module for Klarity."""

from klarity.observability.logging import ContextLogger, TurnContextFilter, setup_logging

__all__ = ["ContextLogger", "TurnContextFilter", "setup_logging"]
