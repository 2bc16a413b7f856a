"""Shared fixtures for Klarity tests.

Uses ScriptedDecisionMaker and RecordingTools for deterministic, fast tests
without LLM or calendar calls.
"""

import logging

import pytest

from klarity.config.models import AssistantConfig, GraphConfig
from klarity.memory.manager import ConversationMemoryManager
from klarity.runtime.context import RuntimeContext
from tests.mocks import RecordingTools, ScriptedDecisionMaker


@pytest.fixture(autouse=True)
def propagate_klarity_logs():
    """setup_logging detaches the package logger from root; caplog needs it attached."""
    yield
    logger = logging.getLogger("klarity")
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


@pytest.fixture
def config() -> AssistantConfig:
    return AssistantConfig(graph=GraphConfig(node_timeout_seconds=2.0, max_steps=12))


@pytest.fixture
def tools() -> RecordingTools:
    return RecordingTools()


@pytest.fixture
def make_context(config, tools):
    """
    Factory fixture building a RuntimeContext around scripted outcomes.

    Usage:
        def test_something(make_context):
            context = make_context([tool_call("findFreeSlots"), reply("Pick one")])
    """

    def _create(outcomes, tool_registry=None, settings=None):
        return RuntimeContext(
            decision_maker=ScriptedDecisionMaker(outcomes),
            tools=tool_registry or tools.registry,
            memory=ConversationMemoryManager(max_messages=20),
            config=settings or config,
        )

    return _create
