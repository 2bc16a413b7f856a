"""Decision maker backed by a LangChain tool-calling chat model."""

import json
import logging
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from klarity.agents.base import DecisionContext
from klarity.core.errors import DecisionError
from klarity.core.types import AgentOutcome
from klarity.tools.schemas import TOOL_SCHEMAS

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a booking assistant. Help the user pick a session type, confirm a "
    "time slot and complete the reservation. Call at most one tool per reply. "
    "When you have nothing to call, answer the user directly."
)


def build_tool_specs(tool_names: tuple[str, ...]) -> list[dict[str, Any]]:
    """OpenAI-style tool specs for the given names, built from the argument schemas."""
    specs = []
    for name in tool_names:
        schema = TOOL_SCHEMAS[name]
        specs.append(
            {
                "type": "function",
                "function": {
                    "name": name,
                    "description": (schema.__doc__ or name).strip(),
                    "parameters": schema.model_json_schema(by_alias=True),
                },
            }
        )
    return specs


class ChatModelDecisionMaker:
    """Maps a chat model reply onto an ``AgentOutcome``."""

    def __init__(self, model: BaseChatModel, system_prompt: str = DEFAULT_SYSTEM_PROMPT):
        self.model = model
        self.system_prompt = system_prompt

    def _build_messages(self, context: DecisionContext) -> list[BaseMessage]:
        system = self.system_prompt
        if context.facts:
            system += "\n\nKnown facts:\n" + json.dumps(context.facts, default=str, indent=2)
        messages: list[BaseMessage] = [SystemMessage(content=system), *context.history]
        # On re-entry within a turn the input is already the last history entry
        last = context.history[-1] if context.history else None
        if not (isinstance(last, HumanMessage) and last.content == context.user_input):
            messages.append(HumanMessage(content=context.user_input))
        return messages

    async def decide(self, context: DecisionContext) -> AgentOutcome:
        """Invoke the model with the tools bound and translate its reply."""
        runnable = self.model.bind_tools(build_tool_specs(context.tool_names))
        try:
            reply = await runnable.ainvoke(self._build_messages(context))
        except Exception as e:
            raise DecisionError(f"Decision model call failed: {e}") from e

        if not isinstance(reply, AIMessage):
            raise DecisionError(f"Unexpected model reply type: {type(reply).__name__}")

        if reply.tool_calls:
            if len(reply.tool_calls) > 1:
                logger.warning(
                    f"Model requested {len(reply.tool_calls)} tools, only the first is used"
                )
            return {
                "tool_calls": [
                    {"name": call["name"], "args": dict(call.get("args") or {})}
                    for call in reply.tool_calls
                ]
            }

        if isinstance(reply.content, str):
            text = reply.content
        else:
            text = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in reply.content
            )
        return {"output": text}
