"""Conversion between eval conversations and LangChain messages."""

import json
import logging
from typing import Any

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    SystemMessage,
    ToolMessage,
)

from gomjabbar.eval.models import Completion, Message, ToolCall

logger = logging.getLogger(__name__)


def _encode_tool_result(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, default=str)


def to_langchain_messages(system_prompt: str, messages: list[Message]) -> list[BaseMessage]:
    """
    Build the chat model input for one test case.

    The system prompt always comes from the suite. Assistant turns carrying
    tool invocations are expanded into an AIMessage with tool_calls followed by
    one ToolMessage per invocation. `data` messages are UI annotations and are
    not sent to the model.
    """
    msgs: list[BaseMessage] = [SystemMessage(content=system_prompt)]

    for message in messages:
        if message.role == "user":
            msgs.append(HumanMessage(content=message.content))

        elif message.role == "assistant":
            invocations = message.tool_invocations or []
            msgs.append(
                AIMessage(
                    content=message.content,
                    tool_calls=[
                        {
                            "name": inv.tool_name,
                            "args": inv.args,
                            "id": inv.tool_call_id,
                            "type": "tool_call",
                        }
                        for inv in invocations
                    ],
                )
            )
            for inv in invocations:
                msgs.append(
                    ToolMessage(
                        content=_encode_tool_result(inv.result),
                        tool_call_id=inv.tool_call_id,
                        name=inv.tool_name,
                    )
                )

        elif message.role == "data":
            logger.debug("Skipping data message in model input")

        else:
            # Suites reject system messages at build time
            raise ValueError(f"Unsupported message role: {message.role}")

    return msgs


def _text_content(content: Any) -> str:
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def completion_from_ai_message(ai: AIMessage) -> Completion:
    metadata = ai.response_metadata or {}
    return Completion(
        text=_text_content(ai.content),
        tool_calls=[
            ToolCall(
                tool_call_id=call.get("id") or "",
                tool_name=call["name"],
                args=call.get("args") or {},
            )
            for call in ai.tool_calls
        ],
        finish_reason=metadata.get("finish_reason") or metadata.get("stop_reason"),
        usage=dict(ai.usage_metadata) if ai.usage_metadata else None,
    )
