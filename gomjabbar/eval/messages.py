"""Shorthand constructors for test case conversations."""
import uuid
from typing import Any

from .models import Message, ToolInvocation


def user(content: str) -> Message:
    return Message(role="user", content=content)


def assistant(content: str) -> Message:
    return Message(role="assistant", content=content)


def data(content: str) -> Message:
    return Message(role="data", content=content)


def tool_call(tool_name: str, args: dict[str, Any], result: Any) -> Message:
    """
    Build an assistant turn that already called `tool_name` and got `result` back.

    Used for multi-turn fixtures; the engine never runs the tool itself.
    """
    return Message(
        role="assistant",
        content="",
        tool_invocations=(
            ToolInvocation(
                tool_call_id=str(uuid.uuid4()),
                tool_name=tool_name,
                args=args,
                result=result,
            ),
        ),
    )
