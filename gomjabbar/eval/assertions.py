"""
Assertion helpers for test functions. Each raises AssertionError on mismatch,
including under `python -O`.
"""
from typing import Any

from .models import Completion


def expect_single_tool_call(result: Completion, tool_name: str) -> dict[str, Any]:
    """Check the model made exactly one call, to `tool_name`, and return its arguments."""
    calls = result.tool_calls
    if len(calls) != 1:
        raise AssertionError(f"Expected 1 tool call, got {len(calls)}: {[c.tool_name for c in calls]}")
    if calls[0].tool_name != tool_name:
        raise AssertionError(f"Expected tool {tool_name!r}, got {calls[0].tool_name!r}")
    return calls[0].args


def expect_tool_calls(result: Completion, *tool_names: str) -> list[dict[str, Any]]:
    actual = [call.tool_name for call in result.tool_calls]
    if actual != list(tool_names):
        raise AssertionError(f"Expected tool calls {list(tool_names)}, got {actual}")
    return [call.args for call in result.tool_calls]


def expect_no_tool_calls(result: Completion):
    actual = [call.tool_name for call in result.tool_calls]
    if actual:
        raise AssertionError(f"Expected no tool calls, got {actual}")


def expect_text_contains(result: Completion, *fragments: str):
    text = result.text.lower()
    missing = [fragment for fragment in fragments if fragment.lower() not in text]
    if missing:
        raise AssertionError(f"Expected response to contain {missing}: {result.text[:200]!r}")
