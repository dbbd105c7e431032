"""
Shared fixtures for the eval engine tests.

Model capabilities are scripted fakes: no network, no provider SDK calls.
"""
import asyncio
import io

import pytest
from rich.console import Console

from gomjabbar.eval.models import Completion, ToolCall
from gomjabbar.eval.registry import ModelHandle
from gomjabbar.eval.suite import TestSuiteBuilder


class FakeCapability:
    """Returns a fixed completion (or raises) and records every request."""

    def __init__(self, completion: Completion | None = None, error: Exception | None = None, delay: float = 0.0):
        self.completion = completion or Completion(text="ok")
        self.error = error
        self.delay = delay
        self.requests = []

    async def generate(self, request):
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.completion


class ConcurrencyTracker:
    """Counts in-flight generations per provider."""

    def __init__(self):
        self.in_flight = {}
        self.peak = {}
        self.order = []

    def capability(self, provider: str, completion: Completion | None = None, delay: float = 0.01):
        tracker = self

        class _Tracked:
            async def generate(self, request):
                tracker.order.append((provider, request.messages[0].content))
                tracker.in_flight[provider] = tracker.in_flight.get(provider, 0) + 1
                tracker.peak[provider] = max(tracker.peak.get(provider, 0), tracker.in_flight[provider])
                try:
                    await asyncio.sleep(delay)
                finally:
                    tracker.in_flight[provider] -= 1
                return completion or Completion(text="ok")

        return _Tracked()


@pytest.fixture
def add_completion() -> Completion:
    return Completion(
        text="",
        tool_calls=[ToolCall(tool_call_id="call_1", tool_name="add", args={"lhs": 2, "rhs": 4})],
        finish_reason="tool_calls",
    )


@pytest.fixture
def make_handle():
    def _make(identifier: str, provider: str = "fake", capability=None, **kwargs) -> ModelHandle:
        return ModelHandle(
            identifier=identifier,
            provider=provider,
            capability=capability or FakeCapability(**kwargs),
        )
    return _make


@pytest.fixture
def builder() -> TestSuiteBuilder:
    return TestSuiteBuilder(
        tools={
            "add": {
                "type": "function",
                "function": {
                    "name": "add",
                    "description": "A tool that can add two numbers",
                    "parameters": {
                        "type": "object",
                        "properties": {"lhs": {"type": "number"}, "rhs": {"type": "number"}},
                        "required": ["lhs", "rhs"],
                    },
                },
            }
        },
        system_prompt="You are a helpful assistant that can use tools to answer questions.",
    )


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=120, height=40, force_terminal=False, color_system=None)


@pytest.fixture
def tracker() -> ConcurrencyTracker:
    return ConcurrencyTracker()
