"""
Data models for eval runs.

Everything that ends up in the durable log is a frozen pydantic model with
camelCase aliases, so one record serializes to exactly one JSON line.
"""
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ---- Conversation ----

class ToolInvocation(_Record):
    """A synthetic prior tool call injected into the conversation history."""
    tool_call_id: str
    tool_name: str
    args: dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    state: Literal["result"] = "result"


class Message(_Record):
    role: Literal["system", "user", "assistant", "data"]
    content: str = ""
    tool_invocations: tuple[ToolInvocation, ...] | None = None


# ---- Generation ----

class ToolCall(_Record):
    """A tool call emitted by the model under test. Never executed."""
    tool_call_id: str
    tool_name: str
    args: dict[str, Any] = Field(default_factory=dict)


class Completion(_Record):
    text: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    finish_reason: str | None = None
    usage: dict[str, Any] | None = None


# ---- Outcomes ----

class FailedToGenerate(_Record):
    type: Literal["failed-to-generate"] = "failed-to-generate"
    completion: None = None
    completion_error: str
    test_error: None = None


class TestFailed(_Record):
    __test__ = False

    type: Literal["test-failed"] = "test-failed"
    completion: Completion
    completion_error: None = None
    test_error: str


class TestPassed(_Record):
    __test__ = False

    type: Literal["test-passed"] = "test-passed"
    completion: Completion
    completion_error: None = None
    test_error: None = None


EvalResult = Annotated[
    Union[FailedToGenerate, TestFailed, TestPassed],
    Field(discriminator="type"),
]


def is_success(result: EvalResult) -> bool:
    return isinstance(result, TestPassed)


# ---- Durable log ----

class LogRecord(_Record):
    """One line of the session log, written once per finished execution unit."""
    test_case: str
    model: str
    messages: list[Message]
    result: EvalResult

    def to_json_line(self) -> str:
        return self.model_dump_json(by_alias=True) + "\n"
