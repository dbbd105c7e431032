from gomjabbar.agents.capability import ChatModelCapability, GenerationRequest, ModelCapability
from gomjabbar.agents.llm_factory import LLMFactory
from gomjabbar.agents.tools import ToolDescription
from gomjabbar.cli import RunSummary, cli, run_benchmark, run_inspect
from gomjabbar.core.exceptions import (
    ConfigurationError,
    GomJabbarError,
    NotFoundError,
    SuiteConstructionError,
    UnknownOutcomeError,
)
from gomjabbar.eval import messages as M
from gomjabbar.eval.assertions import (
    expect_no_tool_calls,
    expect_single_tool_call,
    expect_text_contains,
    expect_tool_calls,
)
from gomjabbar.eval.models import (
    Completion,
    EvalResult,
    FailedToGenerate,
    LogRecord,
    Message,
    TestFailed,
    TestPassed,
    ToolCall,
    ToolInvocation,
    is_success,
)
from gomjabbar.eval.registry import ModelHandle, ModelRegistry
from gomjabbar.eval.suite import EvalArgs, TestCase, TestSuite, TestSuiteBuilder, shuffle

__all__ = [
    "ChatModelCapability",
    "Completion",
    "ConfigurationError",
    "EvalArgs",
    "EvalResult",
    "FailedToGenerate",
    "GenerationRequest",
    "GomJabbarError",
    "LLMFactory",
    "LogRecord",
    "M",
    "Message",
    "ModelCapability",
    "ModelHandle",
    "ModelRegistry",
    "NotFoundError",
    "RunSummary",
    "SuiteConstructionError",
    "TestCase",
    "TestFailed",
    "TestPassed",
    "TestSuite",
    "TestSuiteBuilder",
    "ToolCall",
    "ToolDescription",
    "ToolInvocation",
    "UnknownOutcomeError",
    "cli",
    "expect_no_tool_calls",
    "expect_single_tool_call",
    "expect_text_contains",
    "expect_tool_calls",
    "is_success",
    "run_benchmark",
    "run_inspect",
    "shuffle",
]
