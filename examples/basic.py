#!/usr/bin/env python3
"""
Minimal eval suite.

Usage:
    python examples/basic.py benchmark
    python examples/basic.py inspect --model gpt4o --eval-id "What is 2 + 4?"
"""
import sys

from pydantic import BaseModel, Field

from gomjabbar import LLMFactory, TestSuiteBuilder, cli, expect_single_tool_call
from gomjabbar.core.config import load_environment

load_environment()


# Tools are only described to the model, never executed during evals.
# Ideally reuse the exact tool definitions of your application here.
class Add(BaseModel):
    """A tool that can add two numbers"""
    lhs: float = Field(description="Left operand")
    rhs: float = Field(description="Right operand")


openai = LLMFactory("openai")
bedrock = LLMFactory("bedrock")

suite = TestSuiteBuilder(
    tools={"add": Add},
    system_prompt="You are a helpful assistant that can use tools to answer questions.",
    models={
        # Pin exact model versions so regressions can be traced
        "gpt4o": openai.create("gpt4o", "gpt-4o-2024-08-06"),
        "gpt4o-mini": openai.create("gpt4o-mini", "gpt-4o-mini"),
        "haiku": bedrock.create("haiku", "anthropic.claude-3-haiku-20240307-v1:0"),
    },
)


@suite.eval("What is 2 + 4?")
def adds_two_numbers(result):
    args = expect_single_tool_call(result, "add")
    assert args["lhs"] == 2
    assert args["rhs"] == 4


if __name__ == "__main__":
    sys.exit(cli(suite.build()))
