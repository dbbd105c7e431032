"""
Test suites: the scenarios to run and the models to run them against.

A suite is assembled with TestSuiteBuilder and frozen by build(). Once built,
its tools, test cases and models are read-only for the lifetime of a run.
"""
import asyncio
import inspect
import logging
import random
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from langchain_core.language_models import BaseChatModel

from gomjabbar.agents.capability import GenerationRequest
from gomjabbar.agents.tools import describe_tools
from gomjabbar.core.exceptions import NotFoundError, SuiteConstructionError
from .models import (
    Completion,
    EvalResult,
    FailedToGenerate,
    Message,
    TestFailed,
    TestPassed,
)
from .registry import ModelHandle, ModelRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")

TestFunction = Callable[[Completion], Awaitable[None] | None]


@dataclass(frozen=True)
class TestCase:
    __test__ = False

    name: str
    messages: tuple[Message, ...]
    test: TestFunction


@dataclass(frozen=True)
class EvalArgs:
    name: str
    messages: Sequence[Message | Mapping[str, Any]]


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Fisher-Yates shuffle of a copy of `items`. Pass a seeded Random for reproducible order."""
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def _format_error(prefix: str, error: BaseException) -> str:
    detail = str(error) or type(error).__name__
    return f"{prefix}: {type(error).__name__}: {detail}"


class TestSuite:
    __test__ = False

    def __init__(
        self,
        tools: Mapping[str, Any],
        system_prompt: str,
        tests: Sequence[TestCase],
        models: ModelRegistry | Mapping[str, ModelHandle | BaseChatModel],
    ):
        self.tools = describe_tools(tools)
        self.system_prompt = system_prompt
        self.tests: tuple[TestCase, ...] = tuple(tests)
        self.models = models if isinstance(models, ModelRegistry) else ModelRegistry(models)

    def find_model(self, identifier: str) -> ModelHandle:
        return self.models.resolve(identifier)

    def find_eval(self, name: str) -> TestCase:
        for test_case in self.tests:
            if test_case.name == name:
                return test_case
        raise NotFoundError("Eval", name, self.test_names())

    def test_names(self) -> list[str]:
        return sorted(test_case.name for test_case in self.tests)

    def shuffle_evals(self, rng: random.Random | None = None) -> list[TestCase]:
        return shuffle(self.tests, rng)

    def select_evals(self, limit: int = 0, randomize: bool = False, seed: int | None = None) -> list[TestCase]:
        """Declared order unless `randomize`; `limit` <= 0 keeps every test case."""
        selected = self.shuffle_evals(random.Random(seed)) if randomize else list(self.tests)
        if limit > 0:
            selected = selected[:limit]
        return selected

    async def run_test_case(
        self,
        test_case: TestCase,
        model: ModelHandle,
        timeout: float | None = None,
    ) -> EvalResult:
        """
        Generate a completion for one test case and run its assertion.

        Returns exactly one outcome. The assertion only runs if generation
        succeeded; neither step is retried.
        """
        request = GenerationRequest(
            system_prompt=self.system_prompt,
            tool_descriptions=self.tools,
            messages=list(test_case.messages),
        )

        try:
            completion = await asyncio.wait_for(model.capability.generate(request), timeout)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"Generation failed for {test_case.name} with {model.identifier}: {e!r}")
            return FailedToGenerate(
                completion_error=_format_error("Error generating completion", e),
            )

        try:
            outcome = test_case.test(completion)
            if inspect.isawaitable(outcome):
                await outcome
        except asyncio.CancelledError:
            raise
        except Exception as e:
            return TestFailed(
                completion=completion,
                test_error=_format_error("Error running test", e),
            )

        return TestPassed(completion=completion)


class TestSuiteBuilder:
    """
    Collects tools, models and test cases for a suite.

    Example:
        builder = TestSuiteBuilder(tools=tools, system_prompt="...", models={...})

        @builder.eval("What is 2 + 4?")
        def adds(result):
            args = expect_single_tool_call(result, "add")
            assert args == {"lhs": 2, "rhs": 4}

        suite = builder.build()
    """

    __test__ = False

    def __init__(
        self,
        tools: Mapping[str, Any] | None = None,
        system_prompt: str = "",
        models: Mapping[str, ModelHandle | BaseChatModel] | None = None,
    ):
        self._tools = dict(tools or {})
        self._system_prompt = system_prompt
        self._models: dict[str, ModelHandle | BaseChatModel] = dict(models or {})
        self._tests: list[TestCase] = []

    def add_model(self, identifier: str, model: ModelHandle | BaseChatModel):
        self._models[identifier] = model

    def eval(self, arg: str | EvalArgs | Mapping[str, Any], test: TestFunction | None = None):
        """
        Add a test case. `arg` is either a prompt (used as both name and the
        single user message) or a name plus a conversation. Without `test` this
        returns a decorator.
        """
        if test is None:
            def decorator(fn: TestFunction) -> TestFunction:
                self.eval(arg, fn)
                return fn
            return decorator

        if isinstance(arg, str):
            name = arg
            messages = [Message(role="user", content=arg)]
        else:
            if isinstance(arg, Mapping):
                arg = EvalArgs(name=arg["name"], messages=arg["messages"])
            name = arg.name
            messages = [
                m if isinstance(m, Message) else Message.model_validate(m)
                for m in arg.messages
            ]

        if not name:
            raise SuiteConstructionError("Eval name cannot be empty")

        for idx, message in enumerate(messages):
            if message.role == "system":
                raise SuiteConstructionError(
                    f"messages[{idx}] cannot be a system message -- "
                    "the system message is set by the system_prompt option"
                )

        if any(existing.name == name for existing in self._tests):
            raise SuiteConstructionError(f"Duplicate eval name: {name}")

        self._tests.append(TestCase(name=name, messages=tuple(messages), test=test))
        return test

    def build(self) -> TestSuite:
        return TestSuite(
            tools=self._tools,
            system_prompt=self._system_prompt,
            tests=self._tests,
            models=self._models,
        )
