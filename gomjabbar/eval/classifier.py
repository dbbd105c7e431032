from enum import StrEnum

from gomjabbar.core.exceptions import UnknownOutcomeError
from .models import EvalResult, FailedToGenerate, TestFailed, TestPassed


class Status(StrEnum):
    """Cell state of one (test case, model) pair. The value is the glyph shown in the table."""
    WAITING = "⏳"
    RUNNING = "🔄"
    SUCCESS = "✅"
    TEST_FAILURE = "❌"
    GENERATION_FAILURE = "👎"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({Status.SUCCESS, Status.TEST_FAILURE, Status.GENERATION_FAILURE})


def classify(result: EvalResult) -> Status:
    """Map an outcome to its terminal status. Unknown variants are a defect and raise."""
    if isinstance(result, TestPassed):
        return Status.SUCCESS
    if isinstance(result, TestFailed):
        return Status.TEST_FAILURE
    if isinstance(result, FailedToGenerate):
        return Status.GENERATION_FAILURE
    # No default branch: a new EvalResult variant must be added above
    raise UnknownOutcomeError(f"Unrecognized eval outcome: {result!r}")


def describe(result: EvalResult) -> str:
    status = classify(result)
    if status is Status.SUCCESS:
        return "Success"
    if status is Status.TEST_FAILURE:
        return f"{result.type}: {result.test_error}"
    return f"{result.type}: {result.completion_error}"
