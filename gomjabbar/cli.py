"""
Command line entry point for eval suites.

    python my_evals.py benchmark [--models NAME ...] [--limit N] [--randomize] [--verbose]
    python my_evals.py inspect --model NAME --eval-id TEST_CASE
"""
import argparse
import asyncio
import logging
import sys
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from gomjabbar.core.config import GENERATION_TIMEOUT, LOG_DIR, MAX_CONCURRENCY, get_log_level
from gomjabbar.core.exceptions import ConfigurationError
from gomjabbar.core.logging import setup_logging
from gomjabbar.eval.classifier import Status, classify
from gomjabbar.eval.models import EvalResult, LogRecord
from gomjabbar.eval.renderer import LiveRenderer
from gomjabbar.eval.run_context import RunContext
from gomjabbar.eval.run_log import StructuredLogger, new_session_id
from gomjabbar.eval.scheduler import Scheduler
from gomjabbar.eval.suite import TestSuite

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    session_id: str
    log_path: Path
    records: list[LogRecord] = field(default_factory=list)

    def counts_by_model(self) -> dict[str, Counter]:
        counts: dict[str, Counter] = {}
        for record in self.records:
            counts.setdefault(record.model, Counter())[classify(record.result)] += 1
        return counts

    @property
    def passed(self) -> int:
        return sum(1 for record in self.records if classify(record.result) is Status.SUCCESS)

    @property
    def failed(self) -> int:
        return len(self.records) - self.passed


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {number}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def build_parser(suite: TestSuite) -> argparse.ArgumentParser:
    all_models = suite.models.list_identifiers()

    parser = argparse.ArgumentParser(description="Run tool-calling evals against a set of models.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    benchmark = subparsers.add_parser(
        "benchmark", help="Run eval suite, comparing outputs between different models"
    )
    benchmark.add_argument(
        "--models", nargs="+", choices=all_models, default=all_models, metavar="MODEL",
        help="Model or models to use for benchmarking, if not specified, all models will be used.",
    )
    benchmark.add_argument(
        "--limit", type=_non_negative_int, default=0,
        help="Limit the number of evals to run, if not specified or 0, all evals will be run.",
    )
    benchmark.add_argument("--verbose", action="store_true", help="Show verbose output.")
    benchmark.add_argument("--randomize", action="store_true", help="Randomize the order of the evals.")
    benchmark.add_argument("--seed", type=int, default=None, help="Seed for --randomize.")
    benchmark.add_argument(
        "--concurrency", type=_positive_int, default=MAX_CONCURRENCY,
        help="Maximum evals running at once per provider.",
    )
    benchmark.add_argument(
        "--timeout", type=_positive_float, default=GENERATION_TIMEOUT,
        help="Seconds before a generation counts as failed (default: no timeout).",
    )
    benchmark.add_argument("--log-dir", default=LOG_DIR, help="Directory for session logs.")

    inspect = subparsers.add_parser(
        "inspect", help="Run individual eval and dump the input/output to the console"
    )
    inspect.add_argument(
        "--model", choices=all_models, default=all_models[0] if all_models else None,
        required=not all_models,
    )
    inspect.add_argument("--eval-id", dest="eval_id", choices=suite.test_names(), required=True)

    return parser


async def run_benchmark(
    suite: TestSuite,
    models: Sequence[str] | None = None,
    limit: int = 0,
    randomize: bool = False,
    seed: int | None = None,
    verbose: bool = False,
    max_concurrency: int = MAX_CONCURRENCY,
    timeout: float | None = GENERATION_TIMEOUT,
    log_dir: str | Path = LOG_DIR,
    console: Console | None = None,
) -> RunSummary:
    model_ids = sorted(set(models or suite.models.list_identifiers()))
    for model_id in model_ids:
        suite.find_model(model_id)
    test_cases = suite.select_evals(limit=limit, randomize=randomize, seed=seed)

    session_id = new_session_id()
    renderer = LiveRenderer(console)

    async with StructuredLogger.open(session_id, log_dir) as run_log:
        context = RunContext(session_id, run_log.path, renderer)
        scheduler = Scheduler(
            suite,
            model_ids,
            test_cases,
            context,
            run_log,
            max_concurrency=max_concurrency,
            timeout=timeout,
        )
        summary = RunSummary(session_id=session_id, log_path=run_log.path)

        with context.cursor_hidden(), context.live_logging(logging.DEBUG if verbose else logging.INFO):
            summary.records = await scheduler.run()
            for model_id, counts in sorted(summary.counts_by_model().items()):
                logger.info(
                    f"{model_id}: {counts[Status.SUCCESS]} passed, "
                    f"{counts[Status.TEST_FAILURE]} test failures, "
                    f"{counts[Status.GENERATION_FAILURE]} generation failures"
                )

    return summary


async def run_inspect(
    suite: TestSuite,
    model: str,
    eval_id: str,
    console: Console | None = None,
) -> EvalResult:
    console = console or Console()
    handle = suite.find_model(model)
    test_case = suite.find_eval(eval_id)

    console.print(f"Running {test_case.name} with {model}", markup=False, highlight=False)
    result = await suite.run_test_case(test_case, handle)
    console.print_json(result.model_dump_json(by_alias=True))
    return result


def cli(suite: TestSuite, argv: Sequence[str] | None = None) -> int:
    """Parse arguments and run a command. Returns the process exit code."""
    args = build_parser(suite).parse_args(argv)
    setup_logging(get_log_level(), json_output=not sys.stderr.isatty())

    try:
        if args.command == "benchmark":
            summary = asyncio.run(
                run_benchmark(
                    suite,
                    models=args.models,
                    limit=args.limit,
                    randomize=args.randomize,
                    seed=args.seed,
                    verbose=args.verbose,
                    max_concurrency=args.concurrency,
                    timeout=args.timeout,
                    log_dir=args.log_dir,
                )
            )
            logger.info(f"Session {summary.session_id}: {summary.passed} passed, {summary.failed} failed")
            return 0 if summary.failed == 0 else 1

        result = asyncio.run(run_inspect(suite, args.model, args.eval_id))
        return 0 if classify(result) is Status.SUCCESS else 1

    except ConfigurationError as e:
        logger.error(str(e))
        return 2
