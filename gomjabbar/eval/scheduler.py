"""
Runs every (test case, model) pair of a benchmark.

Pairs are partitioned by the model's provider. Each partition is its own
bounded queue (at most `max_concurrency` units running at once) and all
partitions run concurrently, so one slow provider cannot starve another.
"""
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from gomjabbar.core.config import GENERATION_TIMEOUT, MAX_CONCURRENCY
from .classifier import Status, classify, describe
from .models import LogRecord
from .registry import ModelHandle
from .run_context import RunContext
from .run_log import StructuredLogger
from .suite import TestCase, TestSuite

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkItem:
    row: int
    col: int
    test_case: TestCase
    model: ModelHandle


async def _gather_or_cancel(tasks: list[asyncio.Task]):
    """Await all tasks; on the first failure cancel the rest and re-raise."""
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class Scheduler:
    def __init__(
        self,
        suite: TestSuite,
        model_ids: Sequence[str],
        test_cases: Sequence[TestCase],
        context: RunContext,
        run_log: StructuredLogger,
        max_concurrency: int = MAX_CONCURRENCY,
        timeout: float | None = GENERATION_TIMEOUT,
    ):
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")

        self.suite = suite
        # Resolve up front: an unknown model aborts before anything runs.
        # Each model gets one column however often it was named.
        self.models = [suite.find_model(model_id) for model_id in dict.fromkeys(model_ids)]
        self.test_cases = list(test_cases)
        self.context = context
        self.run_log = run_log
        self.max_concurrency = max_concurrency
        self.timeout = timeout
        self.records: list[LogRecord] = []

    def plan(self) -> dict[str, list[WorkItem]]:
        """Enumerate pairs, models outer and test cases inner, grouped by provider."""
        partitions: dict[str, list[WorkItem]] = {}
        for col, model in enumerate(self.models):
            for row, test_case in enumerate(self.test_cases):
                partitions.setdefault(model.provider, []).append(
                    WorkItem(row=row, col=col, test_case=test_case, model=model)
                )
        return partitions

    async def run(self) -> list[LogRecord]:
        partitions = self.plan()
        self.context.initialize(
            [test_case.name for test_case in self.test_cases],
            [model.identifier for model in self.models],
        )

        tasks = [
            asyncio.create_task(self._run_partition(provider, items), name=f"partition:{provider}")
            for provider, items in partitions.items()
        ]
        await _gather_or_cancel(tasks)
        return self.records

    async def _run_partition(self, provider: str, items: list[WorkItem]):
        semaphore = asyncio.Semaphore(self.max_concurrency)
        logger.info(
            f"Starting queue for {provider} with {len(items)} evals "
            f"and max concurrency {self.max_concurrency}"
        )

        async def gated(item: WorkItem):
            async with semaphore:
                await self.run_unit(item)

        # Tasks are created in submission order; the semaphore hands out slots FIFO
        await _gather_or_cancel([asyncio.create_task(gated(item)) for item in items])
        logger.info(f"Finished processing all evals for {provider}")

    async def run_unit(self, item: WorkItem) -> LogRecord:
        """
        One execution unit: WAITING -> RUNNING -> terminal, then one durable record.

        Generation and assertion failures are results. An unknown outcome or a
        failed log write is not, and propagates.
        """
        name = item.test_case.name
        model_name = item.model.identifier

        self.context.set_status(item.row, item.col, Status.RUNNING)
        logger.info(f"{Status.RUNNING} Running {name} with {model_name}")

        result = await self.suite.run_test_case(item.test_case, item.model, timeout=self.timeout)
        status = classify(result)
        self.context.set_status(item.row, item.col, status)

        if status is Status.SUCCESS:
            logger.info(f"{status} {name} with {model_name}: {describe(result)}")
        else:
            logger.warning(f"{status} {name} with {model_name}, {describe(result)}")

        record = LogRecord(
            test_case=name,
            model=model_name,
            messages=list(item.test_case.messages),
            result=result,
        )
        await self.run_log.append(record)
        self.records.append(record)
        return record
