"""
End-to-end behaviour of the scheduler: every scheduled pair reaches exactly
one terminal status and exactly one durable record, within the per-provider
concurrency bound.
"""
import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from conftest import FakeCapability
from gomjabbar.core.exceptions import NotFoundError, UnknownOutcomeError
from gomjabbar.eval.assertions import expect_single_tool_call
from gomjabbar.eval.classifier import Status
from gomjabbar.eval.models import Completion
from gomjabbar.eval.registry import ModelHandle
from gomjabbar.eval.run_context import RunContext
from gomjabbar.eval.run_log import StructuredLogger, read_log
from gomjabbar.eval.scheduler import Scheduler


def _scheduler(suite, tmp_path, model_ids=None, max_concurrency=3, test_cases=None):
    run_log = StructuredLogger.open("session", tmp_path)
    context = RunContext("session", run_log.path)
    scheduler = Scheduler(
        suite,
        model_ids or suite.models.list_identifiers(),
        suite.tests if test_cases is None else test_cases,
        context,
        run_log,
        max_concurrency=max_concurrency,
    )
    return scheduler, context, run_log


def _expects_add(result):
    args = expect_single_tool_call(result, "add")
    assert args == {"lhs": 2, "rhs": 4}


@pytest.mark.asyncio
async def test_single_passing_pair(builder, make_handle, add_completion, tmp_path):
    builder.add_model("gpt4o", make_handle("gpt4o", completion=add_completion))
    builder.eval("What is 2 + 4?", _expects_add)
    scheduler, context, run_log = _scheduler(builder.build(), tmp_path)

    await scheduler.run()
    run_log.close()

    assert context.matrix.get(0, 0) is Status.SUCCESS
    records = read_log(run_log.path)
    assert len(records) == 1
    assert records[0].result.type == "test-passed"
    assert records[0].test_case == "What is 2 + 4?"


@pytest.mark.asyncio
async def test_generation_failure_pair(builder, make_handle, tmp_path):
    builder.add_model("flaky", make_handle("flaky", error=ConnectionError("backend unavailable")))
    builder.eval("What is 2 + 4?", _expects_add)
    scheduler, context, run_log = _scheduler(builder.build(), tmp_path)

    await scheduler.run()
    run_log.close()

    assert context.matrix.get(0, 0) is Status.GENERATION_FAILURE
    (record,) = read_log(run_log.path)
    assert record.result.completion is None
    assert "backend unavailable" in record.result.completion_error


@pytest.mark.asyncio
async def test_assertion_failure_pair(builder, make_handle, tmp_path):
    builder.add_model("chatty", make_handle("chatty", completion=Completion(text="It's 6")))
    builder.eval("What is 2 + 4?", _expects_add)
    scheduler, context, run_log = _scheduler(builder.build(), tmp_path)

    await scheduler.run()
    run_log.close()

    assert context.matrix.get(0, 0) is Status.TEST_FAILURE
    (record,) = read_log(run_log.path)
    assert record.result.completion.text == "It's 6"
    assert record.result.test_error


@pytest.mark.asyncio
async def test_every_pair_is_terminal_and_logged_once(builder, make_handle, add_completion, tmp_path):
    builder.add_model("good", make_handle("good", provider="openai", completion=add_completion))
    builder.add_model("bad", make_handle("bad", provider="openai", completion=Completion(text="no")))
    builder.add_model("down", make_handle("down", provider="bedrock", error=TimeoutError()))
    for i in range(7):
        builder.eval(f"case-{i}", _expects_add)
    scheduler, context, run_log = _scheduler(builder.build(), tmp_path)

    await scheduler.run()
    run_log.close()

    assert context.matrix.is_complete()
    assert context.matrix.column(0) == [Status.TEST_FAILURE] * 7  # "bad" sorts first
    assert context.matrix.column(1) == [Status.GENERATION_FAILURE] * 7
    assert context.matrix.column(2) == [Status.SUCCESS] * 7

    records = read_log(run_log.path)
    pairs = {(r.test_case, r.model) for r in records}
    assert len(records) == 21
    assert pairs == {(f"case-{i}", m) for i in range(7) for m in ("good", "bad", "down")}
    for record in records:
        assert (record.result.completion is not None) == (record.result.type != "failed-to-generate")


@pytest.mark.asyncio
async def test_repeated_model_id_runs_each_pair_once(builder, make_handle, add_completion, tmp_path):
    builder.add_model("m", make_handle("m", completion=add_completion))
    builder.eval("case", _expects_add)
    scheduler, context, run_log = _scheduler(builder.build(), tmp_path, model_ids=["m", "m"])

    await scheduler.run()
    run_log.close()

    assert context.matrix.model_names == ["m"]
    assert [(r.test_case, r.model) for r in read_log(run_log.path)] == [("case", "m")]


@pytest.mark.asyncio
async def test_concurrency_bound_per_provider(builder, tracker, tmp_path):
    for name, provider in [("a1", "alpha"), ("a2", "alpha"), ("b1", "beta")]:
        builder.add_model(name, ModelHandle(name, provider, tracker.capability(provider)))
    for i in range(8):
        builder.eval(f"case-{i}", lambda result: None)
    scheduler, context, run_log = _scheduler(builder.build(), tmp_path, max_concurrency=2)

    original_set_status = context.set_status
    observed = []

    def checked_set_status(row, col, status):
        original_set_status(row, col, status)
        observed.append((context.matrix.running_count([0, 1]), context.matrix.running_count([2])))

    context.set_status = checked_set_status
    await scheduler.run()
    run_log.close()

    assert tracker.peak == {"alpha": 2, "beta": 2}
    assert all(alpha <= 2 and beta <= 2 for alpha, beta in observed)
    assert context.matrix.is_complete()


@pytest.mark.asyncio
async def test_providers_do_not_block_each_other(builder, tmp_path):
    beta_started = asyncio.Event()

    class WaitsForBeta:
        async def generate(self, request):
            await asyncio.wait_for(beta_started.wait(), timeout=2)
            return Completion(text="alpha")

    class SignalsBeta:
        async def generate(self, request):
            beta_started.set()
            return Completion(text="beta")

    builder.add_model("a", ModelHandle("a", "alpha", WaitsForBeta()))
    builder.add_model("b", ModelHandle("b", "beta", SignalsBeta()))
    builder.eval("only", lambda result: None)
    scheduler, context, run_log = _scheduler(builder.build(), tmp_path, max_concurrency=1)

    records = await scheduler.run()
    run_log.close()

    assert sorted(r.result.type for r in records) == ["test-passed", "test-passed"]


@pytest.mark.asyncio
async def test_slots_offered_in_submission_order(builder, tracker, tmp_path):
    builder.add_model("m1", ModelHandle("m1", "p", tracker.capability("p")))
    builder.add_model("m2", ModelHandle("m2", "p", tracker.capability("p")))
    for i in range(3):
        builder.eval(f"case-{i}", lambda result: None)
    scheduler, _, run_log = _scheduler(builder.build(), tmp_path, max_concurrency=1)

    partitions = scheduler.plan()
    await scheduler.run()
    run_log.close()

    expected = [(item.model.identifier, item.test_case.name) for item in partitions["p"]]
    assert expected == [("m1", "case-0"), ("m1", "case-1"), ("m1", "case-2"),
                        ("m2", "case-0"), ("m2", "case-1"), ("m2", "case-2")]
    assert [content for _, content in tracker.order] == [name for _, name in expected]


def test_unknown_model_aborts_before_running(builder, make_handle, tmp_path):
    capability = FakeCapability()
    builder.add_model("known", make_handle("known", capability=capability))
    builder.eval("case", lambda result: None)

    with pytest.raises(NotFoundError):
        _scheduler(builder.build(), tmp_path, model_ids=["known", "unknown"])
    assert capability.requests == []


@pytest.mark.asyncio
async def test_log_write_failure_stops_the_run(builder, make_handle, tmp_path):
    builder.add_model("m", make_handle("m", delay=0.01))
    for i in range(5):
        builder.eval(f"case-{i}", lambda result: None)
    scheduler, _, run_log = _scheduler(builder.build(), tmp_path, max_concurrency=1)
    scheduler.run_log = AsyncMock(spec=StructuredLogger)
    scheduler.run_log.append.side_effect = OSError("disk full")

    with pytest.raises(OSError, match="disk full"):
        await scheduler.run()
    run_log.close()

    assert scheduler.run_log.append.await_count == 1


@pytest.mark.asyncio
async def test_unrecognized_outcome_is_fatal(builder, make_handle, tmp_path):
    builder.add_model("m", make_handle("m"))
    builder.eval("case", lambda result: None)
    suite = builder.build()
    scheduler, _, run_log = _scheduler(suite, tmp_path)

    with patch.object(type(suite), "run_test_case", AsyncMock(return_value=object())):
        with pytest.raises(UnknownOutcomeError):
            await scheduler.run()
    run_log.close()

    assert read_log(run_log.path) == []
