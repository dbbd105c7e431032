import asyncio
import json

import pytest

from gomjabbar.eval.models import Completion, FailedToGenerate, LogRecord, Message, TestPassed
from gomjabbar.eval.run_log import StructuredLogger, new_session_id, read_log


def _record(i: int) -> LogRecord:
    return LogRecord(
        test_case=f"case-{i}",
        model="gpt4o",
        messages=[Message(role="user", content="x" * 5000)],
        result=TestPassed(completion=Completion(text=f"answer {i}")),
    )


def test_open_creates_session_file_in_nested_dir(tmp_path):
    session_id = new_session_id()
    run_log = StructuredLogger.open(session_id, tmp_path / "a" / "b")

    assert run_log.path == tmp_path / "a" / "b" / f"{session_id}.jsonl"
    assert run_log.path.exists()
    run_log.close()
    assert run_log.closed


@pytest.mark.asyncio
async def test_concurrent_appends_are_line_atomic(tmp_path):
    async with StructuredLogger.open("s", tmp_path) as run_log:
        await asyncio.gather(*(run_log.append(_record(i)) for i in range(40)))

    lines = run_log.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 40
    assert sorted(json.loads(line)["testCase"] for line in lines) == sorted(f"case-{i}" for i in range(40))


@pytest.mark.asyncio
async def test_record_uses_camel_case_fields(tmp_path):
    record = LogRecord(
        test_case="t",
        model="m",
        messages=[Message(role="user", content="hi")],
        result=FailedToGenerate(completion_error="Error generating completion: boom"),
    )
    async with StructuredLogger.open("s", tmp_path) as run_log:
        await run_log.append(record)

    line = json.loads(run_log.path.read_text(encoding="utf-8"))
    assert set(line) == {"testCase", "model", "messages", "result"}
    assert line["result"] == {
        "type": "failed-to-generate",
        "completion": None,
        "completionError": "Error generating completion: boom",
        "testError": None,
    }
    assert read_log(run_log.path) == [record]


def test_open_fails_when_directory_cannot_be_created(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    with pytest.raises(OSError):
        StructuredLogger.open("s", blocker)
