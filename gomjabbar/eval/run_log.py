"""
Session-scoped JSONL log of finished execution units.

The file is opened once per run in append mode and never truncated. Each
record is written as a single line under a lock and flushed to disk before
the writer returns.
"""
import asyncio
import logging
import os
import uuid
from pathlib import Path

from gomjabbar.core.config import LOG_DIR
from .models import LogRecord

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return str(uuid.uuid4())


class StructuredLogger:
    def __init__(self, session_id: str, path: Path, file):
        self.session_id = session_id
        self.path = path
        self._file = file
        self._lock = asyncio.Lock()

    @classmethod
    def open(cls, session_id: str, log_dir: str | Path = LOG_DIR) -> "StructuredLogger":
        """Create `<log_dir>/<session_id>.jsonl`. OSErrors propagate: a run that cannot be recorded must not start."""
        path = Path(log_dir) / f"{session_id}.jsonl"
        path.parent.mkdir(parents=True, exist_ok=True)
        file = open(path, "a", encoding="utf-8")
        logger.debug(f"Opened session log {path}")
        return cls(session_id, path, file)

    @property
    def closed(self) -> bool:
        return self._file.closed

    def _write(self, line: str):
        self._file.write(line)
        self._file.flush()
        os.fsync(self._file.fileno())

    async def append(self, record: LogRecord):
        line = record.to_json_line()
        async with self._lock:
            await asyncio.to_thread(self._write, line)

    def close(self):
        if not self._file.closed:
            self._file.close()

    async def __aenter__(self) -> "StructuredLogger":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()
        return False


def read_log(path: str | Path) -> list[LogRecord]:
    """Load every record of a finished session log."""
    with open(path, "r", encoding="utf-8") as f:
        return [LogRecord.model_validate_json(line) for line in f if line.strip()]
