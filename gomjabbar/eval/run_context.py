"""
Shared state of a benchmark run.

The status grid, the rolling log tail and the terminal are each written by
many execution units. All mutation goes through RunContext, which holds one
re-entrant lock across "mutate, then redraw" so two redraws never interleave.
"""
import logging
import threading
from collections import Counter, deque
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from gomjabbar.core.config import MAX_LOGS
from gomjabbar.core.exceptions import StatusTransitionError
from .classifier import Status, TERMINAL_STATUSES
from .renderer import LiveRenderer

_TRANSITIONS = {
    Status.WAITING: frozenset({Status.RUNNING}),
    Status.RUNNING: TERMINAL_STATUSES,
}


class StatusMatrix:
    """Rows are test cases, columns are models. Cells only move forward."""

    def __init__(self, test_names: Sequence[str], model_names: Sequence[str]):
        self.test_names = list(test_names)
        self.model_names = list(model_names)
        self._cells = [[Status.WAITING for _ in self.model_names] for _ in self.test_names]

    def get(self, row: int, col: int) -> Status:
        return self._cells[row][col]

    def set(self, row: int, col: int, status: Status):
        current = self._cells[row][col]
        if status not in _TRANSITIONS.get(current, frozenset()):
            raise StatusTransitionError(
                f"{self.test_names[row]} / {self.model_names[col]}: cannot go from {current.name} to {status.name}"
            )
        self._cells[row][col] = status

    def rows(self) -> Iterator[tuple[str, list[Status]]]:
        for name, statuses in zip(self.test_names, self._cells):
            yield name, list(statuses)

    def column(self, col: int) -> list[Status]:
        return [statuses[col] for statuses in self._cells]

    def counts(self) -> Counter:
        return Counter(status for statuses in self._cells for status in statuses)

    def running_count(self, cols: Sequence[int]) -> int:
        return sum(1 for statuses in self._cells for col in cols if statuses[col] is Status.RUNNING)

    def is_complete(self) -> bool:
        return all(status.is_terminal for statuses in self._cells for status in statuses)


class LiveLogHandler(logging.Handler):
    """Feeds log records into the rolling tail of a RunContext."""

    def __init__(self, context: "RunContext", level: int = logging.INFO):
        super().__init__(level)
        self.context = context
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord):
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        self.context.add_log(message)


class RunContext:
    def __init__(
        self,
        session_id: str,
        log_path: str | Path,
        renderer: LiveRenderer | None = None,
        max_logs: int = MAX_LOGS,
    ):
        self.session_id = session_id
        self.log_path = log_path
        self.renderer = renderer
        self.matrix = StatusMatrix([], [])
        self.logs: deque[str] = deque(maxlen=max_logs)
        self._lock = threading.RLock()

    def initialize(self, test_names: Sequence[str], model_names: Sequence[str]):
        """Reset every (test case, model) cell to WAITING and draw the first frame."""
        with self._lock:
            self.matrix = StatusMatrix(test_names, model_names)
            self.render()

    def set_status(self, row: int, col: int, status: Status):
        with self._lock:
            self.matrix.set(row, col, status)
            self.render()

    def add_log(self, message: str):
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        with self._lock:
            self.logs.append(f"{timestamp}: {message}")
            self.render()

    def render(self):
        with self._lock:
            if self.renderer is not None:
                self.renderer.render(self)

    @contextmanager
    def live_logging(self, level: int = logging.INFO, logger_name: str = "gomjabbar"):
        """
        Route the package's log records into the log tail for the duration of a
        run. Propagation is switched off so stderr handlers don't write over
        the redrawn frame.
        """
        target = logging.getLogger(logger_name)
        handler = LiveLogHandler(self, level)
        previous_level, previous_propagate = target.level, target.propagate

        target.addHandler(handler)
        target.setLevel(level)
        target.propagate = False
        try:
            yield handler
        finally:
            target.removeHandler(handler)
            target.setLevel(previous_level)
            target.propagate = previous_propagate

    @contextmanager
    def cursor_hidden(self):
        if self.renderer is None:
            yield
            return
        self.renderer.hide_cursor()
        try:
            yield
        finally:
            self.renderer.show_cursor()
