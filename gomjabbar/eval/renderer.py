"""Live terminal view of a benchmark run, drawn with rich."""
from rich.console import Console
from rich.table import Table

LOGS_HEADER = "Recent Logs:"


class LiveRenderer:
    """
    Full clear-and-reprint view of a run.

    Frame layout, top to bottom: session id, log file, rule, status table,
    rule, logs header, then as many of the newest log lines as fit.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def hide_cursor(self):
        self.console.show_cursor(False)

    def show_cursor(self):
        self.console.show_cursor(True)

    @staticmethod
    def build_table(matrix) -> Table:
        table = Table("Test Case", *matrix.model_names)
        for name, statuses in matrix.rows():
            table.add_row(name, *[status.value for status in statuses])
        return table

    def render(self, context):
        console = self.console
        height = console.size.height
        table = self.build_table(context.matrix)
        table_lines = len(console.render_lines(table, console.options, new_lines=False))

        # session (2) + blank and rule (2) + table + blank and rule (2) + header (1)
        printed = 2 + 2 + table_lines + 2 + 1
        remaining = height - printed
        # Multi-line entries print one row per line
        lines = [line for entry in context.logs for line in (entry.splitlines() or [""])]
        tail = lines[-remaining:] if remaining > 0 else []

        with console:
            console.clear()
            self._line(f"Session: {context.session_id}")
            self._line(f"Log file: {context.log_path}")
            console.line()
            console.rule(style="dim")
            console.print(table)
            console.line()
            console.rule(style="dim")
            self._line(LOGS_HEADER)
            for message in tail:
                self._line(message)

    def _line(self, text: str):
        self.console.print(text, markup=False, highlight=False, no_wrap=True, overflow="crop", crop=True)
