"""
Setup Log View

Collects script output while the apply screen provisions the database.
"""

import threading
from typing import List, Optional

from rich.console import Console

from ..database.script_runner import OutputLine, OutputStream


class LogView:
    """
    Thread-safe buffer of client output lines.

    write() is registered as a ScriptRunner listener and is called from the
    runner's reader threads; the buffer is guarded by a lock.
    """

    def __init__(self, console: Optional[Console] = None, max_lines: int = 5000):
        """
        Initialize the log view.

        Args:
            console: Console to echo lines to (None collects silently)
            max_lines: Oldest lines are dropped beyond this many
        """
        self.console = console
        self.max_lines = max_lines
        self._lines: List[OutputLine] = []
        self._lock = threading.Lock()

    def write(self, line: OutputLine) -> None:
        """Append a line received from the client process."""
        with self._lock:
            self._lines.append(line)
            if len(self._lines) > self.max_lines:
                del self._lines[: len(self._lines) - self.max_lines]

            if self.console is not None:
                style = "red" if line.is_error else None
                self.console.print(line.text, style=style, markup=False, highlight=False)

    def write_message(self, text: str) -> None:
        """Append a status message of our own."""
        self.write(OutputLine(stream=OutputStream.STDOUT, text=text))

    @property
    def lines(self) -> List[str]:
        with self._lock:
            return [line.text for line in self._lines]

    @property
    def error_lines(self) -> List[str]:
        with self._lock:
            return [line.text for line in self._lines if line.is_error]

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()
