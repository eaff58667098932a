"""
Renderer - minimal terminal output primitives.

There is no layout engine: page views compose the whole screen as one block
of text, the renderer clears, writes it and places the cursor.
"""

from abc import ABC, abstractmethod

from prompt_toolkit.output import Output

from timetracker.domain.errors import TerminalError


class Renderer(ABC):
    """Abstract output surface used by the Navigator"""

    @abstractmethod
    def clear(self) -> None:
        """Clear the whole screen"""

    @abstractmethod
    def move_cursor(self, x: int, y: int) -> None:
        """Move the cursor to column x, row y (0-based)"""

    @abstractmethod
    def write(self, text: str) -> None:
        """Write text at the cursor"""

    @abstractmethod
    def flush(self) -> None:
        """Push buffered output to the terminal"""


class TerminalRenderer(Renderer):
    """
    Renderer over a prompt_toolkit Output.

    The terminal is in raw mode, so line feeds are written as CR LF.
    """

    def __init__(self, output: Output):
        self.output = output

    def clear(self) -> None:
        self._guard(self.output.erase_screen)
        self._guard(self.output.cursor_goto, 1, 1)

    def move_cursor(self, x: int, y: int) -> None:
        # VT100 positions are 1-based
        self._guard(self.output.cursor_goto, y + 1, x + 1)

    def write(self, text: str) -> None:
        self._guard(self.output.write, text.replace("\n", "\r\n"))

    def flush(self) -> None:
        self._guard(self.output.flush)

    @staticmethod
    def _guard(operation, *args) -> None:
        try:
            operation(*args)
        except OSError as e:
            raise TerminalError(f"Terminal write failed: {e}") from e
