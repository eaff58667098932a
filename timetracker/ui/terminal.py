"""
Terminal session - owns raw mode and the alternate screen for the UI's lifetime.
"""

import logging
from contextlib import ExitStack
from typing import Optional

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.output import Output, create_output

from timetracker.domain.errors import TerminalError
from timetracker.infra.config import AppSettings
from timetracker.ui.input_source import InputSource
from timetracker.ui.renderer import TerminalRenderer

logger = logging.getLogger(__name__)


class TerminalSession:
    """
    Context manager wiring prompt_toolkit's Input/Output to our UI pieces.

    On enter: alternate screen + raw mode. On exit: both restored, even when
    the UI loop raised.
    """

    def __init__(self, settings: AppSettings,
                 terminal_input: Optional[Input] = None,
                 terminal_output: Optional[Output] = None):
        self.settings = settings
        self._input = terminal_input
        self._output = terminal_output
        self._stack = ExitStack()
        self.renderer: Optional[TerminalRenderer] = None
        self.input_source: Optional[InputSource] = None

    def __enter__(self) -> 'TerminalSession':
        try:
            if self._input is None:
                self._input = create_input()
            if self._output is None:
                self._output = create_output()

            self._output.enter_alternate_screen()
            self._stack.callback(self._restore_screen)
            self._stack.enter_context(self._input.raw_mode())
        except OSError as e:
            self._stack.close()
            raise TerminalError(f"Cannot set up terminal: {e}") from e

        self.renderer = TerminalRenderer(self._output)
        self.input_source = InputSource(
            self._input,
            poll_interval_ms=self.settings.poll_interval_ms,
            throttle_ms=self.settings.throttle_ms,
            maxsize=self.settings.queue_size,
        )
        logger.debug("Terminal session opened")
        return self

    def __exit__(self, *exc_info) -> None:
        if self.input_source is not None:
            self.input_source.stop()
            self.input_source.join(timeout=1.0)
        self._stack.close()
        logger.debug("Terminal session closed")

    def _restore_screen(self) -> None:
        self._output.quit_alternate_screen()
        self._output.flush()
