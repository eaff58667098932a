"""
Input Source - turns raw terminal key presses into a stream of KeyEvents.

Architecture Decision: background poller + asyncio queue
Reading the terminal blocks, the UI loop must not. A daemon thread polls the
terminal (250 ms timeout) and hands accepted events to the asyncio loop
through a bounded queue. The poller never blocks on the queue: if it is full
the event is dropped.

Every key is forwarded as-is. Deciding what "q" means is the Navigator's job.
"""

import asyncio
import logging
import select
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from prompt_toolkit.input import Input
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys

logger = logging.getLogger(__name__)

ENTER = "enter"
BACKSPACE = "backspace"
ESCAPE = "escape"
UP = "up"
DOWN = "down"
CTRL_C = "c-c"

_SPECIAL_KEYS = {
    Keys.ControlM: ENTER,
    Keys.ControlJ: ENTER,
    Keys.ControlH: BACKSPACE,
    Keys.Escape: ESCAPE,
    Keys.Up: UP,
    Keys.Down: DOWN,
    Keys.ControlC: CTRL_C,
}


@dataclass(frozen=True)
class KeyEvent:
    """A logical key: a single printable character or a named key."""

    key: str

    @property
    def char(self) -> Optional[str]:
        return self.key if len(self.key) == 1 else None


def translate(key_press: KeyPress) -> Optional[KeyEvent]:
    """Map a prompt_toolkit KeyPress to a KeyEvent, or None if irrelevant."""
    key = key_press.key
    if isinstance(key, Keys):
        name = _SPECIAL_KEYS.get(key)
        return KeyEvent(name) if name else None
    if len(key) == 1 and key.isprintable():
        return KeyEvent(key)
    return None


class Throttle:
    """Accepts an event only if more than `min_interval_ms` passed since the last accepted one."""

    def __init__(self, min_interval_ms: int, clock: Callable[[], float] = time.monotonic):
        self.min_interval = min_interval_ms / 1000.0
        self.clock = clock
        self._last: Optional[float] = None

    def accept(self) -> bool:
        now = self.clock()
        if self._last is not None and now - self._last <= self.min_interval:
            return False
        self._last = now
        return True


class KeyChannel:
    """
    One-directional, ordered hand-off of KeyEvents to the asyncio loop.

    get() suspends until an event arrives; once the channel is closed and
    drained it returns None.
    """

    def __init__(self, maxsize: int = 64):
        self._queue: "asyncio.Queue[Optional[KeyEvent]]" = asyncio.Queue(maxsize)
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._closed = False
        self.dropped = 0
        # Set while the UI collects a line of text
        self.line_mode = threading.Event()

    def offer(self, event: KeyEvent) -> bool:
        """Enqueue without blocking (loop thread only). Returns False if dropped."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.debug(f"Key queue full, dropped {event.key!r}")
            return False
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            # Wake a pending get()
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            pass

    @property
    def closed(self) -> bool:
        return self._closed

    async def get(self) -> Optional[KeyEvent]:
        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()

    def stop(self) -> None:
        """Stop producing events"""
        self.close()


class InputSource(KeyChannel):
    """
    KeyChannel fed by a background thread reading a prompt_toolkit Input.

    The input must already be in raw mode (see TerminalSession).
    """

    def __init__(self, terminal_input: Input, poll_interval_ms: int = 250,
                 throttle_ms: int = 100, maxsize: int = 64):
        super().__init__(maxsize)
        self.input = terminal_input
        self.poll_interval = poll_interval_ms / 1000.0
        self.throttle = Throttle(throttle_ms)
        self._should_stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the poller. Must be called from inside the running event loop."""
        self._loop = asyncio.get_running_loop()
        self._thread = threading.Thread(target=self._poll, name="timetracker-input", daemon=True)
        self._thread.start()
        logger.debug("Input poller started")

    def stop(self) -> None:
        self._should_stop.set()

    def is_running(self) -> bool:
        return self._thread is not None and not self._should_stop.is_set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _poll(self) -> None:
        try:
            while not self._should_stop.is_set() and not self.input.closed:
                ready, _, _ = select.select([self.input.fileno()], [], [], self.poll_interval)
                # A lone ESC is only reported once the poll times out
                key_presses = self.input.read_keys() if ready else self.input.flush_keys()
                for key_press in key_presses:
                    event = translate(key_press)
                    if event is None:
                        continue
                    if self.line_mode.is_set() or self.throttle.accept():
                        self._send(self.offer, event)
        except OSError as e:
            logger.error(f"Terminal read failed: {e}")
        finally:
            self._send(self.close)
            logger.debug("Input poller stopped")

    def _send(self, callback, *args) -> None:
        try:
            self._loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            # Event loop already closed during shutdown
            logger.debug("Event loop closed, key discarded")
