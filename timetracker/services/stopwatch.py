"""
Stopwatch Service - live timing for a single time entry.

Only one stopwatch runs at a time: starting a new one stops the previous and
hands its result back so the caller can persist it. The service never touches
the store itself.
"""

import logging
from typing import Callable, Optional

from timetracker.domain.models import TimeEntry
from timetracker.domain.timeutil import now_epoch

logger = logging.getLogger(__name__)


class StopwatchService:
    """
    The time tracking engine. Manages state but knows nothing about the UI.
    """

    def __init__(self, clock: Callable[[], int] = now_epoch):
        self.clock = clock
        self.active_entry: Optional[TimeEntry] = None
        self.session_start_time: Optional[int] = None

    def start(self, entry: TimeEntry) -> Optional[TimeEntry]:
        """
        Start timing `entry`.

        Returns the finished previous entry if another stopwatch was running.
        """
        previous = self.stop() if self.active_entry else None

        self.active_entry = entry
        self.session_start_time = self.clock()
        logger.debug(f"Stopwatch started for entry {entry.id}")
        return previous

    def stop(self) -> Optional[TimeEntry]:
        """
        Stop the running stopwatch.

        Returns a copy of the entry spanning the timed session, or None if idle.
        """
        if self.active_entry is None or self.session_start_time is None:
            return None

        end = self.clock()
        finished = self.active_entry.model_copy(update={
            "start_time": self.session_start_time,
            "end_time": end,
            "duration_seconds": end - self.session_start_time,
        })
        logger.debug(f"Stopwatch stopped for entry {finished.id} after {finished.duration_seconds}s")

        self.active_entry = None
        self.session_start_time = None
        return finished

    def elapsed(self) -> int:
        if self.session_start_time is None:
            return 0
        return self.clock() - self.session_start_time

    def is_running(self) -> bool:
        return self.active_entry is not None

    def is_timing(self, entry: Optional[TimeEntry]) -> bool:
        """True if the running stopwatch belongs to `entry` (same object or same id)"""
        if entry is None or self.active_entry is None:
            return False
        if entry.id is None:
            return self.active_entry is entry
        return self.active_entry.id == entry.id
