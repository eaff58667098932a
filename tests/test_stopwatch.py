"""
Tests for the Stopwatch Service.
"""

from timetracker.domain.models import TimeEntry
from timetracker.services.stopwatch import StopwatchService


class FakeClock:
    def __init__(self, now: int = 1000):
        self.now = now

    def __call__(self) -> int:
        return self.now


def test_stop_when_idle_returns_none():
    stopwatch = StopwatchService(clock=FakeClock())
    assert stopwatch.stop() is None
    assert not stopwatch.is_running()
    assert stopwatch.elapsed() == 0


def test_start_and_stop_records_session():
    clock = FakeClock(1000)
    stopwatch = StopwatchService(clock=clock)
    entry = TimeEntry(id=7, description="Coding", start_time=0, end_time=0)

    assert stopwatch.start(entry) is None
    assert stopwatch.is_running()
    clock.now = 1090
    assert stopwatch.elapsed() == 90

    finished = stopwatch.stop()
    assert finished.id == 7
    assert finished.description == "Coding"
    assert (finished.start_time, finished.end_time, finished.duration_seconds) == (1000, 1090, 90)
    assert finished.duration() == 90
    assert not stopwatch.is_running()
    # The started entry is not mutated
    assert entry.end_time == 0


def test_starting_another_entry_stops_the_first():
    """Only one stopwatch runs at a time"""
    clock = FakeClock(0)
    stopwatch = StopwatchService(clock=clock)
    first = TimeEntry(id=1)
    second = TimeEntry(id=2)

    stopwatch.start(first)
    clock.now = 30
    previous = stopwatch.start(second)

    assert previous.id == 1
    assert previous.duration_seconds == 30
    assert stopwatch.active_entry is second
    assert stopwatch.session_start_time == 30


def test_is_timing_matches_by_id_or_identity():
    stopwatch = StopwatchService(clock=FakeClock())
    saved = TimeEntry(id=3)
    draft = TimeEntry()

    stopwatch.start(saved)
    assert stopwatch.is_timing(TimeEntry(id=3, description="renamed"))
    assert not stopwatch.is_timing(TimeEntry(id=4))
    assert not stopwatch.is_timing(None)

    stopwatch.start(draft)
    assert stopwatch.is_timing(draft)
    assert not stopwatch.is_timing(TimeEntry())
