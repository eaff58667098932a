"""
Pytest configuration and fixtures.
"""

import sys
from pathlib import Path
from typing import List, Tuple

import pytest
import pytest_asyncio

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from timetracker.infra.repository import Store
from timetracker.ui.input_source import KeyChannel, KeyEvent
from timetracker.ui.navigator import Navigator
from timetracker.ui.renderer import Renderer


class RecordingRenderer(Renderer):
    """Renderer that keeps what would have been drawn"""

    def __init__(self):
        self.frames: List[str] = []
        self.cursor: Tuple[int, int] = (0, 0)
        self.flushes = 0
        self._buffer: List[str] = []

    def clear(self) -> None:
        self._buffer = []

    def move_cursor(self, x: int, y: int) -> None:
        self.cursor = (x, y)

    def write(self, text: str) -> None:
        self._buffer.append(text)

    def flush(self) -> None:
        self.flushes += 1
        self.frames.append("".join(self._buffer))

    @property
    def last(self) -> str:
        return self.frames[-1] if self.frames else ""


@pytest_asyncio.fixture
async def store(tmp_path):
    """A file-backed SQLite store in a temporary directory"""
    store = await Store.open(tmp_path / "test.sqlite")
    yield store
    await store.close()


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest_asyncio.fixture
async def channel():
    """A KeyChannel fed by the test instead of a terminal"""
    return KeyChannel(maxsize=256)


@pytest_asyncio.fixture
async def navigator(store, renderer, channel):
    """Navigator with data already loaded"""
    nav = Navigator(store, renderer, channel)
    await nav.load_data()
    return nav


def feed(channel: KeyChannel, keys) -> None:
    """Queue keys; a plain string is split into single characters."""
    if isinstance(keys, str):
        keys = list(keys)
    for key in keys:
        assert channel.offer(KeyEvent(key))


async def press(navigator: Navigator, *keys: str) -> None:
    """Dispatch keys straight to the navigator, rendering after each like run() does"""
    for key in keys:
        await navigator.handle_key(KeyEvent(key))
        navigator.render()


async def type_line(navigator: Navigator, text: str) -> None:
    """Type text into the open prompt and press enter"""
    await press(navigator, *text, "enter")
