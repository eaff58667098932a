"""UI layer - terminal input, rendering and page navigation"""

from .input_source import InputSource, KeyChannel, KeyEvent
from .navigator import Navigator, Page, PromptSequence
from .renderer import Renderer, TerminalRenderer
from .terminal import TerminalSession

__all__ = [
    "InputSource",
    "KeyChannel",
    "KeyEvent",
    "Navigator",
    "Page",
    "PromptSequence",
    "Renderer",
    "TerminalRenderer",
    "TerminalSession",
]
