"""Services layer - Business logic"""

from .stopwatch import StopwatchService

__all__ = ["StopwatchService"]
