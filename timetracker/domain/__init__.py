"""Domain layer - Pure business entities and logic"""

from .models import Project, Task, TimeEntry, User, Settings, format_seconds
from .errors import (
    TimeTrackerError,
    NotFoundError,
    StorageError,
    InitializationError,
    TerminalError,
    ParseError,
    ConfigurationError,
)
from .timeutil import to_datetime, to_i64, start_of_day

__all__ = [
    "Project",
    "Task",
    "TimeEntry",
    "User",
    "Settings",
    "format_seconds",
    "TimeTrackerError",
    "NotFoundError",
    "StorageError",
    "InitializationError",
    "TerminalError",
    "ParseError",
    "ConfigurationError",
    "to_datetime",
    "to_i64",
    "start_of_day",
]
