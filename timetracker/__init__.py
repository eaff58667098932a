"""Terminal time tracker for projects, tasks and time entries."""

__version__ = "1.0.0"
