"""
Error taxonomy.

None of these are recovered inside the UI loop: they unwind out of
Navigator.run() and the CLI turns them into an exit status.
"""


class TimeTrackerError(Exception):
    """Base class for every error raised by this package."""


class NotFoundError(TimeTrackerError):
    """No row with the requested id."""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class StorageError(TimeTrackerError):
    """The database rejected a read or write."""


class InitializationError(TimeTrackerError):
    """The database file could not be opened or its schema created."""


class TerminalError(TimeTrackerError, OSError):
    """Reading keys from or writing to the terminal failed."""


class ParseError(TimeTrackerError, ValueError):
    """User input could not be parsed (e.g. duration hours)."""


class ConfigurationError(TimeTrackerError):
    """Settings from YAML or the environment are invalid, or logging cannot start."""
