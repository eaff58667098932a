"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
The same types are validated when built from user input (prompts) and when
loaded from ORM rows (from_attributes), so the rest of the program only ever
sees well-formed entities.

All timestamps are integer epoch seconds (UTC). Conversion to calendar values
lives in timeutil.
"""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from .timeutil import now_epoch


DEFAULT_DATABASE_PATH = "timetracker.sqlite"


def format_seconds(total: int) -> str:
    """Format a number of seconds as HH:MM:SS.

    Division truncates toward zero, so negative totals come out with
    negative components (e.g. -61 -> "00:-1:-1"). Callers that care must
    validate before formatting.
    """
    sign = -1 if total < 0 else 1
    hours, remainder = divmod(abs(total), 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{sign * hours:02d}:{sign * minutes:02d}:{sign * seconds:02d}"


class Project(BaseModel):
    """
    A client or area of work that groups tasks.

    Examples: "Website relaunch", "Internal"
    """
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    description: str = ""


class Task(BaseModel):
    """A unit of work inside a project."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    project_id: int
    name: str = Field(..., min_length=1)
    description: str = ""


class TimeEntry(BaseModel):
    """
    Represents a single tracked span of time.

    `duration_seconds` is stored alongside start/end but is only a cache:
    everything that displays time uses duration(), which is always end - start.
    """
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    project_id: int = 0
    task_id: int = 0
    description: str = "Time Entry"
    start_time: int = 0
    end_time: int = 0
    duration_seconds: int = 0  # Cached, may be stale
    created_at: int = Field(default_factory=now_epoch)

    def duration(self) -> int:
        """Seconds between start and end. Negative values are not rejected."""
        return self.end_time - self.start_time

    def duration_string(self) -> str:
        return format_seconds(self.duration())


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str = "John Doe"
    email: str = "johndoe@example.com"


class Settings(BaseModel):
    """
    Persisted user settings.

    The store keeps every saved version; the newest row wins.
    """
    model_config = ConfigDict(from_attributes=True)

    database_path: str = DEFAULT_DATABASE_PATH
    user: User = Field(default_factory=User)
