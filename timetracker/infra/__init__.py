"""Infrastructure layer - Database, persistence and configuration"""

from .db import DatabaseEngine, sqlite_url
from .models import ProjectModel, TaskModel, TimeEntryModel, SettingsModel
from .repository import (
    ProjectRepository,
    TaskRepository,
    TimeEntryRepository,
    SettingsRepository,
    Store,
)

__all__ = [
    "DatabaseEngine",
    "sqlite_url",
    "ProjectModel",
    "TaskModel",
    "TimeEntryModel",
    "SettingsModel",
    "ProjectRepository",
    "TaskRepository",
    "TimeEntryRepository",
    "SettingsRepository",
    "Store",
]
