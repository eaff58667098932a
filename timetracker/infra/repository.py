"""
Repository Pattern Implementation.

Architecture Decision: Why Repository Pattern?
Separates data access logic from the UI state machine. Makes it easy to:
- Keep SQL out of the Navigator
- Swap the file for an in-test database
- Translate driver errors into the package's own error types in one place

Every repository converts between domain models (Pydantic) and ORM models
(SQLAlchemy), opens one session per operation and commits before returning.
Driver failures surface as StorageError, missing ids as NotFoundError.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List, Union

from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timetracker.domain.errors import NotFoundError, StorageError, InitializationError
from timetracker.domain.models import Project, Task, TimeEntry, Settings, User
from timetracker.domain.timeutil import SECONDS_PER_DAY
from timetracker.infra.db import DatabaseEngine
from timetracker.infra.models import ProjectModel, TaskModel, TimeEntryModel, SettingsModel

logger = logging.getLogger(__name__)


class BaseRepository:
    """Shared session handling for all repositories."""

    entity_name = "Entity"

    def __init__(self, engine: DatabaseEngine):
        self.engine = engine

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, translating driver failures into StorageError"""
        try:
            async with self.engine.get_session() as session:
                yield session
        # sqlite3 raises OverflowError for ints wider than 64 bits
        except (SQLAlchemyError, OverflowError) as e:
            logger.error(f"{self.entity_name} storage failure: {e}")
            raise StorageError(f"{self.entity_name}: {e}") from e


class ProjectRepository(BaseRepository):
    """
    Handles all Project-related database operations.
    """

    entity_name = "Project"

    async def create(self, project: Project) -> Project:
        """Insert a project and return it with its assigned id"""
        async with self._session() as session:
            model = ProjectModel(name=project.name, description=project.description)
            session.add(model)
            await session.commit()
            await session.refresh(model)
            logger.debug(f"Created project {model.id}")
            return Project.model_validate(model)

    async def get_by_id(self, project_id: int) -> Project:
        async with self._session() as session:
            model = await session.get(ProjectModel, project_id)
            if model is None:
                raise NotFoundError(self.entity_name, project_id)
            return Project.model_validate(model)

    async def get_all(self) -> List[Project]:
        """All projects in storage order"""
        async with self._session() as session:
            result = await session.execute(select(ProjectModel).order_by(ProjectModel.id))
            return [Project.model_validate(m) for m in result.scalars().all()]

    async def update(self, project: Project) -> None:
        """Replace every column of an existing project"""
        async with self._session() as session:
            result = await session.execute(
                update(ProjectModel)
                .where(ProjectModel.id == project.id)
                .values(name=project.name, description=project.description)
            )
            if result.rowcount == 0:
                raise NotFoundError(self.entity_name, project.id)
            await session.commit()

    async def delete(self, project_id: int) -> None:
        """Delete a project. Missing ids are ignored; tasks are left alone."""
        async with self._session() as session:
            await session.execute(delete(ProjectModel).where(ProjectModel.id == project_id))
            await session.commit()
            logger.debug(f"Deleted project {project_id}")


class TaskRepository(BaseRepository):
    """
    Handles all Task-related database operations.
    """

    entity_name = "Task"

    async def create(self, task: Task) -> Task:
        """Insert a task and return it with its assigned id"""
        async with self._session() as session:
            model = TaskModel(
                project_id=task.project_id,
                name=task.name,
                description=task.description
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            logger.debug(f"Created task {model.id} in project {model.project_id}")
            return Task.model_validate(model)

    async def get_by_id(self, task_id: int) -> Task:
        async with self._session() as session:
            model = await session.get(TaskModel, task_id)
            if model is None:
                raise NotFoundError(self.entity_name, task_id)
            return Task.model_validate(model)

    async def get_all(self) -> List[Task]:
        async with self._session() as session:
            result = await session.execute(select(TaskModel).order_by(TaskModel.id))
            return [Task.model_validate(m) for m in result.scalars().all()]

    async def get_by_project(self, project_id: int) -> List[Task]:
        """Tasks belonging to one project, in storage order"""
        async with self._session() as session:
            result = await session.execute(
                select(TaskModel)
                .where(TaskModel.project_id == project_id)
                .order_by(TaskModel.id)
            )
            return [Task.model_validate(m) for m in result.scalars().all()]

    async def update(self, task: Task) -> None:
        async with self._session() as session:
            result = await session.execute(
                update(TaskModel)
                .where(TaskModel.id == task.id)
                .values(
                    project_id=task.project_id,
                    name=task.name,
                    description=task.description
                )
            )
            if result.rowcount == 0:
                raise NotFoundError(self.entity_name, task.id)
            await session.commit()

    async def delete(self, task_id: int) -> None:
        """Delete a task. Missing ids are ignored; time entries are left alone."""
        async with self._session() as session:
            await session.execute(delete(TaskModel).where(TaskModel.id == task_id))
            await session.commit()
            logger.debug(f"Deleted task {task_id}")


class TimeEntryRepository(BaseRepository):
    """
    Handles all TimeEntry-related database operations.
    """

    entity_name = "TimeEntry"

    async def create(self, entry: TimeEntry) -> TimeEntry:
        """Insert a time entry and return it with its assigned id"""
        async with self._session() as session:
            model = TimeEntryModel(
                project_id=entry.project_id,
                task_id=entry.task_id,
                description=entry.description,
                start_time=entry.start_time,
                end_time=entry.end_time,
                duration_seconds=entry.duration_seconds,
                created_at=entry.created_at
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            logger.debug(f"Created time entry {model.id}")
            return TimeEntry.model_validate(model)

    async def get_by_id(self, entry_id: int) -> TimeEntry:
        async with self._session() as session:
            model = await session.get(TimeEntryModel, entry_id)
            if model is None:
                raise NotFoundError(self.entity_name, entry_id)
            return TimeEntry.model_validate(model)

    async def get_all(self) -> List[TimeEntry]:
        async with self._session() as session:
            result = await session.execute(select(TimeEntryModel).order_by(TimeEntryModel.id))
            return [TimeEntry.model_validate(m) for m in result.scalars().all()]

    async def get_by_task(self, task_id: int) -> List[TimeEntry]:
        """Get all time entries for a specific task"""
        async with self._session() as session:
            result = await session.execute(
                select(TimeEntryModel)
                .where(TimeEntryModel.task_id == task_id)
                .order_by(TimeEntryModel.id)
            )
            return [TimeEntry.model_validate(m) for m in result.scalars().all()]

    async def get_by_project(self, project_id: int) -> List[TimeEntry]:
        async with self._session() as session:
            result = await session.execute(
                select(TimeEntryModel)
                .where(TimeEntryModel.project_id == project_id)
                .order_by(TimeEntryModel.id)
            )
            return [TimeEntry.model_validate(m) for m in result.scalars().all()]

    async def get_for_date(self, day_start: int) -> List[TimeEntry]:
        """Entries whose start_time falls in [day_start, day_start + 1 day)"""
        async with self._session() as session:
            result = await session.execute(
                select(TimeEntryModel)
                .where(
                    TimeEntryModel.start_time >= day_start,
                    TimeEntryModel.start_time < day_start + SECONDS_PER_DAY
                )
                .order_by(TimeEntryModel.id)
            )
            return [TimeEntry.model_validate(m) for m in result.scalars().all()]

    async def update(self, entry: TimeEntry) -> None:
        """Replace every column of an existing time entry"""
        async with self._session() as session:
            result = await session.execute(
                update(TimeEntryModel)
                .where(TimeEntryModel.id == entry.id)
                .values(
                    project_id=entry.project_id,
                    task_id=entry.task_id,
                    description=entry.description,
                    start_time=entry.start_time,
                    end_time=entry.end_time,
                    duration_seconds=entry.duration_seconds,
                    created_at=entry.created_at
                )
            )
            if result.rowcount == 0:
                raise NotFoundError(self.entity_name, entry.id)
            await session.commit()

    async def delete(self, entry_id: int) -> None:
        """Delete a time entry by ID. Missing ids are ignored."""
        async with self._session() as session:
            await session.execute(delete(TimeEntryModel).where(TimeEntryModel.id == entry_id))
            await session.commit()
            logger.debug(f"Deleted time entry {entry_id}")


class SettingsRepository(BaseRepository):
    """
    Handles saved user settings.

    Saving never overwrites: each save appends a row and load() returns the
    newest one, falling back to the defaults on an empty table.
    """

    entity_name = "Settings"

    def __init__(self, engine: DatabaseEngine, database_path: str):
        super().__init__(engine)
        self.database_path = database_path

    async def save(self, name: str, email: str) -> Settings:
        async with self._session() as session:
            model = SettingsModel(name=name, email=email, database_path=self.database_path)
            session.add(model)
            await session.commit()
            logger.info(f"Saved settings for {name}")
            return Settings(database_path=self.database_path, user=User(name=name, email=email))

    async def load(self) -> Settings:
        async with self._session() as session:
            result = await session.execute(
                select(SettingsModel).order_by(SettingsModel.id.desc()).limit(1)
            )
            model = result.scalar_one_or_none()
            if model is None:
                return Settings()
            return Settings(
                database_path=model.database_path,
                user=User(name=model.name, email=model.email)
            )


class Store:
    """
    Durable CRUD for projects, tasks, time entries and settings.

    Use Store.open() so the schema exists before the first query.
    """

    def __init__(self, engine: DatabaseEngine, database_path: Union[str, Path]):
        self.engine = engine
        self.database_path = str(database_path)
        self.projects = ProjectRepository(engine)
        self.tasks = TaskRepository(engine)
        self.time_entries = TimeEntryRepository(engine)
        self.settings = SettingsRepository(engine, self.database_path)

    @classmethod
    async def open(cls, path: Union[str, Path]) -> 'Store':
        """Open (creating if needed) the database file and its tables"""
        engine = DatabaseEngine.for_path(path)
        try:
            await engine.create_tables()
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            raise InitializationError(f"Cannot initialize database {path}: {e}") from e
        logger.info(f"Database ready: {path}")
        return cls(engine, path)

    async def close(self) -> None:
        await self.engine.dispose()

    async def __aenter__(self) -> 'Store':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
