"""
Navigator - the page-stack state machine driving the terminal UI.

Architecture Decision: Page stack + explicit prompt state
Pages are kept on a stack so "back" restores the previous page (with its
selection) without recomputing anything. Text entry never blocks inside a
handler: a PromptSequence records which field is being asked for, keys edit
its buffer, and the sequence's completion coroutine runs when the last field
is submitted. The whole UI state is therefore plain attributes that tests can
drive key by key.

Errors from the store or from parsing input are not caught here; they unwind
out of run().
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Set

from timetracker.domain.errors import TerminalError
from timetracker.domain.models import Project, Task, TimeEntry, Settings
from timetracker.domain.timeutil import hours_to_seconds, now_epoch
from timetracker.infra.repository import Store
from timetracker.services.stopwatch import StopwatchService
from timetracker.ui import views
from timetracker.ui.input_source import KeyChannel, KeyEvent, ENTER, BACKSPACE, ESCAPE, UP, DOWN, CTRL_C
from timetracker.ui.renderer import Renderer

logger = logging.getLogger(__name__)

QUIT_KEY = "q"


class Page(str, Enum):
    TIME = "Time"
    PROJECTS = "Projects"
    SETTINGS = "Settings"
    PROJECT_DETAIL = "ProjectDetail"
    TIME_ENTRY_CREATE_OR_EDIT = "TimeEntryCreateOrEdit"
    PROJECT_CREATE_OR_EDIT = "ProjectCreateOrEdit"
    TASK_CREATE_OR_EDIT = "TaskCreateOrEdit"


LIST_PAGES = {Page.TIME, Page.PROJECTS, Page.PROJECT_DETAIL}


@dataclass
class Frame:
    """One entry of the page stack"""

    page: Page
    selection: int = 0


@dataclass
class PromptSequence:
    """
    A run of text fields asked one after another.

    `required` holds the indices of fields that may not be left blank.
    """

    labels: List[str]
    on_complete: Callable[[List[str]], Awaitable[None]]
    defaults: List[str] = field(default_factory=list)
    required: Set[int] = field(default_factory=set)
    on_cancel: Optional[Callable[[], None]] = None
    answers: List[str] = field(default_factory=list)
    buffer: str = ""

    def __post_init__(self):
        self.buffer = self.default_for(0)

    @property
    def label(self) -> str:
        return self.labels[len(self.answers)]

    @property
    def done(self) -> bool:
        return len(self.answers) == len(self.labels)

    def default_for(self, index: int) -> str:
        return self.defaults[index] if index < len(self.defaults) else ""


def _choose(items: Sequence, answer: str):
    """Item picked by 1-based number or by case-insensitive name, else None"""
    text = answer.strip()
    if text.isdigit():
        index = int(text) - 1
        return items[index] if 0 <= index < len(items) else None
    return next((item for item in items if item.name.casefold() == text.casefold()), None)


class Navigator:
    """
    Owns the page stack, the loaded entities and the render/dispatch loop.
    """

    def __init__(self, store: Store, renderer: Renderer, keys: KeyChannel,
                 stopwatch: Optional[StopwatchService] = None):
        self.store = store
        self.renderer = renderer
        self.keys = keys
        self.stopwatch = stopwatch or StopwatchService()

        self._frames: List[Frame] = [Frame(Page.TIME)]
        self.time_entries: List[TimeEntry] = []
        self.projects: List[Project] = []
        self.tasks: List[Task] = []
        self.settings = Settings()

        # Context for child pages
        self.time_entry: Optional[TimeEntry] = None
        self.project: Optional[Project] = None

        self.prompt: Optional[PromptSequence] = None
        self.quit = False
        self.last_screen: Optional[views.Screen] = None

        self._handlers: Dict[Page, Callable[[str], Awaitable[None]]] = {
            Page.TIME: self._handle_time,
            Page.PROJECTS: self._handle_projects,
            Page.SETTINGS: self._handle_settings,
            Page.PROJECT_DETAIL: self._handle_project_detail,
            Page.TIME_ENTRY_CREATE_OR_EDIT: self._handle_time_entry,
        }

    # Page stack

    @property
    def page_stack(self) -> List[Page]:
        return [frame.page for frame in self._frames]

    @property
    def page(self) -> Page:
        return self._frames[-1].page

    @property
    def selection(self) -> int:
        return self._frames[-1].selection

    @selection.setter
    def selection(self, value: int):
        self._frames[-1].selection = value

    def push(self, page: Page) -> None:
        self._frames.append(Frame(page))
        logger.debug(f"Push {page.value}: {[p.value for p in self.page_stack]}")

    def pop(self) -> None:
        """Return to the previous page. The bottom page is never popped."""
        if len(self._frames) > 1:
            self._frames.pop()
        logger.debug(f"Pop: {[p.value for p in self.page_stack]}")

    # Main loop

    async def run(self) -> None:
        """Load data, then render and dispatch keys until quit."""
        await self.load_data()
        self.render()
        while not self.quit:
            event = await self.keys.get()
            if event is None:
                raise TerminalError("Key input closed")
            await self.handle_key(event)
            self.render()

    async def load_data(self) -> None:
        self.time_entries = await self.store.time_entries.get_all()
        self.projects = await self.store.projects.get_all()
        self.tasks = await self.store.tasks.get_all()
        self.settings = await self.store.settings.load()
        logger.info(
            f"Loaded {len(self.projects)} projects, {len(self.tasks)} tasks, "
            f"{len(self.time_entries)} time entries"
        )

    async def handle_key(self, event: KeyEvent) -> None:
        if event.key == CTRL_C or (self.prompt is None and event.key == QUIT_KEY):
            await self._quit()
            return

        if self.prompt is not None:
            await self._handle_prompt_key(event)
            return

        if self.page in LIST_PAGES and event.key in (UP, "k", DOWN, "j"):
            self._move_selection(-1 if event.key in (UP, "k") else 1)
            return

        handler = self._handlers.get(self.page)
        if handler is not None:
            await handler(event.key)

    def render(self) -> None:
        screen = self.compose()
        self.renderer.clear()
        self.renderer.write(screen.text)
        self.renderer.move_cursor(*screen.cursor)
        self.renderer.flush()
        self.last_screen = screen

    def compose(self) -> views.Screen:
        page = self.page
        if page == Page.TIME:
            screen = views.time_page(self.time_entries, self.selection, self.projects, self.tasks)
        elif page == Page.PROJECTS:
            screen = views.projects_page(self.projects, self.selection)
        elif page == Page.SETTINGS:
            screen = views.settings_page(self.settings)
        elif page == Page.PROJECT_DETAIL:
            screen = views.project_detail_page(self.project, self.project_tasks(), self.selection)
        elif page == Page.TIME_ENTRY_CREATE_OR_EDIT:
            elapsed = self.stopwatch.elapsed() if self.stopwatch.is_timing(self.time_entry) else None
            screen = views.time_entry_page(self.time_entry, elapsed, self.projects, self.tasks)
        else:
            noun = "project" if page == Page.PROJECT_CREATE_OR_EDIT else "task"
            answered = []
            if self.prompt is not None:
                answered = list(zip(self.prompt.labels, self.prompt.answers))
            screen = views.form_page(f"Create or edit {noun}", answered)

        if self.prompt is not None:
            screen = views.with_prompt(screen, self.prompt.label, self.prompt.buffer)
        return screen

    # Prompts

    def open_prompt(self, prompt: PromptSequence) -> None:
        self.prompt = prompt
        self.keys.line_mode.set()

    def cancel_prompt(self) -> None:
        prompt = self._close_prompt()
        if prompt is not None and prompt.on_cancel is not None:
            prompt.on_cancel()

    async def submit_line(self, text: str) -> None:
        """Answer the current prompt field; runs the completion after the last one."""
        prompt = self.prompt
        if prompt is None:
            return

        value = text.strip()
        if not value and len(prompt.answers) in prompt.required:
            prompt.buffer = ""
            return

        prompt.answers.append(value)
        if not prompt.done:
            prompt.buffer = prompt.default_for(len(prompt.answers))
            return

        self._close_prompt()
        await prompt.on_complete(prompt.answers)

    def _close_prompt(self) -> Optional[PromptSequence]:
        prompt, self.prompt = self.prompt, None
        self.keys.line_mode.clear()
        return prompt

    async def _handle_prompt_key(self, event: KeyEvent) -> None:
        if event.key == ENTER:
            await self.submit_line(self.prompt.buffer)
        elif event.key == BACKSPACE:
            self.prompt.buffer = self.prompt.buffer[:-1]
        elif event.key == ESCAPE:
            self.cancel_prompt()
        elif event.char is not None:
            self.prompt.buffer += event.char

    # Page handlers

    async def _handle_time(self, key: str) -> None:
        if key == "c":
            now = now_epoch()
            self.time_entry = TimeEntry(start_time=now, end_time=now)
            self.push(Page.TIME_ENTRY_CREATE_OR_EDIT)
        elif key == "e":
            entry = self._selected(self.time_entries)
            if entry is not None:
                self.time_entry = entry
                self.push(Page.TIME_ENTRY_CREATE_OR_EDIT)
        elif key == "d":
            entry = self._selected(self.time_entries)
            if entry is not None:
                await self._delete_time_entry(entry)
        elif key == "p":
            self.push(Page.PROJECTS)
        elif key == "s":
            self.push(Page.SETTINGS)

    async def _handle_projects(self, key: str) -> None:
        if key == "c":
            self._open_project_form(None)
        elif key == "e":
            project = self._selected(self.projects)
            if project is not None:
                self._open_project_form(project)
        elif key == "d":
            project = self._selected(self.projects)
            if project is not None:
                await self.store.projects.delete(project.id)
                self._remove(self.projects, project.id)
        elif key == "t":
            project = self._selected(self.projects)
            if project is not None:
                self.project = project
                self.push(Page.PROJECT_DETAIL)
        elif key == "b":
            self.pop()
        elif key == "s":
            self.push(Page.SETTINGS)

    async def _handle_project_detail(self, key: str) -> None:
        if key == "c":
            self._open_task_form(None)
        elif key == "e":
            task = self._selected(self.project_tasks())
            if task is not None:
                self._open_task_form(task)
        elif key == "d":
            task = self._selected(self.project_tasks())
            if task is not None:
                await self.store.tasks.delete(task.id)
                self._remove(self.tasks, task.id)
        elif key == "b":
            self.pop()

    async def _handle_settings(self, key: str) -> None:
        if key == "e":
            async def complete(answers: List[str]) -> None:
                name, email = answers
                self.settings = await self.store.settings.save(name, email)

            user = self.settings.user
            self.open_prompt(PromptSequence(
                labels=["Enter your name: ", "Enter your email: "],
                defaults=[user.name, user.email],
                required={0},
                on_complete=complete,
            ))
        elif key == "b":
            self.pop()

    async def _handle_time_entry(self, key: str) -> None:
        if key == "b":
            self.pop()
            return

        entry = self.time_entry
        if entry is None:
            return

        if key == "e":
            async def complete_description(answers: List[str]) -> None:
                updated = self.time_entry.model_copy(update={"description": answers[0]})
                self.time_entry = await self._save_time_entry(updated)

            self.open_prompt(PromptSequence(
                labels=["Enter the time entry description: "],
                defaults=[entry.description],
                on_complete=complete_description,
            ))
        elif key == "t":
            async def complete_duration(answers: List[str]) -> None:
                seconds = hours_to_seconds(answers[0])
                updated = self.time_entry.model_copy(update={"duration_seconds": seconds})
                self.time_entry = await self._save_time_entry(updated)

            self.open_prompt(PromptSequence(
                labels=["Enter the time entry duration hours(e.g. 4.5): "],
                on_complete=complete_duration,
            ))
        elif key == "p":
            if self.projects:
                self._open_project_choice()
        elif key == "s":
            if entry.id is None:
                entry = self.time_entry = await self._save_time_entry(entry)
            if not self.stopwatch.is_timing(entry):
                previous = self.stopwatch.start(entry)
                if previous is not None:
                    await self._save_stopwatch_result(previous)
        elif key == " ":
            finished = self.stopwatch.stop()
            if finished is not None:
                await self._save_stopwatch_result(finished)
        elif key == "d":
            if entry.id is not None:
                await self._delete_time_entry(entry)
            self.time_entry = None
            self.pop()

    # Forms

    def _open_project_form(self, project: Optional[Project]) -> None:
        async def complete(answers: List[str]) -> None:
            name, description = answers
            if project is None:
                created = await self.store.projects.create(
                    Project(name=name, description=description)
                )
                self.projects.append(created)
                self.pop()
                self.selection = len(self.projects) - 1
            else:
                updated = project.model_copy(update={"name": name, "description": description})
                await self.store.projects.update(updated)
                self._replace(self.projects, updated)
                if self.project is not None and self.project.id == updated.id:
                    self.project = updated
                self.pop()

        self.push(Page.PROJECT_CREATE_OR_EDIT)
        self.open_prompt(PromptSequence(
            labels=["Enter a project name: ", "Enter a project description: "],
            defaults=[project.name, project.description] if project else [],
            required={0},
            on_complete=complete,
            on_cancel=self.pop,
        ))

    def _open_task_form(self, task: Optional[Task]) -> None:
        project = self.project

        async def complete(answers: List[str]) -> None:
            name, description = answers
            if task is None:
                created = await self.store.tasks.create(
                    Task(project_id=project.id, name=name, description=description)
                )
                self.tasks.append(created)
                self.pop()
                self.selection = len(self.project_tasks()) - 1
            else:
                updated = task.model_copy(update={"name": name, "description": description})
                await self.store.tasks.update(updated)
                self._replace(self.tasks, updated)
                self.pop()

        self.push(Page.TASK_CREATE_OR_EDIT)
        self.open_prompt(PromptSequence(
            labels=["Enter a task name: ", "Enter a task description: "],
            defaults=[task.name, task.description] if task else [],
            required={0},
            on_complete=complete,
            on_cancel=self.pop,
        ))

    # Time entries

    async def _save_time_entry(self, entry: TimeEntry) -> TimeEntry:
        """Create or update an entry and mirror the change in memory."""
        if entry.id is None:
            entry = await self.store.time_entries.create(entry)
            self.time_entries.append(entry)
            self._select_on(Page.TIME, len(self.time_entries) - 1)
        else:
            await self.store.time_entries.update(entry)
            self._replace(self.time_entries, entry)
        return entry

    def _open_project_choice(self) -> None:
        """Ask for the entry's project, then for one of that project's tasks"""
        current = self._find(self.projects, self.time_entry.project_id)

        async def complete(answers: List[str]) -> None:
            project = _choose(self.projects, answers[0])
            if project is None:
                self._open_project_choice()
                return
            tasks = [t for t in self.tasks if t.project_id == project.id]
            if tasks:
                self._open_task_choice(project, tasks)
            else:
                await self._assign(project, None)

        self.open_prompt(PromptSequence(
            labels=[views.choice_label("project", self.projects)],
            defaults=[current.name if current else ""],
            required={0},
            on_complete=complete,
        ))

    def _open_task_choice(self, project: Project, tasks: List[Task]) -> None:
        current = self._find(tasks, self.time_entry.task_id)

        async def complete(answers: List[str]) -> None:
            task = _choose(tasks, answers[0])
            if task is None:
                self._open_task_choice(project, tasks)
                return
            await self._assign(project, task)

        self.open_prompt(PromptSequence(
            labels=[views.choice_label("task", tasks)],
            defaults=[current.name if current else ""],
            required={0},
            on_complete=complete,
        ))

    async def _assign(self, project: Project, task: Optional[Task]) -> None:
        updated = self.time_entry.model_copy(update={
            "project_id": project.id,
            "task_id": task.id if task else 0,
        })
        self.time_entry = await self._save_time_entry(updated)

    async def _save_stopwatch_result(self, finished: TimeEntry) -> None:
        # Keep edits made while the stopwatch ran; take only the timing
        current = next((e for e in self.time_entries if e.id == finished.id), finished)
        timed = current.model_copy(update={
            "start_time": finished.start_time,
            "end_time": finished.end_time,
            "duration_seconds": finished.duration_seconds,
        })
        saved = await self._save_time_entry(timed)
        if self.time_entry is not None and self.time_entry.id == saved.id:
            self.time_entry = saved

    async def _delete_time_entry(self, entry: TimeEntry) -> None:
        if self.stopwatch.is_timing(entry):
            self.stopwatch.stop()
        await self.store.time_entries.delete(entry.id)
        self._remove(self.time_entries, entry.id)

    async def _quit(self) -> None:
        if self.stopwatch.is_running():
            finished = self.stopwatch.stop()
            logger.info(f"Saving running stopwatch for entry {finished.id} on quit")
            await self._save_stopwatch_result(finished)
        self._close_prompt()
        self.quit = True
        self.keys.stop()

    # Helpers

    def project_tasks(self) -> List[Task]:
        if self.project is None:
            return []
        return [t for t in self.tasks if t.project_id == self.project.id]

    def _selected(self, items: Sequence):
        """Item under the (clamped) selection, or None for an empty list."""
        if not items:
            self.selection = 0
            return None
        self.selection = views.clamp_selection(self.selection, len(items))
        return items[self.selection]

    def _current_rows(self) -> Sequence:
        if self.page == Page.TIME:
            return self.time_entries
        if self.page == Page.PROJECTS:
            return self.projects
        if self.page == Page.PROJECT_DETAIL:
            return self.project_tasks()
        return []

    def _move_selection(self, delta: int) -> None:
        length = len(self._current_rows())
        current = views.clamp_selection(self.selection, length)
        self.selection = views.clamp_selection(max(0, current + delta), length)

    def _select_on(self, page: Page, index: int) -> None:
        for frame in reversed(self._frames):
            if frame.page == page:
                frame.selection = index
                return

    @staticmethod
    def _find(items: Sequence, item_id: int):
        return next((item for item in items if item.id == item_id), None)

    @staticmethod
    def _replace(items: List, updated) -> None:
        for i, item in enumerate(items):
            if item.id == updated.id:
                items[i] = updated
                return

    @staticmethod
    def _remove(items: List, item_id: int) -> None:
        items[:] = [item for item in items if item.id != item_id]
