"""
Page views - pure functions from in-memory state to screen text.

Nothing here touches the terminal or the store, which keeps every page
testable as plain strings.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from timetracker.domain.models import Project, Task, TimeEntry, Settings, format_seconds
from timetracker.domain.timeutil import to_datetime


@dataclass(frozen=True)
class Screen:
    """Composed page: full text plus where the cursor goes (x, y)."""

    text: str
    cursor: Tuple[int, int] = (0, 0)

    @property
    def lines(self) -> List[str]:
        return self.text.split("\n")


class Menu:
    """Contextual key hints, rendered on one line."""

    def __init__(self):
        self.items: List[Tuple[str, str]] = []

    def item(self, text: str, key: str) -> 'Menu':
        self.items.append((text, key))
        return self

    def render(self) -> str:
        return " ".join(f"{text} ({key})" for text, key in self.items)


def clamp_selection(selection: int, length: int) -> int:
    """0 for an empty list, otherwise at most the last index."""
    if length == 0:
        return 0
    return min(selection, length - 1)


def _list_screen(title: str, menu: Menu, rows: Sequence[str], empty_text: str,
                 selection: int, header: Sequence[str] = (),
                 footer: Sequence[str] = ()) -> Screen:
    lines = [title, menu.render(), *header, ""]
    first_row = len(lines)
    selected = clamp_selection(selection, len(rows))

    if rows:
        lines.extend(
            f"{'>' if i == selected else ' '} {row}" for i, row in enumerate(rows)
        )
    else:
        lines.append(empty_text)
    lines.extend(footer)

    return Screen("\n".join(lines), (0, first_row + selected))


def format_time_entry(entry: TimeEntry, projects: Dict[int, Project],
                      tasks: Dict[int, Task]) -> str:
    start = to_datetime(entry.start_time)
    end = to_datetime(entry.end_time)
    where = ""
    project = projects.get(entry.project_id)
    task = tasks.get(entry.task_id)
    if project or task:
        where = f" [{project.name if project else '?'} / {task.name if task else '?'}]"
    return (
        f"{start:%Y-%m-%d %H:%M} - {end:%H:%M}  {entry.duration_string()}"
        f"  {entry.description}{where}"
    )


def time_page(entries: Sequence[TimeEntry], selection: int,
              projects: Sequence[Project] = (), tasks: Sequence[Task] = ()) -> Screen:
    menu = (Menu()
            .item("Create time entry", "c")
            .item("Edit time entry", "e")
            .item("Delete time entry", "d")
            .item("Projects", "p")
            .item("Settings", "s")
            .item("Quit", "q"))
    projects_by_id = {p.id: p for p in projects}
    tasks_by_id = {t.id: t for t in tasks}
    rows = [format_time_entry(e, projects_by_id, tasks_by_id) for e in entries]
    total = sum(e.duration() for e in entries)
    return _list_screen("Time entries", menu, rows, "No time entries", selection,
                        footer=["", f"Total time: {total}"])


def projects_page(projects: Sequence[Project], selection: int) -> Screen:
    menu = (Menu()
            .item("Create project", "c")
            .item("Edit project", "e")
            .item("Delete project", "d")
            .item("Tasks", "t")
            .item("Back", "b")
            .item("Settings", "s")
            .item("Quit", "q"))
    rows = [f"{p.name} - {p.description}" for p in projects]
    return _list_screen("Projects", menu, rows, "No projects", selection)


def project_detail_page(project: Optional[Project], tasks: Sequence[Task],
                        selection: int) -> Screen:
    menu = (Menu()
            .item("Create task", "c")
            .item("Edit task", "e")
            .item("Delete task", "d")
            .item("Back", "b")
            .item("Quit", "q"))
    if project is None:
        return Screen("\n".join(["Project", menu.render(), "", "No project selected"]))
    rows = [f"{t.name} - {t.description}" for t in tasks]
    return _list_screen(f"Project: {project.name}", menu, rows, "No tasks", selection,
                        header=[project.description] if project.description else [])


def settings_page(settings: Settings) -> Screen:
    menu = (Menu()
            .item("Edit", "e")
            .item("Back", "b")
            .item("Quit", "q"))
    lines = [
        "Settings",
        menu.render(),
        "",
        f"Name: {settings.user.name}",
        f"Email: {settings.user.email}",
        f"Database: {settings.database_path}",
    ]
    return Screen("\n".join(lines))


def _name_of(items: Sequence, item_id: int) -> str:
    """Name for an id: "-" when unset, "?" when the row is gone"""
    if not item_id:
        return "-"
    return next((item.name for item in items if item.id == item_id), "?")


def choice_label(noun: str, items: Sequence) -> str:
    """Prompt listing numbered choices, e.g. "Select a project (1 Alpha, 2 Beta): " """
    options = ", ".join(f"{number} {item.name}" for number, item in enumerate(items, 1))
    return f"Select a {noun} ({options}): "


def time_entry_page(entry: Optional[TimeEntry], stopwatch_elapsed: Optional[int] = None,
                    projects: Sequence[Project] = (), tasks: Sequence[Task] = ()) -> Screen:
    """Detail of the entry being created or edited.

    stopwatch_elapsed is None unless the stopwatch is timing this entry.
    """
    menu = (Menu()
            .item("Description", "e")
            .item("Duration", "t")
            .item("Project and task", "p")
            .item("Start stopwatch", "s")
            .item("Stop stopwatch", "space")
            .item("Delete and back", "d")
            .item("Back", "b")
            .item("Quit", "q"))
    if entry is None:
        return Screen("\n".join(["Time entry", menu.render(), "", "No time entry selected"]))

    title = "New time entry" if entry.id is None else f"Time entry #{entry.id}"
    if stopwatch_elapsed is None:
        stopwatch = "Stopwatch: stopped"
    else:
        stopwatch = f"Stopwatch: running {format_seconds(stopwatch_elapsed)}"
    lines = [
        title,
        menu.render(),
        "",
        f"Project: {_name_of(projects, entry.project_id)}",
        f"Task: {_name_of(tasks, entry.task_id)}",
        f"Description: {entry.description}",
        f"Start: {to_datetime(entry.start_time):%Y-%m-%d %H:%M:%S}",
        f"End: {to_datetime(entry.end_time):%Y-%m-%d %H:%M:%S}",
        f"Duration: {entry.duration_string()}",
        f"Stored duration: {format_seconds(entry.duration_seconds)}",
        stopwatch,
    ]
    return Screen("\n".join(lines))


def form_page(title: str, answered: Sequence[Tuple[str, str]]) -> Screen:
    """Create/edit page for projects and tasks: fields answered so far."""
    menu = Menu().item("Submit", "enter").item("Cancel", "esc")
    lines = [title, menu.render(), ""]
    lines.extend(f"{label.strip()} {value}" for label, value in answered)
    return Screen("\n".join(lines))


def with_prompt(screen: Screen, label: str, buffer: str) -> Screen:
    """Append an input line to a screen and park the cursor at its end."""
    lines = screen.lines + ["", f"{label}{buffer}"]
    return Screen("\n".join(lines), (len(label) + len(buffer), len(lines) - 1))
