"""
Tests for page composition.
"""

from timetracker.domain.models import Project, Task, TimeEntry, Settings, User
from timetracker.ui import views


def test_clamp_selection():
    assert views.clamp_selection(0, 0) == 0
    assert views.clamp_selection(5, 0) == 0
    assert views.clamp_selection(5, 3) == 2
    assert views.clamp_selection(1, 3) == 1


def test_menu_render():
    menu = views.Menu().item("Create", "c").item("Back", "b")
    assert menu.render() == "Create (c) Back (b)"


def test_empty_time_page():
    screen = views.time_page([], 0)

    assert screen.lines[0] == "Time entries"
    assert "Create time entry (c)" in screen.lines[1]
    assert "No time entries" in screen.lines
    assert screen.lines[-1] == "Total time: 0"
    assert screen.cursor == (0, 3)


def test_time_page_total_uses_start_and_end():
    entries = [
        TimeEntry(id=1, start_time=0, end_time=3600, duration_seconds=1),
        TimeEntry(id=2, start_time=100, end_time=160, duration_seconds=1),
    ]
    screen = views.time_page(entries, 1)

    assert screen.lines[-1] == "Total time: 3660"
    assert screen.lines[4].startswith("> ")
    assert screen.lines[3].startswith("  ")
    assert screen.cursor == (0, 4)


def test_time_entry_row_names_project_and_task():
    entry = TimeEntry(id=1, project_id=1, task_id=2, description="Review",
                      start_time=0, end_time=3661)
    row = views.format_time_entry(entry, {1: Project(id=1, name="Alpha")},
                                  {2: Task(id=2, project_id=1, name="Code")})

    assert row == "1970-01-01 00:00 - 01:01  01:01:01  Review [Alpha / Code]"


def test_time_entry_row_with_orphaned_ids():
    entry = TimeEntry(project_id=9, task_id=0, description="Lost", start_time=0, end_time=0)
    row = views.format_time_entry(entry, {}, {})
    assert row.endswith("Lost")


def test_project_detail_without_project():
    screen = views.project_detail_page(None, [], 0)
    assert "No project selected" in screen.lines


def test_project_detail_shows_description_header():
    project = Project(id=1, name="Alpha", description="Client work")
    screen = views.project_detail_page(project, [Task(id=1, project_id=1, name="Design")], 0)

    assert screen.lines[0] == "Project: Alpha"
    assert screen.lines[2] == "Client work"
    assert screen.lines[4] == "> Design - "
    assert screen.cursor == (0, 4)


def test_settings_page():
    settings = Settings(database_path="work.sqlite", user=User(name="Ada", email="ada@example.com"))
    lines = views.settings_page(settings).lines

    assert "Name: Ada" in lines
    assert "Email: ada@example.com" in lines
    assert "Database: work.sqlite" in lines


def test_time_entry_page_stopwatch_line():
    entry = TimeEntry(id=4, description="Work", start_time=0, end_time=60, duration_seconds=30)

    stopped = views.time_entry_page(entry).lines
    assert stopped[0] == "Time entry #4"
    assert "Duration: 00:01:00" in stopped
    assert "Stored duration: 00:00:30" in stopped
    assert stopped[-1] == "Stopwatch: stopped"

    running = views.time_entry_page(entry, stopwatch_elapsed=3725).lines
    assert running[-1] == "Stopwatch: running 01:02:05"


def test_with_prompt_puts_cursor_after_buffer():
    screen = views.with_prompt(views.form_page("Create or edit project", []), "Name: ", "abc")

    assert screen.lines[-1] == "Name: abc"
    assert screen.cursor == (9, len(screen.lines) - 1)


def test_form_page_lists_answers():
    screen = views.form_page("Create or edit task", [("Enter a task name: ", "Design")])
    assert "Enter a task name: Design" in screen.lines


def test_time_entry_page_names_project_and_task():
    entry = TimeEntry(id=1, project_id=1, task_id=5, description="Work")
    lines = views.time_entry_page(entry, projects=[Project(id=1, name="Alpha")]).lines

    assert "Project: Alpha" in lines
    # Task 5 no longer exists
    assert "Task: ?" in lines
    assert "Delete and back (d)" in lines[1]

    unassigned = views.time_entry_page(TimeEntry(id=2)).lines
    assert "Project: -" in unassigned
    assert "Task: -" in unassigned


def test_choice_label_numbers_items():
    projects = [Project(id=1, name="Alpha"), Project(id=2, name="Beta")]
    assert views.choice_label("project", projects) == "Select a project (1 Alpha, 2 Beta): "
