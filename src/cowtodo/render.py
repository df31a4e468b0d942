"""Turn a TaskCollection into display lines, Rich text, cow output or JSON.

Rendering only reads the collection; all structure (roots, descendants,
completion) comes from the tasks package.
"""

from __future__ import annotations

import json
from collections.abc import Collection, Iterable
from dataclasses import dataclass

from rich.text import Text

from cowtodo.config import Config
from cowtodo.cow import TONGUE, bubble, say
from cowtodo.tasks.collection import (
    filter_by_completion,
    group_by_context,
    root_tasks,
    sort_tasks,
    split_by_effective_completion,
)
from cowtodo.tasks.hierarchy import flatten_with_descendants
from cowtodo.tasks.model import FileTask, TaskCollection

NO_TASKS = "No tasks found in the provided files."
NO_PENDING = "No pending tasks"
NO_COMPLETED = "No completed tasks"

HEADING_STYLE = "bold"
GROUP_STYLE = "bold blue"
CHANGED_STYLE = "bold green"

TaskKey = tuple[str, int, str, bool]


@dataclass
class Line:
    text: str
    style: str = ""


def task_key(task: FileTask) -> TaskKey:
    return (task.file_path, task.line_number, task.content, task.completed)


def format_task(task: FileTask) -> str:
    checkbox = "[x]" if task.completed else "[ ]"
    return f"{'  ' * task.indent}- {checkbox} {task.content}"


def _task_lines(
    tasks: Iterable[FileTask],
    changed: Collection[TaskKey],
    show_file: bool = False,
) -> list[Line]:
    lines = []
    for task in tasks:
        text = format_task(task)
        if show_file:
            text = f"{text}  ({task.file_name})"
        lines.append(Line(text, CHANGED_STYLE if task_key(task) in changed else ""))
    return lines


def _only(tasks: list[FileTask], only: str | None) -> list[FileTask]:
    if only == "pending":
        return filter_by_completion(tasks, False)
    if only == "done":
        return filter_by_completion(tasks, True)
    return tasks


def backlog_lines(collection: TaskCollection, changed: Collection[TaskKey] = ()) -> list[Line]:
    """``## Backlog`` with pending roots and all their descendants, then ``## Done`` roots."""
    pending, done = split_by_effective_completion(root_tasks(collection))
    lines = [Line("## Backlog", HEADING_STYLE), Line("")]
    if pending:
        lines += _task_lines(flatten_with_descendants(pending), changed)
    else:
        lines.append(Line(NO_PENDING))
    lines += [Line(""), Line("## Done", HEADING_STYLE), Line("")]
    if done:
        lines += _task_lines(done, changed)
    else:
        lines.append(Line(NO_COMPLETED))
    return lines


def file_lines(
    collection: TaskCollection,
    changed: Collection[TaskKey] = (),
    only: str | None = None,
) -> list[Line]:
    """One group per file, in file order."""
    lines: list[Line] = []
    for file_path in dict.fromkeys(collection.file_order):
        tasks = _only(collection.get_file_tasks(file_path), only)
        if lines:
            lines.append(Line(""))
        lines.append(Line(f"{file_path} ({len(tasks)})", GROUP_STYLE))
        lines += _task_lines(tasks, changed)
    return lines


def context_lines(
    collection: TaskCollection,
    changed: Collection[TaskKey] = (),
    only: str | None = None,
) -> list[Line]:
    """One group per heading context, in order of first appearance."""
    lines: list[Line] = []
    for context, tasks in group_by_context(_only(collection.all_tasks, only)).items():
        if lines:
            lines.append(Line(""))
        lines.append(Line(f"{context} ({len(tasks)})", GROUP_STYLE))
        lines += _task_lines(tasks, changed, show_file=len(collection.file_order) > 1)
    return lines


def sorted_lines(
    collection: TaskCollection,
    sort_by: str,
    changed: Collection[TaskKey] = (),
    only: str | None = None,
) -> list[Line]:
    tasks = sort_tasks(_only(collection.all_tasks, only), sort_by)
    return _task_lines(tasks, changed, show_file=True)


def summary_line(collection: TaskCollection) -> Line:
    s = collection.summary
    return Line(
        f"{s.completed_tasks}/{s.total_tasks} tasks complete "
        f"({s.completion_percentage}%) across {s.total_files} file(s)",
        "dim",
    )


def render_lines(
    collection: TaskCollection,
    cfg: Config,
    changed: Collection[TaskKey] = (),
    only: str | None = None,
    by_context: bool = False,
) -> list[Line]:
    """Pick the view from *cfg* and return its lines."""
    if not collection.all_tasks:
        lines = [Line(NO_TASKS)]
    elif cfg.sort_by:
        lines = sorted_lines(collection, cfg.sort_by, changed, only)
    elif by_context:
        lines = context_lines(collection, changed, only)
    elif cfg.details:
        lines = file_lines(collection, changed, only)
    else:
        lines = backlog_lines(collection, changed)
    if cfg.verbose:
        lines += [Line(""), summary_line(collection)]
    return lines


def to_text(lines: list[Line]) -> Text:
    text = Text()
    for i, line in enumerate(lines):
        if i:
            text.append("\n")
        text.append(line.text, style=line.style or None)
    return text


def cow_text(lines: list[Line], eyes: str = "oo", tongue: str = "  ") -> Text:
    """Wrap *lines* in the cow's bubble, keeping each line's style inside the bubble."""
    plain = "\n".join(line.text for line in lines)
    said = say(plain, eyes=eyes, tongue=tongue)
    # Bubble rows map 1:1 to lines (no wrapping), after the top border.
    bubble_rows = bubble(plain).count("\n") + 1
    text = Text()
    for i, row in enumerate(said.split("\n")):
        if i:
            text.append("\n")
        style = ""
        if 0 < i < bubble_rows - 1 and i - 1 < len(lines):
            style = lines[i - 1].style
        text.append(row, style=style or None)
    return text


def render(
    collection: TaskCollection,
    cfg: Config,
    changed: Collection[TaskKey] = (),
    only: str | None = None,
    by_context: bool = False,
) -> Text:
    """Rich text for the whole output, through the cow when enabled."""
    lines = render_lines(collection, cfg, changed, only, by_context)
    if cfg.cow:
        return cow_text(lines, eyes=cfg.cow_eyes)
    return to_text(lines)


def render_plain(collection: TaskCollection, cfg: Config, **kwargs) -> str:
    return render(collection, cfg, **kwargs).plain


def render_json(collection: TaskCollection, only: str | None = None) -> str:
    """Summary, file order and each file's tasks as JSON.

    Tasks are a flat list in line order; the tree is kept as line-number
    references so arbitrarily deep nesting serializes without recursion.
    """
    files = {
        file_path: [task.to_dict() for task in _only(tasks, only)]
        for file_path, tasks in collection.tasks_by_file.items()
    }
    payload = {
        "summary": collection.summary.to_dict(),
        "file_order": collection.file_order,
        "files": files,
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def message_text(message: str, cfg: Config, eyes: str) -> str:
    """A one-off message (welcome, read error), through the cow when enabled."""
    if cfg.cow:
        return say(message, eyes=eyes, tongue=TONGUE)
    return message
