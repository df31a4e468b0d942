"""Multi-file aggregation and the read-only views built on top of it."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence

from cowtodo import log
from cowtodo.tasks.markdown import process_file
from cowtodo.tasks.model import FileTask, Summary, Task, TaskCollection

SORT_CHOICES: tuple[str, ...] = ("file", "context", "completion")

NO_CONTEXT = "No Context"


def file_name_for(file_path: str) -> str:
    """Last ``/``-separated segment of *file_path*, or the path itself when that is empty."""
    return file_path.split("/")[-1] or file_path


def resolve_file_order(
    file_contents: Mapping[str, str],
    explicit_order: Sequence[str] | None = None,
) -> list[str]:
    """Canonical processing order.

    With *explicit_order*, keep only the paths that have content, preserving
    the caller's order and duplicates. Without it, use the mapping's order.
    """
    if explicit_order is None:
        return list(file_contents)
    dropped = [path for path in explicit_order if path not in file_contents]
    if dropped:
        log.debug(f"Dropping {len(dropped)} path(s) without content: {', '.join(dropped)}")
    return [path for path in explicit_order if path in file_contents]


def _to_file_tasks(tasks: list[Task], file_path: str) -> list[FileTask]:
    """Copy one file's linked tasks into FileTasks, carrying the same tree over."""
    file_name = file_name_for(file_path)
    copies: dict[int, FileTask] = {}
    for task in tasks:
        copies[id(task)] = FileTask(
            text=task.text,
            content=task.content,
            completed=task.completed,
            line_number=task.line_number,
            indent=task.indent,
            context=task.context,
            all_children_complete=task.all_children_complete,
            effectively_complete=task.effectively_complete,
            file_path=file_path,
            file_name=file_name,
        )
    for task in tasks:
        copy = copies[id(task)]
        if task.parent_task is not None:
            copy.parent_task = copies[id(task.parent_task)]
        copy.child_tasks = [copies[id(child)] for child in task.child_tasks]
        # __post_init__ ran before children were attached
        copy.effectively_complete = task.effectively_complete
    return [copies[id(task)] for task in tasks]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _positions(order: Sequence[str]) -> dict[str, int]:
    """First index of each path; duplicated paths sort at their first occurrence."""
    position: dict[str, int] = {}
    for index, file_path in enumerate(order):
        position.setdefault(file_path, index)
    return position


def collect_tasks(
    file_contents: Mapping[str, str],
    file_order: Sequence[str] | None = None,
) -> TaskCollection:
    """Process every file and combine the results into one :class:`TaskCollection`.

    ``all_tasks`` is ordered by position in the resolved file order, then by
    line number, regardless of the mapping's own iteration order.
    """
    order = resolve_file_order(file_contents, file_order)
    all_tasks: list[FileTask] = []
    tasks_by_file: dict[str, list[FileTask]] = {}
    total_tasks = 0
    completed_tasks = 0

    for file_path in order:
        log.debug(f"Processing {file_path}")
        parsed = process_file(file_contents[file_path])
        file_tasks = _to_file_tasks(parsed.tasks, file_path)
        all_tasks.extend(file_tasks)
        tasks_by_file[file_path] = file_tasks
        total_tasks += parsed.counts.total
        completed_tasks += parsed.counts.completed

    position = _positions(order)
    all_tasks.sort(key=lambda t: (position[t.file_path], t.line_number))

    percentage = 0 if total_tasks == 0 else _round_half_up(completed_tasks / total_tasks * 100)

    return TaskCollection(
        all_tasks=all_tasks,
        tasks_by_file=tasks_by_file,
        file_order=order,
        summary=Summary(
            total_files=len(file_contents),
            total_tasks=total_tasks,
            completed_tasks=completed_tasks,
            completion_percentage=percentage,
        ),
    )


# ── Views ────────────────────────────────────────────────────────────


def group_by_context(tasks: Iterable[FileTask]) -> dict[str, list[FileTask]]:
    grouped: dict[str, list[FileTask]] = {}
    for task in tasks:
        grouped.setdefault(task.context or NO_CONTEXT, []).append(task)
    return grouped


def filter_by_completion(tasks: Iterable[FileTask], completed: bool) -> list[FileTask]:
    """Tasks whose own checkbox matches *completed*."""
    return [task for task in tasks if task.completed == completed]


def sort_tasks(tasks: Iterable[FileTask], sort_by: str = "file") -> list[FileTask]:
    """Return a sorted copy. Unknown criteria leave the order unchanged.

    ``completion`` puts incomplete tasks first, then orders by file name.
    """
    result = list(tasks)
    match sort_by:
        case "file":
            result.sort(key=lambda t: t.file_name.casefold())
        case "context":
            result.sort(key=lambda t: t.context.casefold())
        case "completion":
            result.sort(key=lambda t: (t.completed, t.file_name.casefold()))
    return result


def root_tasks(collection: TaskCollection) -> list[FileTask]:
    """Root tasks across all files, ordered by file order then line number."""
    position = _positions(collection.file_order)
    roots = [task for task in collection.all_tasks if task.parent_task is None]
    return sorted(roots, key=lambda t: (position.get(t.file_path, len(position)), t.line_number))


def split_by_effective_completion(
    roots: Iterable[FileTask],
) -> tuple[list[FileTask], list[FileTask]]:
    """Split roots into ``(pending, done)`` using ``effectively_complete``."""
    pending: list[FileTask] = []
    done: list[FileTask] = []
    for task in roots:
        (done if task.effectively_complete else pending).append(task)
    return pending, done
