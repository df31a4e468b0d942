"""Rebuild the task forest from indentation and propagate completion.

The reconstruction is a textual heuristic over indentation, not a list
parser: every task is attached to the nearest preceding task with a
shallower indent, whatever the size of the gap.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar

from cowtodo.tasks.model import Task

T = TypeVar("T", bound=Task)


def build_hierarchy(tasks: Sequence[T]) -> list[T]:
    """Link ``parent_task``/``child_tasks`` and compute completion flags.

    *tasks* is one file's task list; links are reset first so the call is
    repeatable. Returns the root tasks in source order.
    """
    ordered = sorted(tasks, key=lambda t: t.line_number)
    for task in ordered:
        task.parent_task = None
        task.child_tasks = []

    roots: list[T] = []
    stack: list[T] = []
    for task in ordered:
        while stack and stack[-1].indent >= task.indent:
            stack.pop()
        if stack:
            parent = stack[-1]
            parent.child_tasks.append(task)
            task.parent_task = parent
        else:
            roots.append(task)
        stack.append(task)

    for root in roots:
        _propagate_completion(root)
    return roots


def _propagate_completion(root: Task) -> None:
    """Post-order pass: a task is effectively complete when it and all descendants are."""
    pending: list[tuple[Task, bool]] = [(root, False)]
    while pending:
        task, children_done = pending.pop()
        if not children_done:
            pending.append((task, True))
            pending.extend((child, False) for child in task.child_tasks)
            continue
        task.all_children_complete = all(c.effectively_complete for c in task.child_tasks)
        task.effectively_complete = task.completed and task.all_children_complete


def get_child_tasks_ordered(parent: T) -> list[T]:
    """Return every descendant of *parent* in depth-first pre-order by line number."""
    result: list[T] = []
    pending = list(reversed(_sorted_children(parent)))
    while pending:
        child = pending.pop()
        result.append(child)
        pending.extend(reversed(_sorted_children(child)))
    return result


def flatten_with_descendants(roots: Iterable[T]) -> list[T]:
    """Expand roots, kept in the given order, each followed by all of its descendants."""
    result: list[T] = []
    for root in roots:
        result.append(root)
        result.extend(get_child_tasks_ordered(root))
    return result


def _sorted_children(task: T) -> list[T]:
    return sorted(task.child_tasks, key=lambda t: t.line_number)  # type: ignore[arg-type]
