"""Markdown checkbox task parsing, hierarchy and multi-file aggregation."""

from cowtodo.tasks.collection import (
    collect_tasks,
    filter_by_completion,
    group_by_context,
    root_tasks,
    sort_tasks,
    split_by_effective_completion,
)
from cowtodo.tasks.hierarchy import build_hierarchy, flatten_with_descendants
from cowtodo.tasks.markdown import extract_heading_context, extract_tasks, process_file
from cowtodo.tasks.model import FileTask, Summary, Task, TaskCollection, TaskCounts

__all__ = [
    "FileTask",
    "Summary",
    "Task",
    "TaskCollection",
    "TaskCounts",
    "build_hierarchy",
    "collect_tasks",
    "extract_heading_context",
    "extract_tasks",
    "filter_by_completion",
    "flatten_with_descendants",
    "group_by_context",
    "process_file",
    "root_tasks",
    "sort_tasks",
    "split_by_effective_completion",
]
