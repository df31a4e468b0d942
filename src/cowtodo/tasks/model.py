"""Task, FileTask and TaskCollection data models shared by parser, views and renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Task:
    text: str
    content: str
    completed: bool = False
    line_number: int = 1
    indent: int = 0
    context: str = ""
    # Back-reference only; the parent owns the child through ``child_tasks``.
    parent_task: Task | None = field(default=None, repr=False, compare=False)
    # Structure is compared through to_dict(); deep trees must not recurse here.
    child_tasks: list[Task] = field(default_factory=list, repr=False, compare=False)
    all_children_complete: bool = True
    effectively_complete: bool = False

    def __post_init__(self) -> None:
        if not self.child_tasks:
            self.effectively_complete = self.completed

    def to_dict(self) -> dict[str, Any]:
        """Serialize the task alone; parent and children are referenced by line number."""
        return {
            "text": self.text,
            "content": self.content,
            "completed": self.completed,
            "line": self.line_number,
            "indent": self.indent,
            "context": self.context,
            "parent": self.parent_task.line_number if self.parent_task else None,
            "all_children_complete": self.all_children_complete,
            "effectively_complete": self.effectively_complete,
            "children": [child.line_number for child in self.child_tasks],
        }


@dataclass
class FileTask(Task):
    file_path: str = ""
    file_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["file"] = self.file_path
        return data


@dataclass
class TaskCounts:
    completed: int = 0
    total: int = 0


@dataclass
class Summary:
    total_files: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0
    completion_percentage: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total_files": self.total_files,
            "total_tasks": self.total_tasks,
            "completed_tasks": self.completed_tasks,
            "completion_percentage": self.completion_percentage,
        }


@dataclass
class TaskCollection:
    all_tasks: list[FileTask] = field(default_factory=list)
    tasks_by_file: dict[str, list[FileTask]] = field(default_factory=dict)
    file_order: list[str] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary)

    def get_file_tasks(self, file_path: str) -> list[FileTask]:
        return self.tasks_by_file.get(file_path, [])


@dataclass
class ParsedFile:
    """Result of processing one file: linked tasks in source order plus raw counts."""

    tasks: list[Task] = field(default_factory=list)
    counts: TaskCounts = field(default_factory=TaskCounts)

    @property
    def roots(self) -> list[Task]:
        return [task for task in self.tasks if task.parent_task is None]
