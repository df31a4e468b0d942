"""Markdown scanning: checkbox task lines, heading context and per-file processing."""

from __future__ import annotations

import re

from cowtodo import log
from cowtodo.tasks.hierarchy import build_hierarchy
from cowtodo.tasks.model import ParsedFile, Task, TaskCounts

# ``- [ ] text`` / ``* [x] text``; any single character may sit in the box.
TASK_PATTERN = re.compile(r"^(\s*)[-*] \[(.)\] (.+)$")
HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")

NO_HEADING = ""


def _split_lines(markdown_text: str) -> list[str]:
    """Split on ``\\n`` only, dropping a trailing ``\\r`` so CRLF files parse the same."""
    return [line[:-1] if line.endswith("\r") else line for line in markdown_text.split("\n")]


def extract_tasks(markdown_text: str) -> list[Task]:
    """Return one unlinked :class:`Task` per checkbox line, in source order.

    Indentation is approximated as two whitespace characters per level.
    """
    tasks: list[Task] = []
    for index, line in enumerate(_split_lines(markdown_text)):
        match = TASK_PATTERN.match(line)
        if not match:
            continue
        indentation, checkmark, content = match.groups()
        tasks.append(
            Task(
                text=line.strip(),
                content=content.strip(),
                completed=checkmark.lower() == "x",
                line_number=index + 1,
                indent=len(indentation) // 2,
            )
        )
    return tasks


def extract_heading_context(markdown_text: str) -> dict[int, str]:
    """Map every 1-based line number to the heading active at that line.

    A heading only replaces the active one when its level is the same or
    shallower; deeper headings never become the context.
    """
    heading_context: dict[int, str] = {}
    current_heading = NO_HEADING
    current_level = 0

    for index, line in enumerate(_split_lines(markdown_text)):
        match = HEADING_PATTERN.match(line)
        if match:
            hashes, heading = match.groups()
            level = len(hashes)
            if current_level == 0 or level <= current_level:
                current_heading = heading.strip()
                current_level = level
        heading_context[index + 1] = current_heading

    return heading_context


def add_context_to_tasks(tasks: list[Task], heading_context: dict[int, str]) -> list[Task]:
    """Set ``context`` on each task from its line number (empty when unknown)."""
    for task in tasks:
        task.context = heading_context.get(task.line_number, NO_HEADING)
    return tasks


def count_tasks(tasks: list[Task]) -> TaskCounts:
    """Count raw checkbox state; ``effectively_complete`` is ignored."""
    return TaskCounts(
        completed=sum(1 for task in tasks if task.completed),
        total=len(tasks),
    )


def process_file(markdown_text: str) -> ParsedFile:
    """Parse one file's text into context-annotated, hierarchy-linked tasks plus counts."""
    tasks = extract_tasks(markdown_text)
    add_context_to_tasks(tasks, extract_heading_context(markdown_text))
    build_hierarchy(tasks)
    counts = count_tasks(tasks)
    log.debug(f"Parsed {counts.total} task(s), {counts.completed} checked")
    return ParsedFile(tasks=tasks, counts=counts)
