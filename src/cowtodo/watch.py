"""Watch the input files and re-render on change.

Every change triggers a full re-read and re-parse; nothing carries over
between renders except the set of task keys used for highlighting.
"""

from __future__ import annotations

import queue
import time
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

from rich.console import RenderableType
from rich.live import Live
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from cowtodo import log
from cowtodo.render import TaskKey, task_key
from cowtodo.tasks.model import TaskCollection


def changed_task_keys(previous: TaskCollection | None, current: TaskCollection) -> set[TaskKey]:
    """Keys of tasks that are new or edited since *previous*; empty on the first render."""
    if previous is None:
        return set()
    before = {task_key(task) for task in previous.all_tasks}
    return {task_key(task) for task in current.all_tasks} - before


class _ChangeHandler(FileSystemEventHandler):
    """Forward events for the watched files to a queue, as the path the user gave."""

    def __init__(self, targets: dict[Path, str], events: queue.Queue[str]) -> None:
        super().__init__()
        self.targets = targets
        self.events = events

    def _forward(self, raw: Any) -> None:
        if not raw:
            return
        path = raw.decode() if isinstance(raw, bytes) else str(raw)
        target = self.targets.get(Path(path).resolve())
        if target is not None:
            self.events.put(target)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path)

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._forward(getattr(event, "dest_path", ""))


class FileWatcher:
    """Watches the parent directories of *paths* and queues changed paths.

    Usage::

        watcher = FileWatcher(paths)
        watcher.start()
        changed = watcher.wait(timeout=1.0, debounce_ms=200)
        watcher.stop()
    """

    def __init__(self, paths: Iterable[str]) -> None:
        self.targets: dict[Path, str] = {}
        for path in paths:
            self.targets.setdefault(Path(path).resolve(), path)
        self.events: queue.Queue[str] = queue.Queue()
        self._observer: Any = None

    def start(self) -> None:
        if self._observer is not None:
            return
        handler = _ChangeHandler(self.targets, self.events)
        observer = Observer()
        for directory in sorted({p.parent for p in self.targets}):
            if directory.is_dir():
                observer.schedule(handler, str(directory), recursive=False)
                log.debug(f"Watching {directory}")
            else:
                log.warn(f"Cannot watch missing directory: {directory}")
        observer.start()
        self._observer = observer

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=2.0)
        self._observer = None

    def wait(self, timeout: float | None = None, debounce_ms: int = 0) -> set[str]:
        """Block until a change arrives, then collect follow-ups for *debounce_ms*.

        Returns the changed paths, or an empty set when *timeout* expires.
        """
        try:
            first = self.events.get(timeout=timeout)
        except queue.Empty:
            return set()
        changed = {first}
        deadline = time.monotonic() + debounce_ms / 1000
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                changed.add(self.events.get(timeout=remaining))
            except queue.Empty:
                break
        return changed


def watch(
    paths: Sequence[str],
    load: Callable[[], TaskCollection],
    draw: Callable[[TaskCollection, set[TaskKey]], RenderableType],
    debounce_ms: int = 200,
) -> None:
    """Render once, then re-render after every debounced change until Ctrl-C."""
    watcher = FileWatcher(paths)
    # Observer runs before the first read; edits made during load() are queued.
    watcher.start()
    try:
        collection = load()
        with Live(draw(collection, set()), console=log.console, auto_refresh=False) as live:
            while True:
                changed_paths = watcher.wait(timeout=1.0, debounce_ms=debounce_ms)
                if not changed_paths:
                    continue
                log.debug(f"Changed: {', '.join(sorted(changed_paths))}")
                previous, collection = collection, load()
                live.update(draw(collection, changed_task_keys(previous, collection)), refresh=True)
    except KeyboardInterrupt:
        log.debug("Watch interrupted")
    finally:
        watcher.stop()
