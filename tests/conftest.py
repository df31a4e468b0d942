"""Shared fixtures for cowtodo tests.

File handling in tests:
- Use tmp_path for any markdown file creation so tests are isolated and cleaned up.
- Files are written as UTF-8, matching how cowtodo reads them.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cowtodo import log
from cowtodo.tasks.collection import collect_tasks
from cowtodo.tasks.model import TaskCollection


@pytest.fixture(autouse=True)
def _quiet_log():
    """Verbose mode is module state; never let one test leak it into another."""
    log.set_verbose(False)
    yield
    log.set_verbose(False)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("COWTODO_EYES", "COWTODO_NO_COW", "COWTODO_DEBOUNCE_MS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_md(tmp_path: Path):
    """Factory fixture: write a markdown file under tmp_path and return its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


SHOPPING = "- [ ] Buy milk\n  - [x] 2% milk\n- [x] Pay rent\n"

PROJECT = """# Project

## Setup
- [x] Create repo
  - [x] Add README
- [ ] Write parser
  - [x] Task lines
  - [ ] Headings

# Later
* [X] Ship it
"""


@pytest.fixture
def shopping_text() -> str:
    return SHOPPING


@pytest.fixture
def project_text() -> str:
    return PROJECT


@pytest.fixture
def two_file_collection() -> TaskCollection:
    """``b.md`` deliberately listed before ``a.md``."""
    return collect_tasks({"a.md": SHOPPING, "docs/b.md": PROJECT}, ["docs/b.md", "a.md"])
