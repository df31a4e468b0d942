"""CLI tests: every flag parses, views reach the terminal, failures are reported."""

from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from cowtodo.cli import WELCOME, load_collection, main


def _run_cli(args: list[str], cwd: Path | None = None, timeout: int = 30) -> subprocess.CompletedProcess:
    """Run cowtodo as a subprocess via ``python -m``."""
    cmd = [sys.executable, "-m", "cowtodo"] + args
    return subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
    )


@pytest.fixture
def cli_runner():
    """Click CliRunner for invoking the CLI in-process."""
    from click.testing import CliRunner
    return CliRunner()


@pytest.fixture
def todo_files(write_md, shopping_text, project_text) -> tuple[str, str]:
    a = write_md("a.md", shopping_text)
    b = write_md("docs/b.md", project_text)
    return str(a), str(b)


# ── Help, version, welcome ─────────────────────────────────────────────


class TestCliHelpAndVersion:
    def test_help_long(self, cli_runner):
        r = cli_runner.invoke(main, ["--help"])
        assert r.exit_code == 0
        assert "cowtodo" in r.output
        assert "--watch" in r.output

    def test_help_short(self, cli_runner):
        r = cli_runner.invoke(main, ["-h"])
        assert r.exit_code == 0

    def test_version(self, cli_runner):
        r = cli_runner.invoke(main, ["--version"])
        assert r.exit_code == 0
        assert "cowtodo" in r.output.lower()

    def test_welcome_cow(self, cli_runner):
        r = cli_runner.invoke(main, [])
        assert r.exit_code == 0
        assert WELCOME in r.output
        assert "(^^)" in r.output
        assert "U  ||----w |" in r.output

    def test_welcome_without_cow(self, cli_runner):
        r = cli_runner.invoke(main, ["--no-cow"])
        assert r.exit_code == 0
        assert r.output.strip() == WELCOME


# ── Views ───────────────────────────────────────────────────────────────


class TestCliViews:
    def test_default_backlog_through_cow(self, cli_runner, todo_files):
        a, b = todo_files
        r = cli_runner.invoke(main, [b, a])
        assert r.exit_code == 0
        assert "/ ## Backlog" in r.output
        assert "(oo)" in r.output
        assert r.output.index("Write parser") < r.output.index("Buy milk")

    def test_argument_order_is_file_order(self, cli_runner, todo_files):
        a, b = todo_files
        r = cli_runner.invoke(main, [a, b, "--no-cow"])
        assert r.output.index("Buy milk") < r.output.index("Write parser")

    def test_no_cow_plain_output(self, cli_runner, todo_files):
        a, _ = todo_files
        r = cli_runner.invoke(main, [a, "--no-cow"])
        assert r.exit_code == 0
        assert r.output.splitlines()[:3] == ["## Backlog", "", "- [ ] Buy milk"]

    def test_env_disables_cow(self, cli_runner, todo_files, monkeypatch):
        monkeypatch.setenv("COWTODO_NO_COW", "1")
        r = cli_runner.invoke(main, [todo_files[0]])
        assert "(oo)" not in r.output

    def test_details(self, cli_runner, todo_files):
        a, b = todo_files
        r = cli_runner.invoke(main, [a, b, "-d", "--no-cow"])
        assert r.exit_code == 0
        assert f"{a} (3)" in r.output
        assert f"{b} (6)" in r.output

    def test_by_context(self, cli_runner, todo_files):
        r = cli_runner.invoke(main, [todo_files[1], "--by-context", "--no-cow"])
        assert r.output.splitlines()[0] == "Project (5)"

    @pytest.mark.parametrize("sort_by", ["file", "context", "completion"])
    def test_sort_choices(self, cli_runner, todo_files, sort_by):
        r = cli_runner.invoke(main, [*todo_files, "--sort", sort_by, "--no-cow"])
        assert r.exit_code == 0
        assert len(r.output.strip().splitlines()) == 9

    def test_sort_invalid(self, cli_runner, todo_files):
        r = cli_runner.invoke(main, [todo_files[0], "--sort", "size"])
        assert r.exit_code != 0

    def test_only_requires_grouped_view(self, cli_runner, todo_files):
        r = cli_runner.invoke(main, [todo_files[0], "--only", "done"])
        assert r.exit_code != 0
        assert "--only" in r.output

    def test_only_done(self, cli_runner, todo_files):
        r = cli_runner.invoke(main, [todo_files[0], "-d", "--only", "done", "--no-cow"])
        assert r.exit_code == 0
        assert "Buy milk" not in r.output
        assert "Pay rent" in r.output

    def test_eyes(self, cli_runner, todo_files):
        r = cli_runner.invoke(main, [todo_files[0], "--eyes", "**"])
        assert "(**)" in r.output

    def test_verbose_summary(self, cli_runner, todo_files):
        r = cli_runner.invoke(main, [*todo_files, "-v", "--no-cow"])
        assert r.exit_code == 0
        assert "6/9 tasks complete (67%) across 2 file(s)" in r.output

    def test_json(self, cli_runner, todo_files):
        a, b = todo_files
        r = cli_runner.invoke(main, [b, a, "--json"])
        assert r.exit_code == 0
        data = json.loads(r.output)
        assert data["file_order"] == [b, a]
        assert data["summary"]["total_tasks"] == 9

    def test_json_only_done(self, cli_runner, todo_files):
        r = cli_runner.invoke(main, [todo_files[0], "--json", "--only", "done"])
        assert r.exit_code == 0
        data = json.loads(r.output)
        assert [t["content"] for t in data["files"][todo_files[0]]] == ["2% milk", "Pay rent"]

    def test_json_deep_nesting(self, cli_runner, write_md):
        depth = 1200
        path = write_md("deep.md", "".join(f"{'  ' * i}- [x] level {i}\n" for i in range(depth)))
        r = cli_runner.invoke(main, [str(path), "--json"])
        assert r.exit_code == 0, r.output
        data = json.loads(r.output)
        assert data["summary"]["completion_percentage"] == 100
        assert len(data["files"][str(path)]) == depth

    def test_json_and_watch_conflict(self, cli_runner, todo_files):
        r = cli_runner.invoke(main, [todo_files[0], "--json", "--watch"])
        assert r.exit_code != 0

    def test_no_tasks_message(self, cli_runner, write_md):
        path = write_md("empty.md", "# nothing here\n")
        r = cli_runner.invoke(main, [str(path), "--no-cow"])
        assert r.exit_code == 0
        assert "No tasks found in the provided files." in r.output


# ── Failures ────────────────────────────────────────────────────────────


class TestCliErrors:
    def test_missing_file_only(self, cli_runner, tmp_path):
        missing = str(tmp_path / "nope.md")
        r = cli_runner.invoke(main, [missing])
        assert r.exit_code == 1
        assert f"File not found: {missing}" in r.output
        assert "(xx)" in r.output

    def test_partial_failure_still_renders(self, cli_runner, todo_files, tmp_path):
        missing = str(tmp_path / "nope.md")
        r = cli_runner.invoke(main, [todo_files[0], missing, "--no-cow"])
        assert r.exit_code == 0
        assert "[ERROR] File not found" in r.output
        assert "Buy milk" in r.output

    def test_load_collection_drops_failed_paths(self, todo_files, tmp_path):
        missing = str(tmp_path / "nope.md")
        collection, errors = load_collection([missing, todo_files[0]])
        assert collection.file_order == [todo_files[0]]
        assert collection.summary.total_files == 1
        assert list(errors) == [missing]


# ── Watch wiring ────────────────────────────────────────────────────────


class TestCliWatch:
    def test_watch_hands_off_to_watcher(self, cli_runner, todo_files):
        with patch("cowtodo.watch.watch") as fake_watch:
            r = cli_runner.invoke(main, [todo_files[0], "--watch", "--debounce", "10"])
        assert r.exit_code == 0
        fake_watch.assert_called_once()
        args, kwargs = fake_watch.call_args
        assert args[0] == [todo_files[0]]
        assert kwargs["debounce_ms"] == 10
        load, draw = args[1], args[2]
        collection = load()
        assert collection.summary.total_tasks == 3
        assert "Buy milk" in str(draw(collection, set()).renderables[-1])


# ── Module entry point ─────────────────────────────────────────────────


class TestModuleEntry:
    def test_python_m(self, todo_files):
        r = _run_cli([todo_files[0], "--no-cow"])
        assert r.returncode == 0
        assert "## Backlog" in r.stdout
