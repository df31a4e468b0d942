"""cowtodo CLI: read markdown files, collect their checkbox tasks, let the cow say them.

Installed as ``cowtodo`` console_script via pipx / pip.
"""

from __future__ import annotations

from collections.abc import Sequence

import click
from rich.console import Group, RenderableType
from rich.text import Text

from cowtodo import __version__, log
from cowtodo.config import Config
from cowtodo.cow import ERROR_EYES, WELCOME_EYES
from cowtodo.io_utils import read_files
from cowtodo.render import TaskKey, message_text, render, render_json
from cowtodo.tasks.collection import SORT_CHOICES, collect_tasks
from cowtodo.tasks.model import TaskCollection

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

WELCOME = "Welcome to CowTodo! Please provide a file path to read."
ONLY_CHOICES = ("pending", "done")


def _check_flag_combination(json_output: bool, watch: bool, only: str | None, details: bool,
                            by_context: bool, sort_by: str | None) -> None:
    if json_output and watch:
        raise click.UsageError("Cannot combine --json with --watch.")
    if only and not (details or by_context or sort_by or json_output):
        raise click.UsageError(
            "--only applies to --details, --by-context, --sort or --json output."
        )


def load_collection(paths: Sequence[str]) -> tuple[TaskCollection, dict[str, str]]:
    """Read *paths* and collect their tasks; unreadable paths are returned as errors."""
    contents, errors = read_files(paths)
    return collect_tasks(contents, list(paths)), errors


def _error_renderables(errors: dict[str, str], cfg: Config) -> list[RenderableType]:
    return [
        Text(message_text(f"Error: {message}", cfg, ERROR_EYES), style="red")
        for message in errors.values()
    ]


def _report_errors(errors: dict[str, str], cfg: Config) -> None:
    if not cfg.cow:
        for message in errors.values():
            log.error(message)
        return
    for renderable in _error_renderables(errors, cfg):
        log.err_console.print(renderable, soft_wrap=True)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("files", nargs=-1)
@click.option("-d", "--details", is_flag=True, help="Group tasks by file")
@click.option("-c", "--by-context", is_flag=True, help="Group tasks by heading")
@click.option("-s", "--sort", "sort_by", type=click.Choice(SORT_CHOICES), default=None,
              help="Flat list of all tasks, sorted")
@click.option("--only", type=click.Choice(ONLY_CHOICES), default=None,
              help="Keep only pending or done tasks (grouped, sorted or JSON output)")
@click.option("--json", "json_output", is_flag=True, help="Print tasks as JSON")
@click.option("--cow/--no-cow", default=None, help="Let the cow say it (default: on)")
@click.option("--eyes", default="", help="Two characters for the cow's eyes")
@click.option("-w", "--watch", is_flag=True, help="Re-render when files change")
@click.option("--debounce", "debounce_ms", type=click.IntRange(min=0), default=None,
              help="Watch debounce in milliseconds")
@click.option("-v", "--verbose", is_flag=True, help="Show summary and debug output")
@click.version_option(__version__, prog_name="cowtodo")
@click.pass_context
def main(
    ctx: click.Context,
    files: tuple[str, ...],
    details: bool,
    by_context: bool,
    sort_by: str | None,
    only: str | None,
    json_output: bool,
    cow: bool | None,
    eyes: str,
    watch: bool,
    debounce_ms: int | None,
    verbose: bool,
) -> None:
    """cowtodo: markdown task lists, said by a cow.

    Collects ``- [ ]`` / ``- [x]`` items from FILES, rebuilds their nesting
    from indentation and shows a Backlog and a Done section. Files keep
    the order given on the command line.

    \b
    EXAMPLES:
      cowtodo TODO.md                       # Backlog / Done
      cowtodo TODO.md docs/plan.md -d       # Group by file
      cowtodo notes.md --sort completion    # Flat list, pending first
      cowtodo TODO.md --watch               # Live reload
      cowtodo TODO.md --json                # Machine-readable
    """
    log.set_verbose(verbose)
    _check_flag_combination(json_output, watch, only, details, by_context, sort_by)

    cfg = Config(
        details=details,
        sort_by=sort_by,
        json_output=json_output,
        cow=cow,
        cow_eyes=eyes,
        watch=watch,
        debounce_ms=debounce_ms,
        verbose=verbose,
    )
    log.debug("Running in verbose mode")

    if not files:
        log.console.print(Text(message_text(WELCOME, cfg, WELCOME_EYES)), soft_wrap=True)
        ctx.exit(0)

    paths = list(files)

    if cfg.watch:
        _run_watch(paths, cfg, only, by_context)
        return

    collection, errors = load_collection(paths)
    _report_errors(errors, cfg)

    if errors and len(errors) == len(set(paths)):
        ctx.exit(1)

    if cfg.json_output:
        click.echo(render_json(collection, only=only))
        return

    log.console.print(render(collection, cfg, only=only, by_context=by_context), soft_wrap=True)


def _run_watch(paths: list[str], cfg: Config, only: str | None, by_context: bool) -> None:
    from cowtodo.watch import watch

    latest_errors: dict[str, str] = {}

    def load() -> TaskCollection:
        collection, errors = load_collection(paths)
        latest_errors.clear()
        latest_errors.update(errors)
        return collection

    def draw(collection: TaskCollection, changed: set[TaskKey]) -> RenderableType:
        body = render(collection, cfg, changed=changed, only=only, by_context=by_context)
        return Group(*_error_renderables(latest_errors, cfg), body)

    log.info("Watching for changes (Ctrl-C to stop)")
    watch(paths, load, draw, debounce_ms=cfg.debounce_ms or 0)
