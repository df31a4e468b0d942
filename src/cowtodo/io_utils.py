"""UTF-8 text reading for markdown inputs, with per-path error reporting."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from cowtodo import log

PathLike = Path | str


class FileReadError(OSError):
    """A markdown input could not be read; the message names the path."""


def read_text(path: PathLike, errors: str = "strict", **kwargs: Any) -> str:
    """Read path as UTF-8 text. Relative paths resolve against the current directory."""
    p = path if isinstance(path, Path) else Path(path)
    if not p.exists():
        raise FileReadError(f"File not found: {path}")
    if not p.is_absolute():
        p = Path.cwd() / p
    try:
        return p.read_text(encoding="utf-8", errors=errors, **kwargs)
    except (OSError, UnicodeDecodeError) as exc:
        reason = exc.strerror if isinstance(exc, OSError) and exc.strerror else str(exc)
        raise FileReadError(f"Failed to read file: {path} - {reason}") from exc


def read_files(paths: Iterable[str]) -> tuple[dict[str, str], dict[str, str]]:
    """Read every path, never aborting the batch.

    Returns ``(contents, errors)``: contents of readable paths in the order
    given, and one message per failed path.
    """
    contents: dict[str, str] = {}
    errors: dict[str, str] = {}
    for path in paths:
        if path in contents or path in errors:
            continue
        try:
            contents[path] = read_text(path)
        except FileReadError as exc:
            errors[path] = str(exc)
            log.debug(f"Read failed: {exc}")
    return contents, errors
