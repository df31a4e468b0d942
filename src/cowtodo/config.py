"""Configuration defaults, env vars, and runtime options for cowtodo."""

from __future__ import annotations

import os
from dataclasses import dataclass

VERSION = "1.0.0"

DEFAULT_EYES = "oo"
DEFAULT_DEBOUNCE_MS = 200


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


@dataclass
class Config:
    """Runtime configuration built from CLI flags and environment."""

    # Views
    details: bool = False
    sort_by: str | None = None
    json_output: bool = False

    # Cow filter
    cow: bool | None = None
    cow_eyes: str = ""

    # Watch
    watch: bool = False
    debounce_ms: int | None = None

    # Misc
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.cow is None:
            self.cow = not _env_flag("COWTODO_NO_COW")
        if not self.cow_eyes:
            self.cow_eyes = os.environ.get("COWTODO_EYES") or DEFAULT_EYES
        self.cow_eyes = (self.cow_eyes + "  ")[:2]
        if self.debounce_ms is None:
            self.debounce_ms = _env_int("COWTODO_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS)
        if self.json_output:
            self.cow = False
