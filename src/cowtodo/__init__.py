"""cowtodo: collect markdown checkbox tasks from files and show them, optionally through a cow."""

from cowtodo.config import VERSION

__version__ = VERSION
