"""The cow: wraps any text in a speech bubble spoken by an ASCII cow."""

from __future__ import annotations

import textwrap

from rich.cells import cell_len

COW = r"""
        \   ^__^
         \  ({eyes})\_______
            (__)\       )\/\
             {tongue} ||----w |
                ||     ||"""

WELCOME_EYES = "^^"
ERROR_EYES = "xx"
TONGUE = "U "


def _normalize(part: str, default: str) -> str:
    return (part + "  ")[:2] if part else default


def _bubble_lines(text: str, width: int | None) -> list[str]:
    lines: list[str] = []
    for raw in text.expandtabs(8).split("\n"):
        raw = raw.rstrip("\r")
        if width and cell_len(raw) > width:
            lines.extend(textwrap.wrap(raw, width=width) or [""])
        else:
            lines.append(raw)
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()
    return lines


def bubble(text: str, width: int | None = None) -> str:
    """Return the speech bubble for *text*; long lines wrap when *width* is given."""
    lines = _bubble_lines(text, width)
    inner = max(cell_len(line) for line in lines)
    padded = [line + " " * (inner - cell_len(line)) for line in lines]

    out = [" " + "_" * (inner + 2)]
    if len(padded) == 1:
        out.append(f"< {padded[0]} >")
    else:
        last = len(padded) - 1
        for i, line in enumerate(padded):
            if i == 0:
                left, right = "/", "\\"
            elif i == last:
                left, right = "\\", "/"
            else:
                left, right = "|", "|"
            out.append(f"{left} {line} {right}")
    out.append(" " + "-" * (inner + 2))
    return "\n".join(out)


def say(text: str, eyes: str = "oo", tongue: str = "  ", width: int | None = None) -> str:
    """Render *text* as said by the cow.

    *eyes* and *tongue* are two characters each; shorter values are padded.
    """
    cow = COW.format(eyes=_normalize(eyes, "oo"), tongue=_normalize(tongue, "  "))
    return bubble(text, width) + cow
