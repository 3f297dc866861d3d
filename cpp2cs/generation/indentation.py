"""Indentation levels and block reindentation for generated C#."""

from __future__ import annotations

from enum import IntEnum
from typing import Iterable, List

from ..textutil import expand_tabs, leading_width, normalize_newlines

INDENT_UNIT = 4


class IndentLevel(IntEnum):
    NAMESPACE = 0
    TYPE = 1
    MEMBER = 2
    BODY = 3


def indent(level: int) -> str:
    return " " * (max(level, 0) * INDENT_UNIT)


def detect_indent(text: str) -> int:
    """Minimum leading width of the non-blank lines of ``text``."""
    widths = [leading_width(line) for line in normalize_newlines(text).split("\n") if line.strip()]
    return min(widths) if widths else 0


def collapse_blank_lines(lines: Iterable[str], blank: str = "") -> List[str]:
    """Drop runs of blank lines down to one, written as ``blank``."""
    result: List[str] = []
    previous_blank = False
    for line in lines:
        if not line.strip():
            if not previous_blank:
                result.append(blank)
            previous_blank = True
            continue
        result.append(line)
        previous_blank = False
    return result


def reindent(text: str, level: int) -> List[str]:
    """Re-home a captured block at ``level``, keeping its relative indentation.

    The block's minimum indentation becomes exactly ``level * INDENT_UNIT`` whatever
    baseline it had in the C++ file. Leading and trailing blank lines are dropped; interior
    blank lines carry exactly the target indentation and nothing else.
    """
    lines = [expand_tabs(line).rstrip() for line in normalize_newlines(text).split("\n")]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    baseline = min((leading_width(line) for line in lines if line), default=0)
    prefix = indent(level)
    rebased = [prefix + line[baseline:] if line else "" for line in lines]
    return collapse_blank_lines(rebased, blank=prefix)


__all__ = [
    "INDENT_UNIT",
    "IndentLevel",
    "collapse_blank_lines",
    "detect_indent",
    "indent",
    "reindent",
]
