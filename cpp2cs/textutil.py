"""Shared text helpers for scanning C++ sources without a full grammar."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

TAB_WIDTH = 4

_PAIRS = {"(": ")", "<": ">", "[": "]", "{": "}"}


def normalize_newlines(text: str) -> str:
    """Collapse CRLF and bare CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def mask_code(text: str) -> str:
    """Blank out comments and string/char literals, keeping offsets and newlines intact.

    Structural scans (brace matching, pattern search) run on the masked text and slice
    the original text with the same offsets.
    """
    out = list(text)
    length = len(text)
    i = 0
    while i < length:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < length else ""
        if ch == "/" and nxt == "/":
            while i < length and text[i] != "\n":
                out[i] = " "
                i += 1
            continue
        if ch == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            end = length if end < 0 else end + 2
            for j in range(i, end):
                if text[j] != "\n":
                    out[j] = " "
            i = end
            continue
        if ch in {'"', "'"}:
            quote = ch
            j = i + 1
            while j < length and text[j] != quote and text[j] != "\n":
                j += 2 if text[j] == "\\" else 1
            end = min(j + 1, length)
            # Keep the quotes so literals still read as tokens.
            for k in range(i + 1, end - 1):
                if text[k] != "\n":
                    out[k] = " "
            i = end
            continue
        i += 1
    return "".join(out)


def find_matching(text: str, open_index: int) -> int:
    """Return the index closing the bracket at ``open_index`` or -1 when unbalanced.

    ``text`` is expected to be masked so brackets in comments and literals do not count.
    """
    open_ch = text[open_index]
    close_ch = _PAIRS[open_ch]
    depth = 0
    for index in range(open_index, len(text)):
        ch = text[index]
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return index
    return -1


def split_top_level(text: str, separator: str = ",", *, angles: bool = True) -> List[str]:
    """Split on ``separator`` outside of brackets, braces and string literals.

    Angle brackets only nest when ``angles`` is set, since ``p->x`` in an expression
    would otherwise unbalance the count.
    """
    openers = "([{<" if angles else "([{"
    closers = ")]}>" if angles else ")]}"
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    quote = ""
    escape = False
    for ch in text:
        if quote:
            current.append(ch)
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == quote:
                quote = ""
            continue
        if ch in {'"', "'"}:
            quote = ch
        elif ch in openers:
            depth += 1
        elif ch in closers:
            depth -= 1
        elif ch == separator and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def split_trailing_comment(line: str) -> Tuple[str, str]:
    """Split ``line`` into code and a trailing ``//`` comment found outside literals."""
    quote = ""
    escape = False
    for index, ch in enumerate(line):
        if quote:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == quote:
                quote = ""
        elif ch in {'"', "'"}:
            quote = ch
        elif line.startswith("//", index):
            return line[:index].rstrip(), line[index:].strip()
    return line.rstrip(), ""


def expand_tabs(line: str) -> str:
    return line.replace("\t", " " * TAB_WIDTH)


def leading_width(line: str) -> int:
    expanded = expand_tabs(line)
    return len(expanded) - len(expanded.lstrip(" "))


def strip_common_indent(lines: List[str]) -> Tuple[List[str], int]:
    """Strip the minimum leading whitespace of non-blank lines; blank lines become empty."""
    expanded = [expand_tabs(line).rstrip() for line in lines]
    widths = [leading_width(line) for line in expanded if line.strip()]
    indent = min(widths) if widths else 0
    return [line[indent:] if line.strip() else "" for line in expanded], indent


def normalize_block(text: str) -> Tuple[str, int]:
    """Normalize a captured multi-line block once, returning it with its original indent."""
    lines = normalize_newlines(text).split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    stripped, indent = strip_common_indent(lines)
    return "\n".join(stripped), indent


def read_source(path: Path) -> str:
    """Read a C++ file; legacy sources are often ANSI rather than UTF-8."""
    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = raw.decode("latin-1")
    return normalize_newlines(text)


def line_of(text: str, offset: int) -> int:
    """Zero-based line number of ``offset`` in ``text``."""
    return text.count("\n", 0, offset)


__all__ = [
    "TAB_WIDTH",
    "expand_tabs",
    "find_matching",
    "leading_width",
    "line_of",
    "mask_code",
    "normalize_block",
    "normalize_newlines",
    "read_source",
    "split_top_level",
    "split_trailing_comment",
    "strip_common_indent",
]
