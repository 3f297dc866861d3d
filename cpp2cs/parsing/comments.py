"""Comment collection shared by the header and source builders."""

from __future__ import annotations

from typing import List, Optional, Set, Tuple

from ..textutil import strip_common_indent


def is_comment_line(stripped: str) -> bool:
    return stripped.startswith("//") or stripped.startswith("/*")


def collect_preceding_comments(
    lines: List[str], index: int, claimed: Optional[Set[int]] = None
) -> Tuple[List[str], int]:
    """Collect the comment lines directly above ``lines[index]``.

    Walks upward over ``//`` lines and whole ``/* */`` blocks. Blank lines are only
    crossed when another comment block sits above them. Returns the lines with their
    common indentation stripped, plus that indentation.
    """
    claimed = claimed if claimed is not None else set()
    collected: List[int] = []
    cursor = index - 1
    while cursor >= 0 and cursor not in claimed:
        stripped = lines[cursor].strip()
        if stripped.startswith("//"):
            collected.append(cursor)
            cursor -= 1
            continue
        if stripped.endswith("*/"):
            start = _find_block_comment_start(lines, cursor)
            if start is None or any(i in claimed for i in range(start, cursor + 1)):
                break
            if not lines[start].strip().startswith("/*"):
                # Code precedes the comment on its opening line.
                break
            collected.extend(range(cursor, start - 1, -1))
            cursor = start - 1
            continue
        if not stripped and collected:
            above = cursor
            while above >= 0 and not lines[above].strip():
                above -= 1
            if above >= 0 and above not in claimed and _ends_comment(lines[above].strip()):
                collected.extend(range(cursor, above, -1))
                cursor = above
                continue
        break

    if not collected:
        return [], 0
    ordered = [lines[i] for i in sorted(collected)]
    stripped_lines, indent = strip_common_indent(ordered)
    claimed.update(collected)
    return stripped_lines, indent


def extract_banner_comments(lines: List[str]) -> Tuple[List[str], Set[int]]:
    """Return comments that open a file ahead of its first preprocessor directive."""
    collected: List[int] = []
    in_block = False
    for index, line in enumerate(lines):
        stripped = line.strip()
        if in_block:
            collected.append(index)
            if "*/" in stripped:
                in_block = False
            continue
        if not stripped:
            if collected:
                collected.append(index)
            continue
        if stripped.startswith("//"):
            collected.append(index)
            continue
        if stripped.startswith("/*"):
            collected.append(index)
            in_block = "*/" not in stripped
            continue
        if stripped.startswith("#"):
            break
        # Code before any directive: the comments belong to that code.
        return [], set()

    while collected and not lines[collected[-1]].strip():
        collected.pop()
    if not collected:
        return [], set()
    banner, _ = strip_common_indent([lines[i] for i in collected])
    return banner, set(collected)


def _find_block_comment_start(lines: List[str], end: int) -> Optional[int]:
    for cursor in range(end, -1, -1):
        if "/*" in lines[cursor]:
            return cursor
    return None


def _ends_comment(stripped: str) -> bool:
    return stripped.startswith("//") or stripped.endswith("*/")


__all__ = [
    "collect_preceding_comments",
    "extract_banner_comments",
    "is_comment_line",
]
