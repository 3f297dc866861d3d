"""Line buffer shared by the C# generators."""

from __future__ import annotations

from typing import Iterable, List

from .indentation import indent, reindent


class CodeWriter:
    """Collects output lines at explicit nesting levels.

    ``shift`` offsets every non-zero level; a file-scoped namespace renders types one
    level shallower than a braced one.
    """

    def __init__(self, shift: int = 0) -> None:
        self.shift = shift
        self._lines: List[str] = []

    def _prefix(self, level: int) -> str:
        return indent(level + self.shift if level > 0 else 0)

    def line(self, text: str = "", level: int = 0) -> None:
        if not text:
            self._lines.append("")
            return
        self._lines.append(self._prefix(level) + text)

    def lines(self, texts: Iterable[str], level: int = 0) -> None:
        for text in texts:
            self.line(text, level)

    def block(self, text: str, level: int) -> None:
        """Emit a captured multi-line block re-homed at ``level``."""
        for text_line in reindent(text, max(level + self.shift, 0)):
            self._lines.append(text_line)

    def blank(self) -> None:
        """Add one blank line unless the buffer is empty or already ends with one."""
        if self._lines and self._lines[-1] != "":
            self._lines.append("")

    def trim_trailing_blank(self) -> None:
        while self._lines and self._lines[-1] == "":
            self._lines.pop()

    @property
    def last(self) -> str:
        return self._lines[-1] if self._lines else ""

    def render(self, line_ending: str = "\n") -> str:
        self.trim_trailing_blank()
        return line_ending.join(self._lines) + line_ending


__all__ = ["CodeWriter"]
