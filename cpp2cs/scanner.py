"""Discovery of C++ header and implementation files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from .logging import get_logger

HEADER_SUFFIXES = {".h"}
SOURCE_SUFFIXES = {".cpp"}

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".vs",
    ".venv",
    "__pycache__",
    "Debug",
    "Release",
    "x64",
}


@dataclass
class ExcludeRule:
    """A glob from ``exclude_paths``; patterns with a slash match the relative path."""

    pattern: str
    directory_only: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.has_slash:
            return fnmatchcase(rel_path, self.pattern) or rel_path.startswith(f"{self.pattern}/")
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _build_rule(pattern: str) -> ExcludeRule | None:
    pattern = pattern.strip().lstrip("/")
    if not pattern:
        return None
    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]
    return ExcludeRule(pattern=pattern, directory_only=directory_only, has_slash="/" in pattern)


def build_rules(patterns: Iterable[str]) -> List[ExcludeRule]:
    rules = []
    for pattern in patterns:
        rule = _build_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def _excluded(rel_path: str, is_dir: bool, rules: Sequence[ExcludeRule]) -> bool:
    return any(rule.matches(rel_path, is_dir) for rule in rules)


def _iter_files(root: Path, rules: Sequence[ExcludeRule], skip: Sequence[Path]) -> Iterator[Path]:
    skipped = {path.resolve() for path in skip}
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept = []
        for name in dirnames:
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if name in _EXCLUDED_DIRS or (current_dir / name).resolve() in skipped:
                continue
            if _excluded(rel_path, True, rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in filenames:
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _excluded(rel_path, False, rules):
                continue
            yield current_dir / filename


@dataclass
class SourceSet:
    """Headers and implementation files selected for one conversion run."""

    root: Path
    headers: List[Path] = field(default_factory=list)
    sources: List[Path] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.headers) + len(self.sources)


class SourceScanner:
    """Walks a source tree for ``.h``/``.cpp`` files in a stable order."""

    def __init__(self, exclude_paths: Iterable[str] = ()) -> None:
        self._rules = build_rules(exclude_paths)
        self._logger = get_logger("scanner")

    def scan(self, root: Path, *, skip: Sequence[Path] = ()) -> SourceSet:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Source path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Source path is not a directory: {root}")

        found = SourceSet(root=root_path)
        for path in _iter_files(root_path, self._rules, skip):
            suffix = path.suffix.lower()
            if suffix in HEADER_SUFFIXES:
                found.headers.append(path)
            elif suffix in SOURCE_SUFFIXES:
                found.sources.append(path)
        found.headers.sort(key=lambda p: p.relative_to(root_path).as_posix())
        found.sources.sort(key=lambda p: p.relative_to(root_path).as_posix())
        self._logger.debug(
            "Found %d header(s) and %d source file(s) under %s", len(found.headers), len(found.sources), root_path
        )
        return found

    def select(self, root: Path, names: Iterable[str]) -> SourceSet:
        """Resolve explicitly requested file names; missing or unsupported ones are skipped."""
        root_path = Path(root).expanduser().resolve()
        found = SourceSet(root=root_path)
        for name in names:
            name = name.strip()
            if not name:
                continue
            path = root_path / name
            if not path.is_file():
                self._logger.warning("File '%s' not found in '%s'", name, root_path)
                continue
            suffix = path.suffix.lower()
            if suffix in HEADER_SUFFIXES:
                found.headers.append(path)
            elif suffix in SOURCE_SUFFIXES:
                found.sources.append(path)
            else:
                self._logger.warning("Unsupported file type '%s' for file '%s'", suffix, name)
        return found


__all__ = ["ExcludeRule", "SourceScanner", "SourceSet", "build_rules"]
