"""Helper utilities for constructing temporary C++ source trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Iterable, Mapping

from cpp2cs.config import ConverterConfig, load_config
from cpp2cs.converter import ConversionResult, Converter


class SourceTreeBuilder:
    """Utility for writing C++ files into a throwaway source tree and converting it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "src"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the source tree."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def config(self) -> ConverterConfig:
        return load_config(self.root)

    def convert(
        self,
        names: Iterable[str] | None = None,
        output_dir: Path | None = None,
    ) -> ConversionResult:
        """Run a conversion over the whole tree, or only over ``names``."""
        converter = Converter(self.config())
        if names is None:
            return converter.convert_directory(self.root, output_dir)
        return converter.convert_selected(self.root, names, output_dir)

    def output(self, name: str, output_dir: Path | None = None) -> str:
        """Read a generated file from the default (or given) output directory."""
        base = output_dir or self.root / self.config().output_subdir
        return (base / name).read_text(encoding="utf-8")

    def path(self) -> Path:
        """Return the source tree root path."""
        return self.root


__all__ = ["SourceTreeBuilder"]
