"""Conversion session: parse, reconcile, generate and write."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from .config import CONFIG_FILENAME, ConverterConfig, load_config
from .generation.files import FileRenderer
from .logging import get_logger
from .models import HeaderModel, SourceModel
from .parsing.header import HeaderParser
from .parsing.source import SourceParser
from .reconcile import ConversionPlan, Reconciler
from .scanner import SourceScanner, SourceSet
from .textutil import read_source


class ConversionError(RuntimeError):
    """Raised when a conversion cannot start at all."""


@dataclass
class ConversionResult:
    """Outcome of a conversion run."""

    output_dir: Optional[Path]
    written: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    contents: Dict[str, str] = field(default_factory=dict)


class Converter:
    """Coordinates one conversion session over a set of C++ files."""

    def __init__(
        self,
        config: ConverterConfig | None = None,
        *,
        header_parser: HeaderParser | None = None,
        source_parser: SourceParser | None = None,
        reconciler: Reconciler | None = None,
    ) -> None:
        self.config = config
        self.header_parser = header_parser or HeaderParser()
        self.source_parser = source_parser or SourceParser()
        self.reconciler = reconciler or Reconciler()
        self.logger = get_logger("converter")

    def _config_for(self, source_dir: Path) -> ConverterConfig:
        if self.config is None:
            self.config = load_config(source_dir / CONFIG_FILENAME)
        return self.config

    def default_output_dir(self, source_dir: Path) -> Path:
        return source_dir / self._config_for(source_dir).output_subdir

    def convert_directory(self, source_dir: Path, output_dir: Path | None = None) -> ConversionResult:
        """Convert every header/implementation file found under ``source_dir``."""
        source_dir = self._check_source_dir(source_dir)
        config = self._config_for(source_dir)
        output_dir = Path(output_dir) if output_dir is not None else self.default_output_dir(source_dir)
        self.logger.info("Converting C++ files from %s into %s", source_dir, output_dir)
        files = SourceScanner(config.exclude_paths).scan(source_dir, skip=[output_dir])
        return self.convert_files(files, output_dir)

    def convert_selected(
        self, source_dir: Path, names: Iterable[str], output_dir: Path | None = None
    ) -> ConversionResult:
        """Convert only the named files of ``source_dir``."""
        source_dir = self._check_source_dir(source_dir)
        config = self._config_for(source_dir)
        output_dir = Path(output_dir) if output_dir is not None else self.default_output_dir(source_dir)
        names = list(names)
        self.logger.info("Converting %s from %s into %s", ", ".join(names), source_dir, output_dir)
        files = SourceScanner(config.exclude_paths).select(source_dir, names)
        return self.convert_files(files, output_dir)

    def convert_files(self, files: SourceSet, output_dir: Path) -> ConversionResult:
        config = self._config_for(files.root)
        result = ConversionResult(output_dir=output_dir)
        self.logger.info("Found %d header file(s) and %d source file(s)", len(files.headers), len(files.sources))

        headers: List[HeaderModel] = []
        for path in files.headers:
            text = self._read(path, result)
            if text is not None:
                self.logger.info("Parsing header: %s", path.name)
                headers.append(self.header_parser.parse(text, str(path)))
        sources: List[SourceModel] = []
        for path in files.sources:
            text = self._read(path, result)
            if text is not None:
                self.logger.info("Parsing source: %s", path.name)
                sources.append(self.source_parser.parse(text, str(path)))

        plan = self.reconciler.reconcile(headers, sources)
        result.warnings.extend(plan.warnings)
        result.contents = self._render(plan, config)
        self._ensure_output_dir(output_dir)
        for file_name, content in sorted(result.contents.items()):
            result.written.append(self._write(output_dir / file_name, content))
        self.logger.info("Conversion completed: %d file(s) written", len(result.written))
        return result

    def convert_texts(
        self, headers: Mapping[str, str], sources: Mapping[str, str] | None = None
    ) -> ConversionResult:
        """Convert in-memory sources keyed by file name; nothing touches the disk."""
        config = self.config or ConverterConfig(root=Path("."))
        plan = self.plan_texts(headers, sources)
        return ConversionResult(output_dir=None, warnings=list(plan.warnings), contents=self._render(plan, config))

    def plan_texts(self, headers: Mapping[str, str], sources: Mapping[str, str] | None = None) -> ConversionPlan:
        parsed_headers = [self.header_parser.parse(text, name) for name, text in sorted(headers.items())]
        parsed_sources = [self.source_parser.parse(text, name) for name, text in sorted((sources or {}).items())]
        return self.reconciler.reconcile(parsed_headers, parsed_sources)

    # Helpers -------------------------------------------------------------------

    @staticmethod
    def _render(plan: ConversionPlan, config: ConverterConfig) -> Dict[str, str]:
        return {g.file_name: g.content for g in FileRenderer(config).render_plan(plan)}

    @staticmethod
    def _check_source_dir(source_dir: Path) -> Path:
        source_dir = Path(source_dir).expanduser().resolve()
        if not source_dir.is_dir():
            raise ConversionError(f"Source directory not found: {source_dir}")
        return source_dir

    def _read(self, path: Path, result: ConversionResult) -> Optional[str]:
        try:
            return read_source(path)
        except OSError as exc:
            self.logger.warning("Skipping %s: %s", path, exc)
            result.skipped.append(path)
            return None

    def _ensure_output_dir(self, output_dir: Path) -> None:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self.logger.error("Error creating output directory %s: %s", output_dir, exc)
            raise

    def _write(self, path: Path, content: str) -> Path:
        try:
            # newline="" keeps the configured line ending untouched.
            with path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(content)
        except OSError as exc:
            self.logger.error("Error writing C# file %s: %s", path, exc)
            raise
        self.logger.info("Generated C# file: %s", path.name)
        return path


def convert_texts(
    headers: Mapping[str, str],
    sources: Mapping[str, str] | None = None,
    config: ConverterConfig | None = None,
) -> Dict[str, str]:
    """Convenience wrapper returning ``{file name: C# text}``."""
    return Converter(config).convert_texts(headers, sources).contents


__all__ = ["ConversionError", "ConversionResult", "Converter", "convert_texts"]
