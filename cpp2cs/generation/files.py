"""Assembly of complete C# files from a conversion plan."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ..config import ConverterConfig
from ..models import MethodModel, TypeModel
from ..reconcile import ConversionPlan, OutputFile
from .classes import render_class, render_embedded_type
from .indentation import IndentLevel
from .interfaces import defines_class_name, has_defines_class, render_defines_class, render_interface
from .types import TypeMapper
from .writer import CodeWriter


@dataclass
class GeneratedFile:
    name: str
    content: str

    @property
    def file_name(self) -> str:
        return f"{self.name}.cs"


@dataclass
class FileRenderer:
    """Renders every output file of a plan with the configured namespace and usings."""

    config: ConverterConfig
    mapper: TypeMapper = field(init=False)

    def __post_init__(self) -> None:
        self.mapper = TypeMapper(self.config.type_map)

    def render_plan(self, plan: ConversionPlan) -> List[GeneratedFile]:
        defines_types = [t for t in plan.types if has_defines_class(t)]
        static_usings = [
            f"{self.config.namespace.resolve(t.header_file)}.{defines_class_name(t)}" for t in defines_types
        ]
        generated = [self.render_file(output, plan.implementations, static_usings) for output in plan.files]
        for model in defines_types:
            generated.append(self.render_defines_file(model))
        return sorted(generated, key=lambda g: g.name)

    def _open(self, writer: CodeWriter, banner: Sequence[str], usings: Sequence[str], namespace: str) -> None:
        if banner:
            writer.lines(banner)
            writer.blank()
        for using in usings:
            writer.line(f"using {using};")
        if usings:
            writer.blank()
        if self.config.namespace.file_scoped:
            writer.line(f"namespace {namespace};")
            writer.blank()
        else:
            writer.line(f"namespace {namespace}")
            writer.line("{")

    def _close(self, writer: CodeWriter) -> None:
        writer.trim_trailing_blank()
        if not self.config.namespace.file_scoped:
            writer.line("}")

    def _writer(self) -> CodeWriter:
        return CodeWriter(shift=-1 if self.config.namespace.file_scoped else 0)

    def render_file(
        self,
        output: OutputFile,
        implementations: Sequence[MethodModel] = (),
        static_usings: Sequence[str] = (),
    ) -> GeneratedFile:
        writer = self._writer()
        own_defines = {
            f"{self.config.namespace.resolve(s.type.header_file)}.{defines_class_name(s.type)}"
            for s in output.sections
            if has_defines_class(s.type)
        }
        usings = self.config.namespace.usings_for(interfaces_only=output.is_interface_only)
        usings += [f"static {u}" for u in static_usings if u not in own_defines]
        namespace = self.config.namespace.resolve(output.header_stem or output.name)
        self._open(writer, output.banner_comments, usings, namespace)

        for model in output.embedded_types:
            render_embedded_type(writer, model, self.mapper, IndentLevel.TYPE)
            writer.blank()
        for section in output.sections:
            if section.type.is_interface:
                render_interface(
                    writer,
                    section,
                    self.mapper,
                    implementations=implementations,
                    create_attribute=self.config.create_attribute,
                )
            else:
                render_class(writer, section, self.mapper, IndentLevel.TYPE)
            writer.blank()

        self._close(writer)
        return GeneratedFile(name=output.name, content=writer.render(self.config.line_ending))

    def render_defines_file(self, model: TypeModel) -> GeneratedFile:
        writer = self._writer()
        usings = self.config.namespace.usings_for(interfaces_only=True)
        self._open(writer, [], usings, self.config.namespace.resolve(model.header_file))
        render_defines_class(writer, model, IndentLevel.TYPE)
        self._close(writer)
        return GeneratedFile(name=defines_class_name(model), content=writer.render(self.config.line_ending))


def render_plan(plan: ConversionPlan, config: ConverterConfig) -> Dict[str, str]:
    """Map of ``.cs`` file names to their content."""
    return {g.file_name: g.content for g in FileRenderer(config).render_plan(plan)}


__all__ = ["FileRenderer", "GeneratedFile", "render_plan"]
