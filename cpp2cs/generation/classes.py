"""Rendering of classes and structs, including partial fragments."""

from __future__ import annotations

from typing import List, Sequence

from ..models import DefineModel, MethodModel, TypeKind, TypeModel
from ..reconcile import TypeSection, defines_of
from .indentation import IndentLevel
from .members import render_member
from .methods import render_method
from .types import TypeMapper
from .writer import CodeWriter


def is_static_class(model: TypeModel) -> bool:
    """True when every member and method is static and there is at least one of them."""
    if model.kind is TypeKind.STRUCT:
        return False
    if not model.members and not model.methods:
        return False
    if any(m.is_constructor or m.is_destructor for m in model.methods):
        return False
    return all(m.is_static for m in model.members) and all(m.is_static for m in model.methods)


def class_declaration(model: TypeModel, *, partial: bool) -> str:
    modifiers = [model.visibility.value]
    if is_static_class(model):
        modifiers.append("static")
    if partial:
        modifiers.append("partial")
    declaration = f"{' '.join(modifiers)} class {model.name}"
    if model.base_names:
        declaration += " : " + ", ".join(model.base_names)
    return declaration


def write_defines(
    writer: CodeWriter, defines: Sequence[DefineModel], level: int, access: str = ""
) -> None:
    """Defines with comments get a blank line above; plain consecutive defines stay together."""
    for index, define in enumerate(defines):
        if define.preceding_comments and index > 0:
            writer.blank()
        writer.lines(define.preceding_comments, level)
        writer.line(define.to_csharp(access or None), level)


def render_class(
    writer: CodeWriter,
    section: TypeSection,
    mapper: TypeMapper,
    level: int = IndentLevel.TYPE,
) -> None:
    model = section.type
    if section.is_main:
        writer.lines(model.preceding_comments, level)
    writer.line(class_declaration(model, partial=section.is_partial), level)
    writer.line("{", level)

    inner = level + 1
    wrote_any = False
    if section.is_main:
        defines = defines_of(model)
        if defines:
            write_defines(writer, defines, inner)
            writer.blank()
            wrote_any = True
        for member in model.members:
            render_member(writer, member, mapper, inner)
            wrote_any = True

    methods: List[MethodModel] = section.methods
    for method in methods:
        if wrote_any:
            writer.blank()
        render_method(writer, method, mapper, model.name, inner)
        wrote_any = True

    writer.trim_trailing_blank()
    writer.line("}", level)


def render_embedded_type(writer: CodeWriter, model: TypeModel, mapper: TypeMapper, level: int = IndentLevel.TYPE) -> None:
    render_class(writer, TypeSection(type=model, methods=list(model.methods)), mapper, level)


__all__ = [
    "class_declaration",
    "is_static_class",
    "render_class",
    "render_embedded_type",
    "write_defines",
]
