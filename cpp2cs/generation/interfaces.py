"""Rendering of interfaces, their static-method adapter and their defines class.

An interface contract only lists public instance methods. Static methods of the C++
interface move to a ``{Name}Extensions`` static class; factory-like ones construct the
implementing type, which is also named by the ``[Create(typeof(...))]`` attribute.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

from ..models import MethodModel, TypeModel, Visibility
from ..reconcile import TypeSection, defines_of
from .classes import write_defines
from .indentation import IndentLevel
from .methods import signature_lines, write_body, write_signature
from .types import TypeMapper
from .writer import CodeWriter

_NEW_EXPRESSION = re.compile(r"\bnew\s+([A-Z]\w*)\s*\(")
_CONVENTIONAL_INTERFACE = re.compile(r"^I[A-Z]")


def contract_methods(model: TypeModel) -> List[MethodModel]:
    return [
        m
        for m in model.methods
        if m.visibility is Visibility.PUBLIC and not m.is_static and not m.is_constructor and not m.is_destructor
    ]


def static_methods(model: TypeModel) -> List[MethodModel]:
    return [m for m in model.methods if m.is_static and m.visibility is Visibility.PUBLIC]


def is_factory(method: MethodModel, interface_name: str) -> bool:
    return_type = method.return_type.rstrip("*& ").strip()
    return return_type == interface_name and (
        "Instance" in method.name or "Create" in method.name or method.name.startswith("Get")
    )


def conventional_implementation(interface_name: str) -> str:
    """``ISample`` is conventionally implemented by ``CSample``."""
    if _CONVENTIONAL_INTERFACE.match(interface_name):
        return "C" + interface_name[1:]
    return "C" + interface_name


def resolve_implementing_type(model: TypeModel, implementations: Iterable[MethodModel] = ()) -> Optional[str]:
    """Find the type a static factory constructs, from a ``new X(`` in its body."""
    factories = [m for m in static_methods(model) if is_factory(m, model.name)]
    if not factories:
        return None
    names = {m.name for m in factories}
    bodies = [m.body for m in factories if m.body]
    bodies.extend(impl.body for impl in implementations if impl.name in names and impl.body)
    for body in bodies:
        match = _NEW_EXPRESSION.search(body)
        if match:
            return match.group(1)
    return conventional_implementation(model.name)


def defines_class_name(model: TypeModel) -> str:
    """``ISample`` keeps its defines in ``SampleDefines``."""
    base = model.name[1:] if _CONVENTIONAL_INTERFACE.match(model.name) else model.name
    return f"{base}Defines"


def has_defines_class(model: TypeModel) -> bool:
    return model.is_interface and model.is_exported and bool(defines_of(model))


def _instance_name(interface_name: str) -> str:
    base = interface_name[1:] if _CONVENTIONAL_INTERFACE.match(interface_name) else interface_name
    return base[:1].lower() + base[1:] if base else "instance"


def render_interface(
    writer: CodeWriter,
    section: TypeSection,
    mapper: TypeMapper,
    *,
    implementations: Iterable[MethodModel] = (),
    create_attribute: bool = True,
    level: int = IndentLevel.TYPE,
) -> None:
    model = section.type
    implementations = list(implementations)
    writer.lines(model.preceding_comments, level)
    implementing = resolve_implementing_type(model, implementations)
    if create_attribute and model.is_exported and implementing:
        writer.line(f"[Create(typeof({implementing}))]", level)

    declaration = f"{model.visibility.value} interface {model.name}"
    if model.base_names:
        declaration += " : " + ", ".join(model.base_names)
    writer.line(declaration, level)
    writer.line("{", level)

    inner = level + 1
    defines = defines_of(model)
    if defines and not has_defines_class(model):
        write_defines(writer, defines, inner, access="internal")
        writer.blank()
    for method in contract_methods(model):
        writer.lines(method.header_comments, inner)
        head = f"{mapper.map_type(method.return_type)} {method.name}"
        write_signature(writer, signature_lines(head, method.parameters, mapper), inner, suffix=";")
        writer.blank()
    writer.trim_trailing_blank()
    writer.line("}", level)

    statics = static_methods(model)
    if statics:
        writer.blank()
        render_extensions(writer, model, statics, mapper, implementing, implementations, level)


def render_extensions(
    writer: CodeWriter,
    model: TypeModel,
    statics: List[MethodModel],
    mapper: TypeMapper,
    implementing: Optional[str],
    implementations: List[MethodModel],
    level: int = IndentLevel.TYPE,
) -> None:
    writer.line(f"{model.visibility.value} static class {model.name}Extensions", level)
    writer.line("{", level)
    inner = level + 1
    this_parameter = f"this {model.name} {_instance_name(model.name)}"
    for index, method in enumerate(statics):
        if index:
            writer.blank()
        writer.lines(method.header_comments, inner)
        return_type = method.return_type
        if is_factory(method, model.name):
            return_type = model.name
        return_type = mapper.map_type(return_type)
        lines = signature_lines(f"public static {return_type} {method.name}", method.parameters, mapper)
        first = lines[0]
        if first.endswith("()"):
            lines[0] = first[:-1] + f"{this_parameter})"
        else:
            separator = "" if first.endswith("(") else ", "
            open_at = first.index("(") + 1
            lines[0] = first[:open_at] + this_parameter + separator + first[open_at:]
            if first.endswith("("):
                lines[0] += ","
        write_signature(writer, lines, inner)

        body = method.body
        if body is None:
            body = next((impl.body for impl in implementations if impl.name == method.name and impl.body), None)
        if body is None and implementing and is_factory(method, model.name):
            body = f"return new {implementing}();"
        write_body(writer, method, mapper, inner, body=body)
    writer.line("}", level)


def render_defines_class(writer: CodeWriter, model: TypeModel, level: int = IndentLevel.TYPE) -> None:
    """``public static class {Name}Defines`` holding an exported interface's constants."""
    writer.line(f"public static class {defines_class_name(model)}", level)
    writer.line("{", level)
    write_defines(writer, defines_of(model), level + 1, access="public")
    writer.line("}", level)


__all__ = [
    "contract_methods",
    "conventional_implementation",
    "defines_class_name",
    "has_defines_class",
    "is_factory",
    "render_defines_class",
    "render_extensions",
    "render_interface",
    "resolve_implementing_type",
    "static_methods",
]
