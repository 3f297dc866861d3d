"""Reconciliation of per-file header and source models.

The header and source builders run independently. This module is the single pass that
joins their output: it matches declarations to implementations, enriches header methods
with bodies, attributes ownerless constructs, and plans which generated file receives
which part of each type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .attribution import choose_define_owner, choose_local_owner
from .logging import get_logger
from .models import (
    DefineModel,
    HeaderModel,
    MethodModel,
    ParameterModel,
    SourceModel,
    TypeModel,
)
from .parsing.source import implementation_owner_order


class Precedence(str, Enum):
    HEADER = "header"
    IMPLEMENTATION = "implementation"
    FIRST_NON_EMPTY = "first_non_empty"


# Which side wins when a declaration is enriched with its implementation.
METHOD_PRECEDENCE: Dict[str, Precedence] = {
    "return_type": Precedence.HEADER,
    "visibility": Precedence.HEADER,
    "is_static": Precedence.HEADER,
    "is_virtual": Precedence.HEADER,
    "is_const": Precedence.HEADER,
    "is_constructor": Precedence.HEADER,
    "is_destructor": Precedence.HEADER,
    "header_comments": Precedence.HEADER,
    "header_region_start": Precedence.HEADER,
    "header_region_end": Precedence.HEADER,
    "target_file": Precedence.IMPLEMENTATION,
    "body": Precedence.IMPLEMENTATION,
    "body_indent": Precedence.IMPLEMENTATION,
    "order_index": Precedence.IMPLEMENTATION,
    "source_comments": Precedence.IMPLEMENTATION,
    "source_comment_indent": Precedence.IMPLEMENTATION,
    "source_region_start": Precedence.IMPLEMENTATION,
    "source_region_end": Precedence.IMPLEMENTATION,
    "initializers": Precedence.FIRST_NON_EMPTY,
}

# Per-parameter precedence: names and comments follow the implementation, the type and
# default value follow the declaration.
PARAMETER_PRECEDENCE: Dict[str, Precedence] = {
    "base_type": Precedence.HEADER,
    "is_const": Precedence.HEADER,
    "is_pointer": Precedence.HEADER,
    "is_reference": Precedence.HEADER,
    "default_value": Precedence.HEADER,
    "canonical_signature": Precedence.HEADER,
    "name": Precedence.FIRST_NON_EMPTY,
    "comments": Precedence.FIRST_NON_EMPTY,
    "has_line_break": Precedence.IMPLEMENTATION,
    "original_indent": Precedence.IMPLEMENTATION,
    "original_text": Precedence.IMPLEMENTATION,
}


def _pick(precedence: Precedence, header_value, impl_value):
    if precedence is Precedence.HEADER:
        return header_value
    if precedence is Precedence.IMPLEMENTATION:
        return impl_value
    # First non-empty, implementation side first.
    return impl_value if impl_value else header_value


def merge_parameters(
    declared: Sequence[ParameterModel], implemented: Sequence[ParameterModel]
) -> List[ParameterModel]:
    merged: List[ParameterModel] = []
    for index in range(max(len(declared), len(implemented))):
        header = declared[index] if index < len(declared) else None
        impl = implemented[index] if index < len(implemented) else None
        if header is None or impl is None:
            merged.append(header or impl)
            continue
        values = {
            name: _pick(precedence, getattr(header, name), getattr(impl, name))
            for name, precedence in PARAMETER_PRECEDENCE.items()
        }
        merged.append(ParameterModel(**values))
    return merged


def merge_method(declaration: MethodModel, implementation: MethodModel) -> MethodModel:
    """Enrich ``declaration`` in place with what ``implementation`` found."""
    for name, precedence in METHOD_PRECEDENCE.items():
        value = _pick(precedence, getattr(declaration, name), getattr(implementation, name))
        setattr(declaration, name, value)
    declaration.parameters = merge_parameters(declaration.parameters, implementation.parameters)
    return declaration


class MatchKind(str, Enum):
    EXACT = "exact"
    NAME_ONLY = "name_only"
    AMBIGUOUS = "ambiguous"
    NONE = "none"


def match_declaration(
    candidates: Sequence[MethodModel], implementation: MethodModel
) -> Tuple[MatchKind, Optional[MethodModel]]:
    """Find the declaration an implementation belongs to.

    Exact per-parameter canonical signatures win. Without one, a single same-named
    candidate is accepted as best effort; several are reported as ambiguous.
    """
    named = [c for c in candidates if c.name == implementation.name]
    for candidate in named:
        if candidate.signature_key == implementation.signature_key:
            return MatchKind.EXACT, candidate
    if len(named) == 1:
        return MatchKind.NAME_ONLY, named[0]
    if named:
        return MatchKind.AMBIGUOUS, None
    return MatchKind.NONE, None


@dataclass
class TypeSection:
    """The part of one type rendered into one output file."""

    type: TypeModel
    methods: List[MethodModel] = field(default_factory=list)
    is_main: bool = True
    is_partial: bool = False


@dataclass
class OutputFile:
    name: str
    sections: List[TypeSection] = field(default_factory=list)
    embedded_types: List[TypeModel] = field(default_factory=list)
    banner_comments: List[str] = field(default_factory=list)
    header_stem: str = ""

    @property
    def is_interface_only(self) -> bool:
        types = [section.type for section in self.sections] + self.embedded_types
        return bool(types) and all(t.is_interface for t in types)


@dataclass
class ConversionPlan:
    files: List[OutputFile] = field(default_factory=list)
    types: List[TypeModel] = field(default_factory=list)
    implementations: List[MethodModel] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def file(self, name: str) -> Optional[OutputFile]:
        for output in self.files:
            if output.name == name:
                return output
        return None


class Reconciler:
    """Merges header and source models into a :class:`ConversionPlan`."""

    def __init__(self) -> None:
        self._logger = get_logger("reconcile")

    def reconcile(self, headers: Sequence[HeaderModel], sources: Sequence[SourceModel]) -> ConversionPlan:
        headers = sorted(headers, key=lambda h: h.stem)
        sources = sorted(sources, key=lambda s: s.stem)
        plan = ConversionPlan()
        types: Dict[str, TypeModel] = {}
        declaration_order: Dict[int, int] = {}
        for header in headers:
            for model in header.types:
                if model.name in types:
                    self._warn(plan, f"type {model.name} declared again in {header.stem}; keeping the first")
                    continue
                types[model.name] = model
                plan.types.append(model)
                for index, method in enumerate(model.methods):
                    declaration_order[id(method)] = index
        for source in sources:
            for struct in source.structs:
                types.setdefault(struct.name, struct)
                for index, method in enumerate(struct.methods):
                    declaration_order.setdefault(id(method), index)

        interfaces = [name for name, model in types.items() if model.is_interface]
        source_rank = {source.stem: rank for rank, source in enumerate(sources)}

        for source in sources:
            self._attach_implementations(plan, source, types)
            self._attach_static_inits(plan, source, types)
            self._attach_locals(plan, source, types, headers, interfaces)

        for model in types.values():
            model.methods.sort(key=lambda m: self._method_order(m, source_rank, declaration_order))
            self._check_header_only(plan, model)

        plan.files = self._plan_files(plan, headers, sources)
        return plan

    # Matching ------------------------------------------------------------------

    def _attach_implementations(self, plan: ConversionPlan, source: SourceModel, types: Dict[str, TypeModel]) -> None:
        for impl in source.methods:
            plan.implementations.append(impl)
            owner = types.get(impl.owner)
            if owner is None:
                self._warn(plan, f"{source.stem}: implementation {impl.owner}::{impl.name} has no known type; dropped")
                continue
            candidates = [
                m for m in owner.methods if not m.has_inline_body and m.body is None and not m.is_local
            ]
            kind, declaration = match_declaration(candidates, impl)
            if kind is MatchKind.NONE:
                # Static interface factories are often implemented on the implementing class.
                for base in owner.base_names:
                    interface = types.get(base)
                    if interface is None or not interface.is_interface:
                        continue
                    statics = [m for m in interface.methods if m.is_static and m.body is None]
                    kind, declaration = match_declaration(statics, impl)
                    if declaration is not None:
                        break
            if kind is MatchKind.NAME_ONLY:
                self._warn(
                    plan,
                    f"{source.stem}: {impl.owner}::{impl.name} matched by name only; parameter types differ",
                )
            elif kind is MatchKind.AMBIGUOUS:
                self._warn(
                    plan,
                    f"{source.stem}: {impl.owner}::{impl.name} is ambiguous between overloads; kept separately",
                )
                impl.source_comments.append("// TODO: ambiguous overload, pair with its declaration by hand")
            if declaration is not None:
                merge_method(declaration, impl)
                continue
            # Implementations without a declaration stay with the type as private methods.
            impl.owner = owner.name
            owner.methods.append(impl)
            if kind is MatchKind.NONE:
                self._logger.debug("%s: %s::%s has no declaration", source.stem, impl.owner, impl.name)

    def _attach_static_inits(self, plan: ConversionPlan, source: SourceModel, types: Dict[str, TypeModel]) -> None:
        for init in source.static_inits:
            owner = types.get(init.owner)
            member = owner.find_member(init.name) if owner is not None else None
            if member is None:
                self._warn(plan, f"{source.stem}: static initializer {init.owner}::{init.name} has no member; dropped")
                continue
            if member.initializer is None:
                member.initializer = init.value

    def _attach_locals(
        self,
        plan: ConversionPlan,
        source: SourceModel,
        types: Dict[str, TypeModel],
        headers: Sequence[HeaderModel],
        interfaces: List[str],
    ) -> None:
        owner = self._local_owner(source, types, headers, interfaces)
        if owner is None:
            if source.local_methods or source.defines:
                self._warn(
                    plan,
                    f"{source.stem}: no type to own {len(source.local_methods)} local function(s) "
                    f"and {len(source.defines)} define(s); dropped",
                )
            return
        for method in source.local_methods:
            method.owner = owner.name
            owner.methods.append(method)
        owner.source_defines.extend(source.defines)

    def _local_owner(
        self,
        source: SourceModel,
        types: Dict[str, TypeModel],
        headers: Sequence[HeaderModel],
        interfaces: List[str],
    ) -> Optional[TypeModel]:
        name = choose_local_owner(source.implementation_counts(), implementation_owner_order(source), interfaces)
        if name is not None and name in types:
            return types[name]
        for header in headers:
            if header.stem == source.stem:
                return choose_define_owner(header.types, header.stem)
        return None

    # Ordering and diagnostics ------------------------------------------------------

    @staticmethod
    def _method_order(method: MethodModel, source_rank: Dict[str, int], declaration_order: Dict[int, int]):
        """Declared methods keep declaration order; source-only ones follow by textual position."""
        if id(method) in declaration_order:
            return (0, 0, declaration_order[id(method)])
        return (1, source_rank.get(method.target_file, len(source_rank)), method.order_index)

    def _check_header_only(self, plan: ConversionPlan, model: TypeModel) -> None:
        if model.is_interface:
            return
        missing = [m for m in model.methods if m.needs_body and m.body is None]
        if not missing or any(m.has_body for m in model.methods):
            return
        implemented = sum(1 for m in model.methods if m.body is not None)
        self._warn(
            plan,
            f"{model.name} generated from header-only content: {len(model.methods)} header method(s), "
            f"{implemented} implementation(s); bodies are placeholders",
        )

    def _warn(self, plan: ConversionPlan, message: str) -> None:
        self._logger.warning(message)
        plan.warnings.append(message)

    # File planning -----------------------------------------------------------------

    def _fragment_name(
        self, plan: ConversionPlan, files: Dict[str, OutputFile], target: str, model: TypeModel
    ) -> str:
        """Output name for the part of ``model`` implemented in ``target``.

        A partial type must stay in one namespace, so a file already bound to another
        header's namespace cannot take the fragment.
        """
        existing = files.get(target)
        if existing is None or existing.header_stem in ("", model.header_file):
            return target
        renamed = f"{target}_{model.name}"
        self._warn(
            plan,
            f"{model.name} fragment from {target} written to {renamed}.cs to stay in the "
            f"namespace of {model.header_file}",
        )
        return renamed

    def _plan_files(
        self, plan: ConversionPlan, headers: Sequence[HeaderModel], sources: Sequence[SourceModel]
    ) -> List[OutputFile]:
        files: Dict[str, OutputFile] = {}

        def output(name: str) -> OutputFile:
            if name not in files:
                files[name] = OutputFile(name=name)
            return files[name]

        for header in headers:
            if not header.types:
                continue
            main = output(header.stem)
            main.header_stem = header.stem
            main.banner_comments = list(header.banner_comments)

        for model in plan.types:
            main_name = model.header_file
            partial = model.is_partial() and not model.is_interface
            grouped = model.methods_by_target_file()
            main_methods = [m for m in model.methods if not partial or m.target_file in ("", main_name)]
            output(main_name).sections.append(
                TypeSection(type=model, methods=main_methods, is_main=True, is_partial=partial)
            )
            if not partial:
                continue
            for target in sorted(name for name in grouped if name not in ("", main_name)):
                fragment_name = self._fragment_name(plan, files, target, model)
                fragment = output(fragment_name)
                # Fragments share the namespace of the type's main file.
                fragment.header_stem = fragment.header_stem or main_name
                fragment.sections.append(
                    TypeSection(type=model, methods=grouped[target], is_main=False, is_partial=True)
                )

        for source in sources:
            if source.structs:
                output(source.stem).embedded_types.extend(source.structs)
            existing = files.get(source.stem)
            if existing is not None and not existing.banner_comments:
                existing.banner_comments = list(source.banner_comments)

        return [files[name] for name in sorted(files) if files[name].sections or files[name].embedded_types]


def defines_of(model: TypeModel) -> List[DefineModel]:
    """Header defines first, then source defines grouped by origin file."""
    return list(model.header_defines) + sorted(model.source_defines, key=lambda d: (d.origin_file, d.position))


__all__ = [
    "ConversionPlan",
    "METHOD_PRECEDENCE",
    "MatchKind",
    "OutputFile",
    "PARAMETER_PRECEDENCE",
    "Precedence",
    "Reconciler",
    "TypeSection",
    "defines_of",
    "match_declaration",
    "merge_method",
    "merge_parameters",
]
