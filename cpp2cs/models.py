"""Core data models shared across the parsers, reconciler and generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class TypeKind(str, Enum):
    CLASS = "class"
    STRUCT = "struct"
    INTERFACE = "interface"


class Visibility(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    INTERNAL = "internal"


class CommentPosition(str, Enum):
    PREFIX = "prefix"
    SUFFIX = "suffix"


class StructVariant(str, Enum):
    """How a struct was introduced in the C++ text."""

    SIMPLE = "simple"  # struct Name { ... };
    TYPEDEF = "typedef"  # typedef struct { ... } Name;
    TYPEDEF_TAG = "typedef_tag"  # typedef struct Tag { ... } Name;


@dataclass
class ParameterComment:
    """A comment found inside a parameter block, tagged with its position."""

    text: str
    position: CommentPosition

    @property
    def is_line_comment(self) -> bool:
        return self.text.startswith("//")


@dataclass
class ParameterModel:
    """A single parameter extracted from a C++ parameter list."""

    base_type: str
    name: str = ""
    is_const: bool = False
    is_pointer: bool = False
    is_reference: bool = False
    default_value: Optional[str] = None
    comments: List[ParameterComment] = field(default_factory=list)
    canonical_signature: str = ""
    has_line_break: bool = False
    original_indent: int = 0
    original_text: str = ""

    @property
    def prefix_comments(self) -> List[ParameterComment]:
        return [c for c in self.comments if c.position is CommentPosition.PREFIX]

    @property
    def suffix_comments(self) -> List[ParameterComment]:
        return [c for c in self.comments if c.position is CommentPosition.SUFFIX]


@dataclass
class MemberInitializer:
    """One entry of a constructor's member-initializer list."""

    name: str
    value: str


@dataclass
class MemberModel:
    """A data member declared inside a class or struct body."""

    type: str
    name: str
    visibility: Visibility = Visibility.PRIVATE
    is_static: bool = False
    is_const: bool = False
    is_array: bool = False
    array_size: str = ""
    initializer: Optional[str] = None
    preceding_comments: List[str] = field(default_factory=list)
    trailing_comment: str = ""
    region_start: str = ""
    region_end: str = ""
    order_index: int = 0


@dataclass
class MethodModel:
    """A method declaration, implementation, or a reconciled combination of both."""

    name: str
    return_type: str = ""
    parameters: List[ParameterModel] = field(default_factory=list)
    visibility: Visibility = Visibility.PRIVATE
    is_static: bool = False
    is_virtual: bool = False
    is_const: bool = False
    is_pure_virtual: bool = False
    is_constructor: bool = False
    is_destructor: bool = False
    is_local: bool = False
    initializers: List[MemberInitializer] = field(default_factory=list)
    has_inline_body: bool = False
    inline_body: str = ""
    body: Optional[str] = None
    body_indent: int = 0
    owner: str = ""
    target_file: str = ""
    origin_file: str = ""
    order_index: int = 0
    position: int = 0
    header_comments: List[str] = field(default_factory=list)
    source_comments: List[str] = field(default_factory=list)
    source_comment_indent: int = 0
    header_region_start: str = ""
    header_region_end: str = ""
    source_region_start: str = ""
    source_region_end: str = ""

    @property
    def signature_key(self) -> Tuple[str, ...]:
        return tuple(p.canonical_signature for p in self.parameters)

    @property
    def identity(self) -> Tuple[str, str, int, Tuple[str, ...]]:
        """Key used to suppress duplicates between extraction passes."""
        return (self.owner, self.name, len(self.parameters), self.signature_key)

    @property
    def has_body(self) -> bool:
        return self.has_inline_body or self.body is not None

    @property
    def needs_body(self) -> bool:
        return not (self.has_inline_body or self.is_constructor or self.is_pure_virtual)


@dataclass
class DefineModel:
    """A #define that becomes a C# constant."""

    name: str
    value: str
    cs_type: str
    cs_value: str
    origin_file: str = ""
    from_header: bool = True
    preceding_comments: List[str] = field(default_factory=list)
    trailing_comment: str = ""
    position: int = 0

    @property
    def access(self) -> str:
        return "internal" if self.from_header else "private"

    def to_csharp(self, access: Optional[str] = None) -> str:
        line = f"{access or self.access} const {self.cs_type} {self.name} = {self.cs_value};"
        if self.trailing_comment:
            line += f" {self.trailing_comment}"
        return line


@dataclass
class StaticInitModel:
    """An out-of-line static member initialization such as ``int C::x = 5;``."""

    owner: str
    name: str
    value: str
    type: str = "auto"
    is_const: bool = False
    is_array: bool = False
    array_size: str = ""
    position: int = 0


@dataclass
class TypeModel:
    """A class, struct or interface together with everything attributed to it."""

    name: str
    kind: TypeKind = TypeKind.CLASS
    is_exported: bool = False
    base_names: List[str] = field(default_factory=list)
    members: List[MemberModel] = field(default_factory=list)
    methods: List[MethodModel] = field(default_factory=list)
    preceding_comments: List[str] = field(default_factory=list)
    header_defines: List[DefineModel] = field(default_factory=list)
    source_defines: List[DefineModel] = field(default_factory=list)
    header_file: str = ""
    struct_variant: Optional[StructVariant] = None

    @property
    def visibility(self) -> Visibility:
        if self.kind is TypeKind.STRUCT or not self.is_exported:
            return Visibility.INTERNAL
        return Visibility.PUBLIC

    @property
    def is_interface(self) -> bool:
        return self.kind is TypeKind.INTERFACE

    @property
    def default_visibility(self) -> Visibility:
        if self.kind is TypeKind.INTERFACE:
            return Visibility.PUBLIC
        if self.kind is TypeKind.STRUCT:
            return Visibility.INTERNAL
        return Visibility.PRIVATE

    def target_file_names(self) -> List[str]:
        """Unique non-empty target files in first-seen order."""
        names: List[str] = []
        for method in self.methods:
            if method.target_file and method.target_file not in names:
                names.append(method.target_file)
        return names

    def is_partial(self) -> bool:
        return len(self.target_file_names()) >= 2

    def methods_by_target_file(self) -> Dict[str, List[MethodModel]]:
        grouped: Dict[str, List[MethodModel]] = {}
        for method in self.methods:
            grouped.setdefault(method.target_file, []).append(method)
        return grouped

    def find_member(self, name: str) -> Optional[MemberModel]:
        for member in self.members:
            if member.name == name:
                return member
        return None


@dataclass
class HeaderModel:
    """Everything the header builder extracted from one .h file."""

    path: str
    stem: str
    types: List[TypeModel] = field(default_factory=list)
    defines: List[DefineModel] = field(default_factory=list)
    banner_comments: List[str] = field(default_factory=list)


@dataclass
class SourceModel:
    """Everything the source builder extracted from one .cpp file."""

    path: str
    stem: str
    methods: List[MethodModel] = field(default_factory=list)
    local_methods: List[MethodModel] = field(default_factory=list)
    structs: List[TypeModel] = field(default_factory=list)
    static_inits: List[StaticInitModel] = field(default_factory=list)
    defines: List[DefineModel] = field(default_factory=list)
    banner_comments: List[str] = field(default_factory=list)

    def implementation_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for method in self.methods:
            if method.owner:
                counts[method.owner] = counts.get(method.owner, 0) + 1
        return counts
