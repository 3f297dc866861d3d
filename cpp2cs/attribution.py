"""Candidate scoring for constructs that have no owner in the C++ text.

File-level defines and free functions have to land in some generated type. The
heuristics are weak, so they live here as plain functions that are easy to read
and replace.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence

from .models import TypeKind, TypeModel

_INTERFACE_NAME = re.compile(r"^I[A-Z]")


def choose_define_owner(types: Sequence[TypeModel], file_stem: str) -> Optional[TypeModel]:
    """Pick the single type that receives a header's file-level defines.

    Priority: the type named after the file, else the only non-struct type, else the
    first type that is neither interface nor struct. Structs never receive defines.
    """
    candidates = [t for t in types if t.kind is not TypeKind.STRUCT]
    for candidate in candidates:
        if candidate.name == file_stem:
            return candidate
    if len(candidates) == 1:
        return candidates[0]
    for candidate in candidates:
        if candidate.kind is TypeKind.CLASS:
            return candidate
    return None


def looks_like_interface(name: str, interfaces: Iterable[str] = ()) -> bool:
    return name in set(interfaces) or bool(_INTERFACE_NAME.match(name))


def choose_local_owner(
    implementation_counts: Dict[str, int],
    textual_order: List[str],
    interfaces: Iterable[str] = (),
) -> Optional[str]:
    """Pick the scoped type with the most implementations in a source file.

    Interface-like names are never chosen; ties go to the type implemented first.
    """
    interface_names = set(interfaces)
    best: Optional[str] = None
    best_count = 0
    for owner in textual_order:
        if looks_like_interface(owner, interface_names):
            continue
        count = implementation_counts.get(owner, 0)
        if count > best_count:
            best, best_count = owner, count
    return best


__all__ = ["choose_define_owner", "choose_local_owner", "looks_like_interface"]
