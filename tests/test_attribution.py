"""Tests for cpp2cs.attribution."""

from __future__ import annotations

from cpp2cs.attribution import choose_define_owner, choose_local_owner, looks_like_interface
from cpp2cs.models import TypeKind, TypeModel


def test_define_owner_prefers_type_named_after_file() -> None:
    helper = TypeModel(name="CHelper")
    sample = TypeModel(name="Sample")

    assert choose_define_owner([helper, sample], "Sample") is sample


def test_define_owner_never_picks_structs() -> None:
    record = TypeModel(name="Record", kind=TypeKind.STRUCT)
    interface = TypeModel(name="ISample", kind=TypeKind.INTERFACE)
    sample = TypeModel(name="CSample")

    assert choose_define_owner([record], "Record") is None
    assert choose_define_owner([record, interface], "Sample") is interface
    assert choose_define_owner([interface, TypeModel(name="IOther", kind=TypeKind.INTERFACE), sample], "X") is sample


def test_local_owner_is_most_implemented_non_interface() -> None:
    counts = {"ISample": 5, "CSample": 2, "CHelper": 2, "CTable": 1}

    assert choose_local_owner(counts, ["ISample", "CHelper", "CSample", "CTable"]) == "CHelper"
    assert choose_local_owner({"CTable": 1}, ["CTable"], interfaces=["CTable"]) is None
    assert choose_local_owner({}, []) is None


def test_interface_names() -> None:
    assert looks_like_interface("ISample") is True
    assert looks_like_interface("Item") is False
    assert looks_like_interface("Contract", ["Contract"]) is True
