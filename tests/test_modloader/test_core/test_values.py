import pytest

from modloader.core.values import (
    FObject,
    FValue,
    ValueKind,
    VisitDirection,
    VisitResult,
)


def test_children_sorted_by_key():
    obj = FObject()
    obj.add("b", FValue.from_unsigned(2))
    obj.add("a", FValue.from_unsigned(1))
    obj.add("c", FValue.from_unsigned(3))
    obj.finish()

    assert obj.keys() == ["a", "b", "c"]
    assert obj.name_to_index == {"a": 0, "b": 1, "c": 2}
    assert obj.child("b").as_unsigned() == 2


def test_numeric_keys_sort_as_text(build_object):
    obj = build_object({str(i): i for i in range(1, 12)})
    assert obj.keys()[:4] == ["1", "10", "11", "2"]


def test_duplicate_key_last_wins():
    obj = FObject()
    obj.add("x", FValue.from_string("first"))
    obj.add("x", FValue.from_string("second"))
    obj.finish()

    assert len(obj) == 1
    assert obj.child("x").as_string() == "second"


def test_frozen_object_rejects_add(build_object):
    obj = build_object({"a": 1})
    assert obj.frozen
    with pytest.raises(RuntimeError):
        obj.add("b", FValue.NIL)


def test_missing_child_is_nil(build_object):
    obj = build_object({"a": 1})
    assert obj.child("missing") is FValue.NIL
    assert not obj.child("missing")
    assert obj["a"].as_unsigned() == 1
    assert "a" in obj
    assert "missing" not in obj


def test_table_lookup_failures_return_invalid(build_object):
    obj = build_object({"scalar": "text", "nested": {"x": 1}})

    assert obj.table("missing") is FObject.INVALID
    assert obj.table("scalar") is FObject.INVALID
    assert not FObject.INVALID
    assert len(FObject.INVALID) == 0
    assert obj.table("nested").child("x").as_unsigned() == 1
    # Chained lookups through the invalid object stay invalid
    assert obj.table("missing").table("deeper") is FObject.INVALID


def test_find_path(build_object):
    obj = build_object({"item": {"iron-plate": {"stack_size": 100}}})

    assert obj.find("item/iron-plate/stack_size").as_unsigned() == 100
    assert obj.find(["item", "iron-plate"]).kind is ValueKind.OBJECT
    assert obj.find("item/copper-plate/stack_size").is_nil
    assert obj.find("").obj() is obj


def test_value_constructors_check_payload():
    assert FValue.from_unsigned(0).kind is ValueKind.UNSIGNED
    assert FValue.from_float(3).as_float() == 3.0

    with pytest.raises(TypeError):
        FValue.from_unsigned(-1)
    with pytest.raises(TypeError):
        FValue.from_unsigned(2**64)
    with pytest.raises(TypeError):
        FValue.from_unsigned(True)
    with pytest.raises(TypeError):
        FValue(ValueKind.STRING, 5)


def test_typed_access_returns_none_for_other_kinds():
    value = FValue.from_string("abc")
    assert value.as_string() == "abc"
    assert value.as_unsigned() is None
    assert value.as_float() is None
    assert value.as_bool() is None
    assert value.as_object() is None
    assert value.obj() is FObject.INVALID


def test_to_float():
    assert FValue.from_unsigned(5).is_number
    assert not FValue.from_bool(True).is_number
    assert FValue.from_unsigned(5).to_float() == 5.0
    assert type(FValue.from_unsigned(5).to_float()) is float
    assert FValue.from_float(-2.5).to_float() == -2.5
    with pytest.raises(TypeError):
        FValue.from_string("5").to_float()


def test_to_string():
    assert FValue.NIL.to_string() == "!<>"
    assert FValue.from_bool(True).to_string() == "true"
    assert FValue.from_bool(False).to_string() == "false"
    assert FValue.from_unsigned(42).to_string() == "42"
    assert FValue.from_float(1.5).to_string() == "1.5"
    assert FValue.from_string("hi").to_string() == "hi"
    assert FValue.from_object(FObject().finish()).to_string() == "table"


def test_false_is_not_nil():
    value = FValue.from_bool(False)
    assert value
    assert not value.is_nil


def test_to_dict(build_object):
    obj = build_object({"b": [1, 2], "a": {"flag": True}, "c": None})
    assert obj.to_dict() == {"a": {"flag": True}, "b": {"1": 1, "2": 2}, "c": None}


def _record(calls, result=None):
    def callback(direction, key, value):
        calls.append((direction, key))
        return result
    return callback


def test_visit_order(build_object):
    obj = build_object({"a": 1, "b": {"x": 2, "y": {"z": 3}}, "c": 4})
    calls = []

    assert obj.visit(_record(calls)) is VisitResult.CONTINUE
    assert calls == [
        (VisitDirection.LEAF, "a"),
        (VisitDirection.ENTER, "b"),
        (VisitDirection.LEAF, "x"),
        (VisitDirection.ENTER, "y"),
        (VisitDirection.LEAF, "z"),
        (VisitDirection.LEAVE, "y"),
        (VisitDirection.LEAVE, "b"),
        (VisitDirection.LEAF, "c"),
    ]


def test_visit_continue_skips_subtree_without_leave(build_object):
    obj = build_object({"a": {"x": 1}, "b": 2})
    calls = []

    obj.visit(_record(calls, VisitResult.CONTINUE))
    assert calls == [(VisitDirection.ENTER, "a"), (VisitDirection.LEAF, "b")]


def test_visit_exit_stops_everything(build_object):
    obj = build_object({"a": {"x": 1, "y": 2}, "b": 3})
    calls = []

    def callback(direction, key, value):
        calls.append(key)
        if key == "x":
            return VisitResult.EXIT
        return VisitResult.DESCEND

    assert obj.visit(callback) is VisitResult.EXIT
    assert calls == ["a", "x"]


def test_visit_exit_on_leave(build_object):
    obj = build_object({"a": {"x": 1}, "b": 2})
    calls = []

    def callback(direction, key, value):
        calls.append(key)
        if direction is VisitDirection.LEAVE:
            return VisitResult.EXIT
        return VisitResult.DESCEND

    assert obj.visit(callback) is VisitResult.EXIT
    assert calls == ["a", "x", "a"]
