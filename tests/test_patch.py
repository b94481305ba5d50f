import logging

import pytest

from docdiff import (
    ABSENT,
    ArrayDelete,
    ArrayInsert,
    ArrayOps,
    ArraySet,
    DeleteOp,
    InvalidPatchError,
    PatchConflictError,
    SetOp,
    apply_patch,
    diff,
)
from docdiff.patch import apply_array_ops, delete_at, get_at, set_at

# --- path helpers ------------------------------------------------------------


def test_get_at_reads_without_creating():
    doc = {"a": [{"b": 1}]}
    assert get_at(doc, ("a", 0, "b")) == 1
    assert get_at(doc, ("a", 1, "b")) is ABSENT
    assert get_at(doc, ("a", "x")) is ABSENT
    assert get_at(doc, ("missing", 0)) is ABSENT
    assert doc == {"a": [{"b": 1}]}


def test_get_at_null_member_is_present():
    assert get_at({"a": None}, ("a",)) is None


def test_set_at_creates_lists_for_index_keys():
    doc: dict = {}
    set_at(doc, ("a", 0, "b", 2), "x")
    assert doc == {"a": [{"b": [None, None, "x"]}]}


def test_set_at_replaces_null_ancestors():
    assert set_at({"a": None}, ("a", "b"), 1) == {"a": {"b": 1}}


def test_set_at_root_returns_value():
    assert set_at({"a": 1}, (), [1]) == [1]


def test_set_at_absent_root_creates_container():
    assert set_at(ABSENT, ("a",), 1) == {"a": 1}
    assert set_at(ABSENT, (0,), 1) == [1]


def test_set_at_wrong_ancestor_kind_is_replaced():
    assert set_at({"a": 5}, ("a", "b"), 1) == {"a": {"b": 1}}
    assert set_at({"a": {"x": 1}}, ("a", 0), 1) == {"a": [1]}


def test_set_at_wrong_ancestor_kind_strict():
    with pytest.raises(PatchConflictError) as excinfo:
        set_at({"a": 5}, ("a", "b"), 1, strict=True)
    assert excinfo.value.path == ("a",)


def test_delete_at_shifts_array_elements():
    assert delete_at({"a": [1, 2, 3]}, ("a", 0)) == {"a": [2, 3]}


def test_delete_at_missing_locations_are_noops():
    assert delete_at({"a": [1]}, ("a", 5)) == {"a": [1]}
    assert delete_at({"a": [1]}, ("b", "c")) == {"a": [1]}
    assert delete_at({"a": [1]}, ("a", "name")) == {"a": [1]}
    assert delete_at({"a": {"0": 1}}, ("a", 0)) == {"a": {"0": 1}}


def test_delete_at_missing_location_strict():
    with pytest.raises(PatchConflictError):
        delete_at({"a": [1]}, ("a", 5), strict=True)


def test_delete_at_root_is_absent():
    assert delete_at({"a": 1}, ()) is ABSENT


# --- array replay ------------------------------------------------------------


def test_array_ops_run_in_fixed_phases():
    arr = [1, 2, 3, 4]
    ops = [ArrayDelete(0), ArrayInsert(1, "i"), ArraySet(3, "s"), ArrayDelete(2)]
    # set -> [1, 2, 3, "s"]; insert -> [1, "i", 2, 3, "s"]; delete 2, 0
    assert apply_array_ops(arr, ops) == ["i", 3, "s"]


def test_array_ops_deletes_sorted_descending():
    assert apply_array_ops([0, 1, 2, 3], [ArrayDelete(1), ArrayDelete(3)]) == [0, 2]


def test_array_set_out_of_range_is_ignored():
    assert apply_array_ops([1], [ArraySet(3, 9)]) == [1]
    with pytest.raises(PatchConflictError):
        apply_array_ops([1], [ArraySet(3, 9)], strict=True)


def test_array_insert_past_end_appends():
    assert apply_array_ops([1], [ArrayInsert(5, 2)]) == [1, 2]
    with pytest.raises(PatchConflictError):
        apply_array_ops([1], [ArrayInsert(5, 2)], strict=True)


def test_array_ops_reject_foreign_entries():
    with pytest.raises(InvalidPatchError):
        apply_array_ops([1], [SetOp(("a",), 1)])


# --- apply_patch ---------------------------------------------------------------


def test_apply_patch_does_not_mutate_base_or_patch():
    base = {"a": {"list": [1]}}
    value = {"deep": [1]}
    patch = [SetOp(("a", "x"), value), ArrayOps(("a", "list"), [ArrayInsert(1, value)])]
    result = apply_patch(base, patch)
    assert base == {"a": {"list": [1]}}

    result["a"]["x"]["deep"].append(2)
    result["a"]["list"][1]["deep"].append(3)
    assert value == {"deep": [1]}


def test_set_root_replaces_document():
    assert apply_patch({"a": 1}, [SetOp((), [1, 2])]) == [1, 2]


def test_manual_array_ops_create_missing_array():
    patch = [ArrayOps(("a", "list"), [ArrayInsert(0, 1), ArrayInsert(1, 2)])]
    assert apply_patch({"a": {}}, patch) == {"a": {"list": [1, 2]}}


def test_array_ops_on_non_array_replay_onto_empty_array(caplog):
    patch = [ArrayOps(("a",), [ArraySet(0, "lost"), ArrayInsert(0, "kept")])]
    with caplog.at_level(logging.DEBUG, logger="docdiff.patch"):
        assert apply_patch({"a": "text"}, patch) == {"a": ["kept"]}
    assert "replaying onto an empty array" in caplog.text


def test_array_ops_on_non_array_strict():
    patch = [ArrayOps(("a",), [ArrayInsert(0, 1)])]
    with pytest.raises(PatchConflictError) as excinfo:
        apply_patch({"a": {"b": 1}}, patch, strict=True)
    assert excinfo.value.path == ("a",)


def test_array_ops_on_missing_location_strict_still_creates():
    patch = [ArrayOps(("a",), [ArrayInsert(0, 1)])]
    assert apply_patch({}, patch, strict=True) == {"a": [1]}


def test_delete_root_returns_absent():
    assert apply_patch({"a": 1}, [DeleteOp(())]) is ABSENT
    assert not ABSENT


def test_operations_after_root_delete():
    patch = [DeleteOp(()), SetOp(("a",), 1)]
    assert apply_patch([1, 2], patch) == {"a": 1}
    assert apply_patch({"a": 1}, [DeleteOp(()), DeleteOp(("a",))]) is ABSENT


def test_delete_null_member():
    assert apply_patch({"a": None, "b": 1}, [DeleteOp(("a",))]) == {"b": 1}


def test_hand_written_patch_with_path_strings():
    patch = [
        SetOp("$.user.tags[0]", "admin"),
        DeleteOp('$["legacy.field"]'),
        ArrayOps("$.scores", [ArraySet(0, 10)]),
    ]
    base = {"legacy.field": 1, "scores": [1, 2]}
    assert apply_patch(base, patch) == {"user": {"tags": ["admin"]}, "scores": [10, 2]}


def test_unknown_operation_is_rejected():
    with pytest.raises(InvalidPatchError):
        apply_patch({}, [{"kind": "set", "path": ["a"], "value": 1}])


def test_strict_mode_accepts_diff_output():
    base = {"items": [{"a": 1}, {"b": 2}], "gone": True}
    target = {"items": [{"a": 1}, {"b": 3}, {"c": 9}], "new": [None]}
    assert apply_patch(base, diff(base, target), strict=True) == target


def test_patch_applies_to_compatible_copy():
    # A patch diffed from one revision replays against a structurally
    # compatible document that carries unrelated extra members.
    ops = diff({"a": [1, 2]}, {"a": [1, 3]})
    assert apply_patch({"a": [1, 2], "other": "x"}, ops) == {"a": [1, 3], "other": "x"}
