import dataclasses
import typing

from docdiff.errors import InvalidPatchError
from docdiff.json_path import Path, format_path, is_index, to_path


def _check_index(index: typing.Any) -> int:
    if not is_index(index):
        raise InvalidPatchError(f"Array index must be a non-negative int, got {index!r}")
    return index


@dataclasses.dataclass
class ArraySet:
    index: int
    value: typing.Any

    def __post_init__(self):
        _check_index(self.index)


@dataclasses.dataclass
class ArrayInsert:
    index: int
    value: typing.Any

    def __post_init__(self):
        _check_index(self.index)


@dataclasses.dataclass
class ArrayDelete:
    index: int

    def __post_init__(self):
        _check_index(self.index)


ArrayOp = typing.Union[ArraySet, ArrayInsert, ArrayDelete]


@dataclasses.dataclass
class SetOp:
    """Assign `value` at `path`, creating missing containers on the way."""

    path: Path
    value: typing.Any

    def __post_init__(self):
        self.path = to_path(self.path)

    def __repr__(self):
        return f"SetOp(path='{format_path(self.path)}', value={self.value!r})"


@dataclasses.dataclass
class DeleteOp:
    """Remove the member or element at `path`."""

    path: Path

    def __post_init__(self):
        self.path = to_path(self.path)

    def __repr__(self):
        return f"DeleteOp(path='{format_path(self.path)}')"


@dataclasses.dataclass
class ArrayOps:
    """
    Index-addressed edits against the array at `path`.

    Replay order is fixed by kind, not by position in `ops`: every ArraySet,
    then every ArrayInsert in the given order, then every ArrayDelete from the
    highest index down.
    """

    path: Path
    ops: list[ArrayOp] = dataclasses.field(default_factory=list)

    def __post_init__(self):
        self.path = to_path(self.path)
        self.ops = list(self.ops)

    def __repr__(self):
        return f"ArrayOps(path='{format_path(self.path)}', ops={self.ops!r})"


Operation = typing.Union[SetOp, DeleteOp, ArrayOps]
Patch = list[Operation]


# --- plain-data conversion -------------------------------------------------


def _array_op_to_data(op: ArrayOp) -> dict[str, typing.Any]:
    if isinstance(op, ArraySet):
        return {"op": "set", "index": op.index, "value": op.value}
    if isinstance(op, ArrayInsert):
        return {"op": "ins", "index": op.index, "value": op.value}
    if isinstance(op, ArrayDelete):
        return {"op": "del", "index": op.index}
    raise InvalidPatchError(f"Unknown array operation: {op!r}")


def operation_to_data(op: Operation) -> dict[str, typing.Any]:
    if isinstance(op, SetOp):
        return {"kind": "set", "path": list(op.path), "value": op.value}
    if isinstance(op, DeleteOp):
        return {"kind": "del", "path": list(op.path)}
    if isinstance(op, ArrayOps):
        return {
            "kind": "arr",
            "path": list(op.path),
            "ops": [_array_op_to_data(o) for o in op.ops],
        }
    raise InvalidPatchError(f"Unknown operation: {op!r}")


def patch_to_data(patch: Patch) -> list[dict[str, typing.Any]]:
    """
    Convert a patch to plain lists and dicts, ready for json.dumps or any
    other encoder. Values are shared with the patch, not copied.
    """
    return [operation_to_data(op) for op in patch]


def _field(record: typing.Any, name: str) -> typing.Any:
    if not isinstance(record, dict):
        raise InvalidPatchError(f"Expected a dict record, found {type(record).__name__}")
    if name not in record:
        raise InvalidPatchError(f"Record {record!r} is missing field '{name}'")
    return record[name]


def _array_op_from_data(record: typing.Any) -> ArrayOp:
    kind = _field(record, "op")
    index = _field(record, "index")
    if kind == "set":
        return ArraySet(index, _field(record, "value"))
    if kind == "ins":
        return ArrayInsert(index, _field(record, "value"))
    if kind == "del":
        return ArrayDelete(index)
    raise InvalidPatchError(f"Unknown array operation kind: {kind!r}")


def operation_from_data(record: typing.Any) -> Operation:
    kind = _field(record, "kind")
    path = _field(record, "path")
    if kind == "set":
        return SetOp(path, _field(record, "value"))
    if kind == "del":
        return DeleteOp(path)
    if kind == "arr":
        ops = _field(record, "ops")
        if not isinstance(ops, list):
            raise InvalidPatchError(f"'ops' must be a list, found {type(ops).__name__}")
        return ArrayOps(path, [_array_op_from_data(o) for o in ops])
    raise InvalidPatchError(f"Unknown operation kind: {kind!r}")


def patch_from_data(data: typing.Any) -> Patch:
    """Rebuild a patch from the structure produced by patch_to_data."""
    if not isinstance(data, list):
        raise InvalidPatchError(f"Patch data must be a list, found {type(data).__name__}")
    return [operation_from_data(record) for record in data]
