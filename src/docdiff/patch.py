import logging
import typing
from typing import Any

from docdiff.errors import InvalidPatchError, PatchConflictError
from docdiff.json_path import Key, Path, format_path, is_index
from docdiff.operation import (
    ArrayDelete,
    ArrayInsert,
    ArrayOp,
    ArrayOps,
    ArraySet,
    DeleteOp,
    Patch,
    SetOp,
)
from docdiff.value import ABSENT, Absent, clone

logger = logging.getLogger("docdiff.patch")


def _new_container(next_key: Key) -> Any:
    return [] if is_index(next_key) else {}


def _accepts(container: Any, key: Key) -> bool:
    """True when `container` can be addressed by `key` without coercion."""
    if is_index(key):
        return isinstance(container, list)
    return isinstance(container, dict)


def _read(container: Any, key: Key) -> Any:
    if isinstance(container, dict) and isinstance(key, str):
        return container.get(key, ABSENT)
    if isinstance(container, list) and is_index(key) and key < len(container):
        return container[key]
    return ABSENT


def _write(container: Any, key: Key, value: Any) -> None:
    if isinstance(container, dict):
        container[key] = value
        return
    # list index; pad with nulls when writing past the end
    if key >= len(container):
        container.extend([None] * (key - len(container)))
        container.append(value)
    else:
        container[key] = value


def _coerce(current: Any, next_key: Key, path: Path, *, strict: bool) -> Any:
    """
    Return `current` if `next_key` can address it, otherwise a fresh
    container of the kind `next_key` asks for. Absent and null values are
    replaced silently; anything else is a conflict in strict mode.
    """
    if _accepts(current, next_key):
        return current
    if current is not ABSENT and current is not None:
        if strict:
            raise PatchConflictError(
                f"Cannot address {type(current).__name__} at '{format_path(path)}' "
                f"with key {next_key!r}",
                path,
            )
        logger.debug(
            "replacing %s at %s with a new container",
            type(current).__name__,
            format_path(path),
        )
    return _new_container(next_key)


def get_at(root: Any, path: Path) -> Any:
    """
    Retrieve the value at `path`, or ABSENT if any step is missing.
    Never creates anything.
    """
    current = root
    for key in path:
        current = _read(current, key)
        if current is ABSENT:
            return ABSENT
    return current


def set_at(root: Any, path: Path, value: Any, *, strict: bool = False) -> Any:
    """
    Set `value` into `root` at `path`, creating intermediate lists/dicts as
    needed: a list when the following key is an index, a dict otherwise.

    Mutates `root` in place where possible and returns the (possibly new)
    root. `value` is stored as is; callers copy it beforehand.

    An ancestor that cannot take the next key (a list followed by a name, a
    dict followed by an index, or a scalar) is replaced by a new empty
    container, discarding its contents. strict=True raises
    PatchConflictError instead; null and missing ancestors are filled in
    either mode.
    """
    if not path:
        return value

    root = _coerce(root, path[0], (), strict=strict)
    current = root
    for depth, key in enumerate(path[:-1]):
        next_key = path[depth + 1]
        child_path = path[: depth + 1]
        child = _read(current, key)
        coerced = _coerce(child, next_key, child_path, strict=strict)
        if coerced is not child:
            _write(current, key, coerced)
        current = coerced

    _write(current, path[-1], value)
    return root


def delete_at(root: Any, path: Path, *, strict: bool = False) -> Any:
    """
    Remove the member or element at `path` and return the root.

    Deleting the root yields ABSENT. A missing location is a no-op, or a
    PatchConflictError in strict mode. Removing an array element shifts the
    following ones down.
    """
    if not path:
        return ABSENT

    parent = get_at(root, path[:-1])
    key = path[-1]
    if isinstance(parent, list) and is_index(key) and key < len(parent):
        del parent[key]
    elif isinstance(parent, dict) and isinstance(key, str) and key in parent:
        del parent[key]
    else:
        if strict:
            raise PatchConflictError(
                f"Nothing to delete at '{format_path(path)}'", path
            )
        logger.debug("delete at %s skipped: location missing", format_path(path))
    return root


def apply_array_ops(
    arr: list[Any], ops: typing.Iterable[ArrayOp], *, path: Path = (), strict: bool = False
) -> list[Any]:
    """
    Apply array edits to `arr` in place, in three fixed phases regardless of
    the order of `ops`:

    1. ArraySet into existing slots; out-of-range indices are skipped.
    2. ArrayInsert in the given order, each shifting later elements right.
    3. ArrayDelete sorted by descending index so earlier removals never
       move later targets.
    """
    ops = list(ops)
    for op in ops:
        if not isinstance(op, (ArraySet, ArrayInsert, ArrayDelete)):
            raise InvalidPatchError(f"Unknown array operation: {op!r}")

    for op in ops:
        if isinstance(op, ArraySet):
            if op.index < len(arr):
                arr[op.index] = clone(op.value)
            else:
                _out_of_range("set", op.index, arr, path, strict=strict)

    for op in ops:
        if isinstance(op, ArrayInsert):
            if op.index > len(arr):
                if strict:
                    _out_of_range("insert", op.index, arr, path, strict=strict)
                logger.debug(
                    "insert at %s[%d] past end of %d-element array; appending",
                    format_path(path), op.index, len(arr),
                )
            arr.insert(op.index, clone(op.value))

    deletes = sorted(
        (op for op in ops if isinstance(op, ArrayDelete)),
        key=lambda op: op.index,
        reverse=True,
    )
    for op in deletes:
        if op.index < len(arr):
            del arr[op.index]
        else:
            _out_of_range("delete", op.index, arr, path, strict=strict)

    return arr


def _out_of_range(
    action: str, index: int, arr: list[Any], path: Path, *, strict: bool
) -> None:
    if strict:
        raise PatchConflictError(
            f"Array {action} index {index} out of range for "
            f"{len(arr)}-element array at '{format_path(path)}'",
            path,
        )
    logger.debug(
        "array %s at %s[%d] skipped: %d element(s)",
        action, format_path(path), index, len(arr),
    )


def _apply_array_bundle(root: Any, op: ArrayOps, *, strict: bool) -> Any:
    target = get_at(root, op.path)
    if isinstance(target, list):
        apply_array_ops(target, op.ops, path=op.path, strict=strict)
        return root

    if target is not ABSENT and target is not None:
        if strict:
            raise PatchConflictError(
                f"Expected array at '{format_path(op.path)}', "
                f"found {type(target).__name__}",
                op.path,
            )
        logger.debug(
            "array ops at %s found %s; replaying onto an empty array",
            format_path(op.path), type(target).__name__,
        )
    replayed = apply_array_ops([], op.ops, path=op.path, strict=strict)
    return set_at(root, op.path, replayed, strict=strict)


def apply_patch(
    base: Any, patch: Patch, *, strict: bool = False
) -> typing.Union[Any, Absent]:
    """
    Apply `patch` to a deep copy of `base` and return the result.

    Operations run in patch order:
    - SetOp: set or replace the value at its path (deep-copied), creating
      missing containers.
    - DeleteOp: remove the value at its path; deleting the root yields ABSENT.
    - ArrayOps: run the array edits (see apply_array_ops). A location that
      holds no array is replaced by the edits replayed onto an empty array.

    In the default lenient mode malformed instructions degrade to no-ops or
    coercions. With strict=True those cases raise PatchConflictError instead.
    `base` is never mutated.
    """
    root = clone(base)
    for op in patch:
        if isinstance(op, SetOp):
            root = set_at(root, op.path, clone(op.value), strict=strict)
        elif isinstance(op, DeleteOp):
            root = delete_at(root, op.path, strict=strict)
        elif isinstance(op, ArrayOps):
            root = _apply_array_bundle(root, op, strict=strict)
        else:
            raise InvalidPatchError(f"Unknown operation: {op!r}")
    logger.debug("applied %d operation(s)", len(patch))
    return root
