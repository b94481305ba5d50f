import logging
import typing

from docdiff.errors import InvalidValueError
from docdiff.json_path import ROOT, Path, format_path
from docdiff.operation import (
    ArrayDelete,
    ArrayInsert,
    ArrayOp,
    ArrayOps,
    ArraySet,
    DeleteOp,
    Operation,
    Patch,
    SetOp,
)
from docdiff.value import (
    CONTAINER_KINDS,
    Comparator,
    ValueKind,
    clone,
    kind_of,
    same_container_kind,
    strict_equal,
)

logger = logging.getLogger("docdiff.diff")


class _Compare(typing.NamedTuple):
    base: typing.Any
    target: typing.Any
    path: Path


# A pending unit of work: either a pair still to compare, or an operation
# whose turn to be emitted has come.
_Task = typing.Union[_Compare, Operation]


def diff(
    base: typing.Any,
    target: typing.Any,
    *,
    equal: typing.Optional[Comparator] = None,
) -> Patch:
    """
    Compute a patch that turns `base` into `target`.

    - Scalars: a single SetOp when they differ (per `equal`, exact by default).
    - Objects: SetOp for added members, DeleteOp for removed ones, recursion
      into shared ones.
    - Arrays: positional comparison. Shared-kind container elements are diffed
      in place with their own paths; everything else is bundled into one
      ArrayOps of ArraySet / ArrayInsert / ArrayDelete.
    - Any other pairing: SetOp replacing the whole value.

    This is not a minimum-edit-distance diff; reordered elements show up as
    replacements. Neither input is mutated.
    """
    equal = equal or strict_equal
    out: Patch = []
    # Pushing children in reverse keeps emission order identical to a
    # depth-first recursive walk.
    stack: list[_Task] = [_Compare(base, target, ROOT)]
    while stack:
        task = stack.pop()
        if isinstance(task, _Compare):
            _compare(task, equal, out, stack)
        else:
            out.append(task)
    logger.debug("diff produced %d operation(s)", len(out))
    return out


def _compare(
    task: _Compare, equal: Comparator, out: Patch, stack: list[_Task]
) -> None:
    base, target, path = task
    base_kind = kind_of(base)
    target_kind = kind_of(target)

    if base_kind not in CONTAINER_KINDS and target_kind not in CONTAINER_KINDS:
        if not equal(base, target):
            out.append(SetOp(path, clone(target)))
        return

    if base_kind is ValueKind.ARRAY and target_kind is ValueKind.ARRAY:
        _diff_array(base, target, path, equal, stack)
        return

    if base_kind is ValueKind.OBJECT and target_kind is ValueKind.OBJECT:
        _diff_object(base, target, path, stack)
        return

    out.append(SetOp(path, clone(target)))


def _diff_object(
    base: dict[str, typing.Any],
    target: dict[str, typing.Any],
    path: Path,
    stack: list[_Task],
) -> None:
    keys = list(base)
    keys.extend(k for k in target if k not in base)

    pending: list[_Task] = []
    for key in keys:
        if not isinstance(key, str):
            raise InvalidValueError(
                f"Object member names must be str, found {type(key).__name__} at {format_path(path)}"
            )
        child_path = path + (key,)
        if key not in base:
            pending.append(SetOp(child_path, clone(target[key])))
        elif key not in target:
            pending.append(DeleteOp(child_path))
        else:
            pending.append(_Compare(base[key], target[key], child_path))
    stack.extend(reversed(pending))


def _diff_array(
    base: list[typing.Any],
    target: list[typing.Any],
    path: Path,
    equal: Comparator,
    stack: list[_Task],
) -> None:
    ops: list[ArrayOp] = []
    nested: list[_Task] = []
    min_len = min(len(base), len(target))

    for i in range(min_len):
        b = base[i]
        t = target[i]
        b_kind = kind_of(b)
        t_kind = kind_of(t)

        if b_kind not in CONTAINER_KINDS and t_kind not in CONTAINER_KINDS:
            if not equal(b, t):
                ops.append(ArraySet(i, clone(t)))
            continue

        if same_container_kind(b, t):
            nested.append(_Compare(b, t, path + (i,)))
            continue

        ops.append(ArraySet(i, clone(t)))

    for i in range(min_len, len(target)):
        ops.append(ArrayInsert(i, clone(target[i])))

    for i in range(len(base) - 1, len(target) - 1, -1):
        ops.append(ArrayDelete(i))

    # The bundle goes out after every nested element diff.
    if ops:
        stack.append(ArrayOps(path, ops))
    stack.extend(reversed(nested))
