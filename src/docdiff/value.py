import enum
import math
import typing

from docdiff.errors import InvalidValueError

DiffValue = typing.Union[
    None, bool, int, float, str, dict[str, "DiffValue"], list["DiffValue"]
]
Comparator = typing.Callable[[typing.Any, typing.Any], bool]


class ValueKind(enum.Enum):
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    OBJECT = "object"
    ARRAY = "array"


class Absent(enum.Enum):
    """Result of deleting the document root. Not part of the value model."""

    ABSENT = "absent"

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = Absent.ABSENT

CONTAINER_KINDS = frozenset({ValueKind.OBJECT, ValueKind.ARRAY})


def kind_of(value: typing.Any) -> ValueKind:
    """
    Classify `value` into exactly one value-model variant.

    bool is checked before int since it subclasses int in Python.
    Raises InvalidValueError for anything outside the model.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, list):
        return ValueKind.ARRAY
    raise InvalidValueError(
        f"Unsupported value of type {type(value).__name__}: {value!r}"
    )


def same_container_kind(a: typing.Any, b: typing.Any) -> bool:
    return (isinstance(a, list) and isinstance(b, list)) or (
        isinstance(a, dict) and isinstance(b, dict)
    )


def strict_equal(a: typing.Any, b: typing.Any) -> bool:
    """Exact scalar equality: kinds must match, no numeric tolerance."""
    return kind_of(a) is kind_of(b) and a == b


def numeric_tolerance(*, rel_tol: float = 1e-9, abs_tol: float = 0.0) -> Comparator:
    """
    Build a comparator that treats numbers within tolerance as equal.

    Non-number pairs fall back to strict_equal. Pass the result as
    `diff(..., equal=numeric_tolerance(abs_tol=1e-6))`.
    """

    def equal(a: typing.Any, b: typing.Any) -> bool:
        if kind_of(a) is ValueKind.NUMBER and kind_of(b) is ValueKind.NUMBER:
            return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)
        return strict_equal(a, b)

    return equal


def clone(value: typing.Any) -> typing.Any:
    """
    Copy `value` with a fresh dict or list at every position.

    Unlike copy.deepcopy there is no memo: a sub-object referenced from two
    places becomes two independent copies. The walk uses an explicit stack,
    so depth is not limited by the recursion limit. Scalars, and ABSENT, are
    returned as is. Cyclic structures are outside the value model.
    """
    root = _fresh_container(value)
    if root is None:
        return value
    stack = [(value, root)]
    while stack:
        source, dest = stack.pop()
        if isinstance(source, dict):
            for key, item in source.items():
                dest[key] = _clone_child(item, stack)
        else:
            for item in source:
                dest.append(_clone_child(item, stack))
    return root


def _fresh_container(value: typing.Any) -> typing.Any:
    if isinstance(value, dict):
        return {}
    if isinstance(value, list):
        return []
    return None


def _clone_child(item: typing.Any, stack: list) -> typing.Any:
    # Containers are filled later; the parent already holds the reference.
    dest = _fresh_container(item)
    if dest is None:
        return item
    stack.append((item, dest))
    return dest
