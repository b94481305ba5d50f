import re
from typing import Any, Sequence, Tuple, Union

from docdiff.errors import InvalidPathError

Key = Union[str, int]  # str for object members, int for array indices
Path = Tuple[Key, ...]

ROOT: Path = ()


def is_index(key: Any) -> bool:
    """True for non-negative ints; bools are never indices."""
    return isinstance(key, int) and not isinstance(key, bool) and key >= 0


def _check_key(key: Any, position: int) -> Key:
    if isinstance(key, str) or is_index(key):
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        raise InvalidPathError(
            f"Negative index {key} at position {position} is not supported."
        )
    raise InvalidPathError(
        f"Path key at position {position} must be str or int, found {type(key).__name__}"
    )


def to_path(path: Union[str, Sequence[Key]]) -> Path:
    """
    Normalize `path` into a tuple of keys.

    Strings are parsed as JSONPath-like paths (see parse_path); any other
    sequence has each key validated.
    """
    if isinstance(path, str):
        return parse_path(path)
    try:
        keys = list(path)
    except TypeError:
        raise InvalidPathError(
            f"Path must be a string or a sequence of keys, found {type(path).__name__}"
        ) from None
    return tuple(_check_key(key, pos) for pos, key in enumerate(keys))


def _escape_key_for_brackets(key: str) -> str:
    """Escape a key for bracket notation with double quotes."""
    return key.replace("\\", "\\\\").replace('"', '\\"')


def _join_path(base: str, token: Key) -> str:
    """
    Join a base path string with a key using a JSONPath-like syntax:
    - names with no '.', '[' or leading digit use dot notation
    - otherwise names are quoted: ["..."]
    - indices use [i]
    """
    if isinstance(token, int):
        return f"{base}[{token}]"

    use_dot = (
        token != ""
        and "." not in token
        and "[" not in token
        and not token[0].isdigit()
    )
    if use_dot:
        return base + "." + token
    return f'{base}["{_escape_key_for_brackets(token)}"]'


def format_path(path: Sequence[Key]) -> str:
    """Render a path as a string, e.g. ("items", 1, "b") -> '$.items[1].b'."""
    out = "$"
    for key in path:
        out = _join_path(out, key)
    return out


_SEGMENT = re.compile(
    r'\.(?P<name>[^.\[]+)|\[(?P<index>[0-9]+)\]|\["(?P<quoted>(?:[^"\\]|\\.)*)"\]',
    re.DOTALL,
)
_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


def parse_path(path: str) -> Path:
    """
    Parse a path string in the form format_path produces back into keys.

    "$" is the root, followed by `.name`, `[index]` or `["quoted name"]`
    segments, where a backslash escapes the next character inside quotes:

        parse_path('$.items[1]["a.b"]') == ("items", 1, "a.b")
    """
    if not isinstance(path, str) or not path.startswith("$"):
        raise InvalidPathError(f"Path must be a string starting with '$', got {path!r}")

    keys: list[Key] = []
    pos = 1
    while pos < len(path):
        match = _SEGMENT.match(path, pos)
        if match is None:
            raise InvalidPathError(f"Unexpected {path[pos:]!r} at position {pos} in '{path}'")
        if match["index"] is not None:
            keys.append(int(match["index"]))
        elif match["quoted"] is not None:
            keys.append(_ESCAPE.sub(r"\1", match["quoted"]))
        else:
            keys.append(match["name"])
        pos = match.end()
    return tuple(keys)
