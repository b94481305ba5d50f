"""Structural diff and patch for JSON-like documents."""

from docdiff.diff import diff
from docdiff.errors import (
    DocDiffError,
    InvalidPatchError,
    InvalidPathError,
    InvalidValueError,
    PatchConflictError,
)
from docdiff.json_path import format_path, parse_path
from docdiff.operation import (
    ArrayDelete,
    ArrayInsert,
    ArrayOps,
    ArraySet,
    DeleteOp,
    Operation,
    Patch,
    SetOp,
    patch_from_data,
    patch_to_data,
)
from docdiff.patch import apply_patch
from docdiff.value import ABSENT, ValueKind, kind_of, numeric_tolerance, strict_equal

__version__ = "0.1.0"
__all__ = [
    "ABSENT",
    "ArrayDelete",
    "ArrayInsert",
    "ArrayOps",
    "ArraySet",
    "DeleteOp",
    "DocDiffError",
    "InvalidPatchError",
    "InvalidPathError",
    "InvalidValueError",
    "Operation",
    "Patch",
    "PatchConflictError",
    "SetOp",
    "ValueKind",
    "apply_patch",
    "diff",
    "format_path",
    "kind_of",
    "numeric_tolerance",
    "parse_path",
    "patch_from_data",
    "patch_to_data",
    "strict_equal",
]
