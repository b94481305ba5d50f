"""docdiff exception hierarchy.

Lenient patch application never raises these for well-formed operations;
they surface invalid inputs and strict-mode mismatches.
"""


class DocDiffError(Exception):
    """Base exception for all docdiff errors."""


class InvalidValueError(DocDiffError, TypeError):
    """Raised when a value falls outside the JSON-like value model."""


class InvalidPathError(DocDiffError, ValueError):
    """Raised for malformed path keys or path strings."""


class InvalidPatchError(DocDiffError, ValueError):
    """Raised when plain data cannot be turned into a patch."""


class PatchConflictError(DocDiffError):
    """Raised in strict mode when an operation does not fit the target document."""

    def __init__(self, message: str, path: tuple = ()):
        super().__init__(message)
        self.path = path
