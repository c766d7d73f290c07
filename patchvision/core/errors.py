"""
Error taxonomy for PatchVision.

Every failure the engine can report derives from ``EditingError``. Each class
declares whether it is *structural* (the request itself is malformed, so the
batch aborts immediately) or a per-operation matching failure that is
collected and reported together with the other failures of the same batch.
"""

from __future__ import annotations

from typing import Optional


class EditingError(Exception):
    """Base error for editing failures."""

    structural: bool = True

    def __init__(self, message: str, *, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class InputMalformedError(EditingError):
    """The caller payload is malformed (missing fields, wrong types, empty oldText)."""


class UnsupportedOperationError(EditingError):
    """The operation kind is not one of replace/prepend_bof/append_eof/overwrite."""


class FileMissingError(EditingError):
    """The target file does not exist and the batch needs existing text."""


class IOFailureError(EditingError):
    """Reading, writing or creating directories failed."""


class DeadlineExceededError(EditingError):
    """The caller-supplied deadline passed before the batch could finish."""


class ClipboardMissError(EditingError):
    """fromClipboard names a clipboard that was never captured."""

    def __init__(self, name: str, *, operation: Optional[str] = None):
        super().__init__(f"fromClipboard ({name}): no clipboard with that name", operation=operation)
        self.name = name


class ReindentPrefixMismatchError(EditingError):
    """A non-empty line lacks the prefix that reindent was asked to strip."""

    def __init__(self, line: str, prefix: str, *, operation: Optional[str] = None):
        super().__init__(
            f"strip precondition failed: line {line!r} does not start with {prefix!r}",
            operation=operation,
        )
        self.line = line
        self.prefix = prefix


class AmbiguousMatchError(EditingError):
    """oldText occurs more than once in the document."""

    structural = False

    def __init__(self, old_text: str, *, operation: Optional[str] = None):
        super().__init__(f"old text not unique:\n{old_text}", operation=operation)
        self.old_text = old_text


class NoMatchError(EditingError):
    """No tier of the match ladder located oldText."""

    structural = False

    def __init__(self, old_text: str, *, operation: Optional[str] = None):
        super().__init__(f"old text not found:\n{old_text}", operation=operation)
        self.old_text = old_text


class InternalInvariantError(EditingError):
    """Something that should be impossible happened (bad tier count, span out of range)."""

    structural = False


class OverlapConflictError(EditingError):
    """Two registered edits touch intersecting spans of the document."""

    def __init__(self, first: str, second: str):
        super().__init__(f"overlapping edits: {first} conflicts with {second}")
        self.first = first
        self.second = second
