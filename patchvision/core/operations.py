"""
Typed request model: one PatchRequest targets one file and carries an ordered
list of PatchOperations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class OperationKind(Enum):
    REPLACE = "replace"
    PREPEND_BOF = "prepend_bof"
    APPEND_EOF = "append_eof"
    OVERWRITE = "overwrite"

    @property
    def creates_file(self) -> bool:
        """Kinds that can run against a file that does not exist yet."""
        return self is not OperationKind.REPLACE


@dataclass(frozen=True)
class Reindent:
    strip: str = ""
    add: str = ""


@dataclass(frozen=True)
class PatchOperation:
    kind: OperationKind
    new_text: str = ""
    old_text: str = ""
    capture_to: Optional[str] = None
    source_from: Optional[str] = None
    reindent: Optional[Reindent] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"operation": self.kind.value, "newText": self.new_text}
        if self.old_text:
            data["oldText"] = self.old_text
        if self.capture_to:
            data["toClipboard"] = self.capture_to
        if self.source_from:
            data["fromClipboard"] = self.source_from
        if self.reindent is not None:
            data["reindent"] = {"strip": self.reindent.strip, "add": self.reindent.add}
        return data


@dataclass
class PatchRequest:
    path: str
    operations: List[PatchOperation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "patches": [op.to_dict() for op in self.operations]}
