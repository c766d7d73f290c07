"""
Request Normalizer

Turns the loosely shaped payloads produced by language models into typed
PatchRequests. Accepted shapes:

  1. {"path": ..., "patches": [ {...}, ... ]}
  2. {"path": ..., "patches": {...}}              single operation object
  3. {"path": ..., "patch": {...}}
  4. {"path": ..., "patches": "<JSON object or list>"}

Operation keys use camelCase (oldText, newText, toClipboard, fromClipboard);
snake_case spellings and the kind/captureTo/sourceFrom aliases are accepted.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union

from patchvision.core.errors import InputMalformedError, UnsupportedOperationError
from patchvision.core.operations import OperationKind, PatchOperation, PatchRequest, Reindent

logger = logging.getLogger(__name__)

_KIND_ALIASES = {
    "replace": OperationKind.REPLACE,
    "prepend_bof": OperationKind.PREPEND_BOF,
    "prependstart": OperationKind.PREPEND_BOF,
    "prepend": OperationKind.PREPEND_BOF,
    "append_eof": OperationKind.APPEND_EOF,
    "appendend": OperationKind.APPEND_EOF,
    "append": OperationKind.APPEND_EOF,
    "overwrite": OperationKind.OVERWRITE,
}

_FIELD_ALIASES = {
    "operation": ("operation", "kind", "op"),
    "old_text": ("oldText", "old_text"),
    "new_text": ("newText", "new_text"),
    "capture_to": ("toClipboard", "captureTo", "to_clipboard", "capture_to"),
    "source_from": ("fromClipboard", "sourceFrom", "from_clipboard", "source_from"),
    "reindent": ("reindent",),
}


class RequestNormalizer:
    """
    Tolerant parser for patch requests.

    Responsibilities:
      1. Decode JSON strings (whole request or the patches field)
      2. Accept every known request shape
      3. Resolve field and operation-kind aliases
      4. Reject anything else with InputMalformedError / UnsupportedOperationError
    """

    def normalize(self, raw: Union[str, bytes, Dict[str, Any]]) -> PatchRequest:
        data = self._decode(raw, "request")
        if not isinstance(data, dict):
            raise InputMalformedError(f"request must be a JSON object, got {type(data).__name__}")

        path = data.get("path")
        if not isinstance(path, str) or not path.strip():
            raise InputMalformedError("request needs a non-empty string 'path'")

        patches = self._patch_list(data)
        operations = [self._operation(entry, i) for i, entry in enumerate(patches)]
        logger.debug(f"Normalized request for {path} with {len(operations)} operations")
        return PatchRequest(path=path, operations=operations)

    # ---------------------------------------------------------- #
    #   SHAPES
    # ---------------------------------------------------------- #

    @staticmethod
    def _decode(raw: Any, what: str) -> Any:
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InputMalformedError(f"{what} is not valid UTF-8: {e}") from e
        if not isinstance(raw, str):
            return raw
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise InputMalformedError(f"{what} is not valid JSON: {e}") from e

    def _patch_list(self, data: Dict[str, Any]) -> List[Any]:
        patches = data.get("patches")
        if patches is None:
            patches = data.get("patch")

        if isinstance(patches, str):
            patches = self._decode(patches, "patches")
        if isinstance(patches, dict):
            patches = [patches]

        if not patches:
            raise InputMalformedError(
                "request has no patches; the response may have been truncated, "
                "send the patches again"
            )
        if not isinstance(patches, list):
            raise InputMalformedError(f"patches must be a list of objects, got {type(patches).__name__}")
        return patches

    # ---------------------------------------------------------- #
    #   OPERATIONS
    # ---------------------------------------------------------- #

    def _operation(self, entry: Any, index: int) -> PatchOperation:
        label = f"operation {index + 1}"
        if not isinstance(entry, dict):
            raise InputMalformedError(f"patch must be an object, got {type(entry).__name__}", operation=label)

        fields = {name: self._field(entry, aliases, label) for name, aliases in _FIELD_ALIASES.items()}

        raw_kind = fields["operation"]
        if not isinstance(raw_kind, str) or not raw_kind.strip():
            raise InputMalformedError("patch needs an 'operation'", operation=label)
        kind = _KIND_ALIASES.get(raw_kind.strip().lower())
        if kind is None:
            raise UnsupportedOperationError(
                f"unsupported operation {raw_kind!r}; expected replace, prepend_bof, append_eof or overwrite",
                operation=label,
            )

        for name in ("old_text", "new_text", "capture_to", "source_from"):
            if fields[name] is not None and not isinstance(fields[name], str):
                raise InputMalformedError(f"{_FIELD_ALIASES[name][0]} must be a string", operation=label)

        return PatchOperation(
            kind=kind,
            new_text=fields["new_text"] or "",
            old_text=fields["old_text"] or "",
            capture_to=fields["capture_to"] or None,
            source_from=fields["source_from"] or None,
            reindent=self._reindent(fields["reindent"], label),
        )

    @staticmethod
    def _field(entry: Dict[str, Any], aliases: tuple, label: str) -> Any:
        present = [key for key in aliases if key in entry]
        if len(present) > 1 and len({json.dumps(entry[k]) for k in present}) > 1:
            raise InputMalformedError(f"conflicting values for {' / '.join(present)}", operation=label)
        return entry[present[0]] if present else None

    @staticmethod
    def _reindent(raw: Any, label: str) -> Optional[Reindent]:
        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise InputMalformedError("reindent must be an object with 'strip' and 'add'", operation=label)
        strip = raw.get("strip", "")
        add = raw.get("add", "")
        if not isinstance(strip, str) or not isinstance(add, str):
            raise InputMalformedError("reindent strip/add must be strings", operation=label)
        return Reindent(strip=strip, add=add)
