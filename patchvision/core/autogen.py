"""
Autogenerated-file detection.

Advisory only: a positive result adds a warning to the patch response and
never blocks an edit.
"""

import logging
from typing import Dict, Iterable, Optional, Sequence

from patchvision.core.grammars.base import Grammar

logger = logging.getLogger(__name__)

DEFAULT_HEADER_PHRASES = ("generate", "do not edit", "export by")


class AutogenDetector:
    """
    Flags files that look machine-generated.

    A file is flagged when it contains one of its grammar's literal markers
    anywhere, or when a comment in its header (package clause / imports)
    mentions one of the header phrases, case-insensitively. Files without a
    grammar are never flagged.
    """

    def __init__(
        self,
        header_phrases: Optional[Iterable[str]] = None,
        markers: Optional[Dict[str, Sequence[str]]] = None,
    ):
        phrases = DEFAULT_HEADER_PHRASES if header_phrases is None else header_phrases
        self.header_phrases = tuple(p.lower() for p in phrases)
        self.markers = dict(markers or {})

    def markers_for(self, grammar: Grammar) -> Sequence[str]:
        return self.markers.get(grammar.name, grammar.generated_markers)

    def is_generated(self, content: str, grammar: Optional[Grammar]) -> bool:
        if grammar is None:
            return False

        for marker in self.markers_for(grammar):
            if marker and marker in content:
                logger.debug(f"Generated marker {marker.strip()!r} found")
                return True

        for comment in grammar.header_comments(content):
            lowered = comment.lower()
            for phrase in self.header_phrases:
                if phrase in lowered:
                    logger.debug(f"Header comment mentions {phrase!r}")
                    return True
        return False
