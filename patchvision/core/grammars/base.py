"""
Base Grammar Interface

A grammar lets the match ladder reason about source code instead of raw text:
it tokenizes text, tells whether a document is well-formed, and exposes the
header comments used by the autogenerated-file check.
"""

from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass
from typing import FrozenSet, List, Tuple


class TokenizeError(ValueError):
    """Raised when text cannot be split into tokens."""

    def __init__(self, message: str, offset: int = -1):
        super().__init__(message)
        self.offset = offset


@dataclass(frozen=True)
class Token:
    """A lexeme with its [start, end) offsets in the tokenized text."""

    kind: str
    text: str
    start: int
    end: int

    @property
    def key(self) -> Tuple[str, str]:
        return (self.kind, self.text)


class Grammar(ABC):
    """
    Language capability used by the grammar-aware ladder tiers.

    Subclasses set:
      - ``name``: registry key ("go", "python")
      - ``extensions``: file suffixes the grammar claims
      - ``trivia_kinds``: token kinds ignored by token-stream matching
      - ``multiline_kinds``: token kinds whose inner whitespace is significant
      - ``generated_markers``: literal markers of generated files
    """

    name: str = ""
    extensions: Tuple[str, ...] = ()
    trivia_kinds: FrozenSet[str] = frozenset()
    multiline_kinds: FrozenSet[str] = frozenset()
    generated_markers: Tuple[str, ...] = ()

    @abstractmethod
    def tokenize(self, text: str, *, fragment: bool = False) -> List[Token]:
        """
        Split text into tokens, trivia included.

        ``fragment=True`` signals that text is a snippet rather than a whole
        file; grammars may then tolerate constructs left open at the end.
        Raises TokenizeError on illegal input.
        """

    @abstractmethod
    def is_well_formed(self, text: str) -> bool:
        """Whether text parses as a complete, syntactically valid file."""

    @abstractmethod
    def header_comments(self, text: str) -> List[str]:
        """
        Comment texts found before the first declaration that is not part of
        the file header (package clause, imports). Must not look at the body,
        so a broken body does not prevent the scan. Returns [] when the header
        itself cannot be tokenized.
        """

    def significant_tokens(self, text: str, *, fragment: bool = False) -> List[Token]:
        return [t for t in self.tokenize(text, fragment=fragment) if t.kind not in self.trivia_kinds]

    def spans_lines(self, token: Token) -> bool:
        return token.kind in self.multiline_kinds and "\n" in token.text

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


def line_starts(text: str) -> List[int]:
    """Offsets at which each line of text begins (split on '\\n' only)."""
    starts = [0]
    for i, ch in enumerate(text):
        if ch == "\n":
            starts.append(i + 1)
    return starts


def line_index(starts: List[int], offset: int) -> int:
    """0-based line containing offset, given the result of line_starts()."""
    return bisect_right(starts, offset) - 1
