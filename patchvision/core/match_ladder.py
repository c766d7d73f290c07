"""
Match Ladder

Locates the unique span of a document that an edit's old text refers to.
The caller's old text is often slightly wrong (indentation, spacing, a
reformatted first line), so five strategies are tried from strictest to
loosest:

  1. exact       literal substring search
  2. dedent      literal search after one uniform indentation shift
  3. whitespace  line-by-line comparison ignoring surrounding whitespace,
                 accepted only where the grammar says the result stays valid
  4. tokens      token-stream equality, ignoring trivia
  5. trim        exact search with an unchanged first line dropped

The first tier with a definitive answer stops the ladder. Only the exact tier
can report an ambiguous match: looser tiers would only be more ambiguous, so
anything they cannot pin down uniquely counts as "not found".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from patchvision.core.errors import InternalInvariantError
from patchvision.core.grammars.base import Grammar, TokenizeError, line_starts

logger = logging.getLogger(__name__)


class MatchTier(Enum):
    EXACT = "exact"
    DEDENT = "dedent"
    WHITESPACE = "whitespace"
    TOKENS = "tokens"
    TRIM = "trim"

    @property
    def level(self) -> int:
        return list(MatchTier).index(self) + 1

    @property
    def adjusts_capture(self) -> bool:
        """Tiers whose matched text may differ from the caller's old text."""
        return self in (MatchTier.DEDENT, MatchTier.WHITESPACE, MatchTier.TOKENS)

    @property
    def suppresses_capture(self) -> bool:
        """The trim tier matched less than the caller asked for."""
        return self is MatchTier.TRIM


class MatchStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class MatchSpec:
    """
    A located span in document coordinates.

    ``replacement`` is the text that should take the span's place. It equals
    the caller's new text except where a tier shifted indentation or dropped
    a line; it is None when the ladder was asked to locate only.
    """

    offset: int
    length: int
    tier: MatchTier
    replacement: Optional[str] = None

    @property
    def end(self) -> int:
        return self.offset + self.length

    def matched_text(self, document: str) -> str:
        return document[self.offset:self.end]

    def minimized(self, document: str) -> "MatchSpec":
        """
        Shrink the span to the part that actually changes.

        The common prefix and suffix of matched text and replacement are
        left in place, so two edits whose search contexts overlap can still
        coexist when their real changes do not.
        """
        if self.replacement is None:
            return self
        old = self.matched_text(document)
        new = self.replacement
        limit = min(len(old), len(new))
        head = 0
        while head < limit and old[head] == new[head]:
            head += 1
        tail = 0
        while tail < limit - head and old[len(old) - 1 - tail] == new[len(new) - 1 - tail]:
            tail += 1
        return replace(
            self,
            offset=self.offset + head,
            length=len(old) - head - tail,
            replacement=new[head:len(new) - tail],
        )


@dataclass(frozen=True)
class MatchOutcome:
    status: MatchStatus
    spec: Optional[MatchSpec] = None
    count: int = 0

    @property
    def found(self) -> bool:
        return self.status is MatchStatus.FOUND


NOT_FOUND = MatchOutcome(MatchStatus.NOT_FOUND)


def count_occurrences(document: str, needle: str, limit: int = 2) -> Tuple[int, int]:
    """
    Count overlapping occurrences of needle, stopping at ``limit``.

    Returns (count, offset of the first occurrence or -1).
    """
    if not needle:
        raise InternalInvariantError("cannot search for empty text")
    first = document.find(needle)
    if first < 0:
        return 0, -1
    count = 1
    pos = first
    while count < limit:
        pos = document.find(needle, pos + 1)
        if pos < 0:
            break
        count += 1
    return count, first


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def _common_indent(lines: Iterable[str]) -> str:
    """Longest whitespace prefix shared by all given non-blank lines."""
    prefix: Optional[str] = None
    for line in lines:
        if not line.strip():
            continue
        indent = _indent_of(line)
        if prefix is None:
            prefix = indent
            continue
        i = 0
        while i < min(len(prefix), len(indent)) and prefix[i] == indent[i]:
            i += 1
        prefix = prefix[:i]
    return prefix or ""


def _shift_lines(lines: Sequence[str], old_prefix: str, new_prefix: str) -> List[str]:
    shifted = []
    for line in lines:
        if line.strip() and line.startswith(old_prefix):
            line = new_prefix + line[len(old_prefix):]
        shifted.append(line)
    return shifted


def _trim_affixes(old: str, new: str) -> str:
    """Drop from new the leading/trailing whitespace it shares with old."""
    lead = _indent_of(old)
    if lead and new.startswith(lead):
        new = new[len(lead):]
    trail = old[len(old.rstrip()):]
    if trail and new.endswith(trail):
        new = new[: len(new) - len(trail)]
    return new


class MatchLadder:
    """
    Ordered set of match tiers.

    Tiers can be disabled but never reordered. Grammar-aware tiers
    (whitespace, tokens) step aside when no grammar is given.
    """

    def __init__(self, tiers: Optional[Iterable[MatchTier]] = None):
        enabled = set(MatchTier) if tiers is None else {MatchTier(t) for t in tiers}
        self.tiers: List[MatchTier] = [t for t in MatchTier if t in enabled]

    def find(
        self,
        document: str,
        old_text: str,
        new_text: Optional[str] = None,
        grammar: Optional[Grammar] = None,
    ) -> MatchOutcome:
        if not old_text:
            raise InternalInvariantError("old text must not be empty")

        for tier in self.tiers:
            if tier is MatchTier.EXACT:
                outcome = self._exact(document, old_text, new_text)
                if outcome.status is MatchStatus.AMBIGUOUS:
                    logger.debug(f"Exact search found {old_text!r} more than once")
                    return outcome
                spec = outcome.spec
            elif tier is MatchTier.DEDENT:
                spec = self._dedent(document, old_text, new_text)
            elif tier is MatchTier.WHITESPACE:
                spec = self._whitespace(document, old_text, new_text, grammar)
            elif tier is MatchTier.TOKENS:
                spec = self._tokens(document, old_text, new_text, grammar)
            else:
                spec = self._trim(document, old_text, new_text)

            if spec is not None:
                if spec.offset < 0 or spec.length < 0 or spec.end > len(document):
                    raise InternalInvariantError(
                        f"{tier.value} tier produced span [{spec.offset},{spec.end}) "
                        f"outside document of length {len(document)}"
                    )
                logger.debug(f"Matched via {tier.value} tier at [{spec.offset},{spec.end})")
                return MatchOutcome(MatchStatus.FOUND, spec, 1)

        return NOT_FOUND

    # ------------------------------------------------------------------
    # Tier 1: exact
    # ------------------------------------------------------------------
    def _exact(self, document: str, old: str, new: Optional[str]) -> MatchOutcome:
        count, offset = count_occurrences(document, old)
        if count == 0:
            return NOT_FOUND
        if count > 1:
            return MatchOutcome(MatchStatus.AMBIGUOUS, count=count)
        return MatchOutcome(MatchStatus.FOUND, MatchSpec(offset, len(old), MatchTier.EXACT, new), 1)

    # ------------------------------------------------------------------
    # Tier 2: dedent
    # ------------------------------------------------------------------
    def _dedent(self, document: str, old: str, new: Optional[str]) -> Optional[MatchSpec]:
        old_lines = old.split("\n")
        # leading blank lines stay in the probe; the first non-empty line anchors it
        k = next((j for j, line in enumerate(old_lines) if line.strip()), None)
        if k is None:
            return None
        blank_lead = old_lines[:k]
        head = old_lines[k]
        target = head.strip()
        body = old_lines[k + 1:]
        needle_indent = _common_indent(body)

        doc_lines = document.split("\n")
        # probe text -> (head prefix, document indentation) it was built for
        probes: Dict[str, Tuple[str, str]] = {}
        for i, line in enumerate(doc_lines):
            if line.strip() != target:
                continue
            window = doc_lines[i + 1:i + 1 + len(body)]
            if len(window) < len(body):
                continue
            doc_indent = _common_indent(w for b, w in zip(body, window) if b.strip())
            head_prefix = _indent_of(line) if blank_lead else ""
            probe = "\n".join(
                blank_lead + [head_prefix + head.lstrip()] + _shift_lines(body, needle_indent, doc_indent)
            )
            if probe != old:
                probes.setdefault(probe, (head_prefix, doc_indent))

        unique: List[Tuple[str, int]] = []
        for probe in probes:
            count, offset = count_occurrences(document, probe)
            if count > 1:
                logger.debug("Dedent probe matched more than once")
                return None
            if count == 1:
                unique.append((probe, offset))
        if len(unique) != 1:
            if unique:
                logger.debug(f"Dedent found {len(unique)} competing indentation deltas")
            return None

        probe, offset = unique[0]
        replacement = None
        if new is not None:
            head_prefix, doc_indent = probes[probe]
            new_lines = new.split("\n")
            j = next((n for n, line in enumerate(new_lines) if line.strip()), None)
            if j is not None:
                first = new_lines[j]
                lead = _indent_of(head)
                if first.startswith(lead):
                    first = first[len(lead):]
                new_lines[j] = head_prefix + first
                new_lines[j + 1:] = _shift_lines(new_lines[j + 1:], needle_indent, doc_indent)
            replacement = "\n".join(new_lines)
        return MatchSpec(offset, len(probe), MatchTier.DEDENT, replacement)

    # ------------------------------------------------------------------
    # Tier 3: whitespace, bounded by grammar validity
    # ------------------------------------------------------------------
    def _whitespace(
        self,
        document: str,
        old: str,
        new: Optional[str],
        grammar: Optional[Grammar],
    ) -> Optional[MatchSpec]:
        if grammar is None or new is None:
            return None
        old_lines = old.split("\n")
        keeps_newline = old.endswith("\n")
        if keeps_newline:
            old_lines.pop()
        keys = [line.strip() for line in old_lines]
        if not any(keys):
            return None

        doc_lines = document.split("\n")
        stripped = [line.strip() for line in doc_lines]
        windows = [
            i
            for i in range(len(doc_lines) - len(keys) + 1)
            if stripped[i] == keys[0] and stripped[i:i + len(keys)] == keys
        ]
        if len(windows) != 1:
            return None
        first = windows[0]
        last = first + len(keys) - 1

        starts = line_starts(document)
        start = starts[first]
        end = starts[last] + len(doc_lines[last])
        if keeps_newline and end < len(document):
            end += 1

        try:
            tokens = grammar.tokenize(document)
        except TokenizeError as e:
            logger.debug(f"Whitespace tier skipped, document does not tokenize: {e}")
            return None
        for tok in tokens:
            if tok.start < end and tok.end > start and grammar.spans_lines(tok):
                logger.debug(f"Whitespace tier skipped, {tok.kind} token spans matched lines")
                return None

        k = next(j for j, key in enumerate(keys) if key)
        needle_indent = _indent_of(old_lines[k])
        doc_indent = _indent_of(doc_lines[first + k])
        new_lines = new.split("\n")
        if all(line.startswith(needle_indent) for line in new_lines if line.strip()):
            new_lines = _shift_lines(new_lines, needle_indent, doc_indent)
        replacement = "\n".join(new_lines)

        candidate = document[:start] + replacement + document[end:]
        if not grammar.is_well_formed(candidate):
            logger.debug("Whitespace tier rejected, the edited document does not parse")
            return None

        return MatchSpec(start, end - start, MatchTier.WHITESPACE, replacement)

    # ------------------------------------------------------------------
    # Tier 4: token stream
    # ------------------------------------------------------------------
    def _tokens(
        self,
        document: str,
        old: str,
        new: Optional[str],
        grammar: Optional[Grammar],
    ) -> Optional[MatchSpec]:
        if grammar is None:
            return None
        try:
            needle = [t.key for t in grammar.significant_tokens(old, fragment=True)]
            haystack = grammar.significant_tokens(document)
        except TokenizeError as e:
            logger.debug(f"Token tier skipped: {e}")
            return None
        if not needle:
            return None

        keys = [t.key for t in haystack]
        size = len(needle)
        hits = [
            i
            for i in range(len(keys) - size + 1)
            if keys[i] == needle[0] and keys[i:i + size] == needle
        ]
        if len(hits) != 1:
            return None

        start = haystack[hits[0]].start
        end = haystack[hits[0] + size - 1].end
        replacement = None if new is None else _trim_affixes(old, new)
        return MatchSpec(start, end - start, MatchTier.TOKENS, replacement)

    # ------------------------------------------------------------------
    # Tier 5: first-line trim
    # ------------------------------------------------------------------
    def _trim(self, document: str, old: str, new: Optional[str]) -> Optional[MatchSpec]:
        if new is None or "\n" not in old or "\n" not in new:
            return None
        old_head, old_rest = old.split("\n", 1)
        new_head, new_rest = new.split("\n", 1)
        if old_head.strip() != new_head.strip() or not old_rest.strip():
            return None
        count, offset = count_occurrences(document, old_rest)
        if count != 1:
            return None
        return MatchSpec(offset, len(old_rest), MatchTier.TRIM, new_rest)
