"""
Python grammar backed by the standard library tokenizer and parser.
"""

import ast
import io
import logging
import textwrap
import tokenize
from typing import Iterator, List

from patchvision.core.grammars.base import Grammar, Token, TokenizeError, line_starts

logger = logging.getLogger(__name__)

_LAYOUT = {"NL", "NEWLINE", "INDENT", "DEDENT", "ENCODING", "ENDMARKER"}


class PythonGrammar(Grammar):
    name = "python"
    extensions = (".py", ".pyi")
    trivia_kinds = frozenset(_LAYOUT | {"COMMENT"})
    multiline_kinds = frozenset({"STRING", "FSTRING_MIDDLE"})
    # protoc-generated modules register every message with the symbol database.
    generated_markers = ("\n_sym_db = _symbol_database.Default()",)

    def iter_tokens(self, text: str) -> Iterator[Token]:
        starts = line_starts(text)
        size = len(text)

        def offset(row: int, col: int) -> int:
            if row - 1 >= len(starts):
                return size
            return min(starts[row - 1] + col, size)

        try:
            for tok in tokenize.generate_tokens(io.StringIO(text).readline):
                yield Token(
                    tokenize.tok_name[tok.type],
                    tok.string,
                    offset(*tok.start),
                    offset(*tok.end),
                )
        except (tokenize.TokenError, SyntaxError) as e:
            raise TokenizeError(f"python tokenizer: {e}") from e

    def tokenize(self, text: str, *, fragment: bool = False) -> List[Token]:
        if not fragment:
            return list(self.iter_tokens(text))

        # Snippets often start mid-block or stop inside an open bracket.
        # Indentation tokens are trivia, so dedenting loses nothing.
        tokens: List[Token] = []
        try:
            for tok in self.iter_tokens(textwrap.dedent(text)):
                tokens.append(tok)
        except TokenizeError as e:
            if not isinstance(e.__cause__, tokenize.TokenError):
                raise
            logger.debug(f"Accepting partial token stream for fragment: {e}")
        return tokens

    def is_well_formed(self, text: str) -> bool:
        try:
            ast.parse(text)
        except (SyntaxError, ValueError):
            return False
        return True

    def header_comments(self, text: str) -> List[str]:
        comments: List[str] = []
        line_tokens: List[Token] = []
        docstring_allowed = True
        try:
            for tok in self.iter_tokens(text):
                if tok.kind == "COMMENT":
                    comments.append(tok.text.lstrip("#").strip())
                    continue
                if tok.kind in ("NL", "ENCODING", "INDENT", "DEDENT"):
                    continue
                if tok.kind in ("NEWLINE", "ENDMARKER"):
                    if line_tokens:
                        if not _is_header_statement(line_tokens, docstring_allowed):
                            break
                        if line_tokens[0].kind == "STRING":
                            comments.append(ast.literal_eval(line_tokens[0].text).strip())
                        docstring_allowed = False
                        line_tokens = []
                    continue
                if line_tokens == [] and not _may_start_header(tok, docstring_allowed):
                    break
                line_tokens.append(tok)
        except TokenizeError as e:
            logger.debug(f"Python header did not tokenize: {e}")
            return []
        except (ValueError, SyntaxError):
            # Docstring literal that literal_eval rejects (e.g. bytes prefix quirks).
            return comments
        return comments


def _may_start_header(tok: Token, docstring_allowed: bool) -> bool:
    if tok.kind == "NAME" and tok.text in ("import", "from"):
        return True
    return tok.kind == "STRING" and docstring_allowed


def _is_header_statement(tokens: List[Token], docstring_allowed: bool) -> bool:
    first = tokens[0]
    if first.kind == "STRING":
        return docstring_allowed and len(tokens) == 1
    return first.kind == "NAME" and first.text in ("import", "from")
