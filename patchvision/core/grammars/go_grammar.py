"""
Go grammar.

Tokenization follows the lexical rules of the Go specification with a single
regular expression scanned left to right (automatic semicolons are not
synthesized; they carry no information for matching). Well-formedness is
decided by the tree-sitter Go parser.
"""

import logging
import re
from typing import Iterator, List

import tree_sitter_go
from tree_sitter import Language, Parser

from patchvision.core.grammars.base import Grammar, Token, TokenizeError

logger = logging.getLogger(__name__)

GO_LANGUAGE = Language(tree_sitter_go.language())

GO_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
        "map", "package", "range", "return", "select", "struct", "switch", "type",
        "var",
    }
)

_OPERATORS = [
    "<<=", ">>=", "&^=", "...", "&&", "||", "<-", "++", "--", "==", "!=", "<=",
    ">=", ":=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<", ">>", "&^",
    "+", "-", "*", "/", "%", "&", "|", "^", "<", ">", "=", "!", "~", "(", ")",
    "[", "]", "{", "}", ",", ";", ".", ":",
]

_TOKEN_RE = re.compile(
    r"""
      (?P<whitespace>[ \t\r\n\ufeff]+)
    | (?P<comment>//[^\n]*|/\*.*?\*/)
    | (?P<unterminated>/\*)
    | (?P<raw_string>`[^`]*`)
    | (?P<string>"(?:[^"\\\n]|\\.)*")
    | (?P<char>'(?:[^'\\\n]|\\[^\n])+')
    | (?P<number>
          0[xX][0-9a-fA-F_]*(?:\.[0-9a-fA-F_]*)?(?:[pP][+-]?[0-9_]+)?i?
        | 0[bB][01_]+i?
        | 0[oO][0-7_]+i?
        | (?:[0-9][0-9_]*(?:\.[0-9_]*)?|\.[0-9][0-9_]*)(?:[eE][+-]?[0-9_]+)?i?
      )
    | (?P<ident>[^\W\d]\w*)
    | (?P<op>"""
    + "|".join(re.escape(op) for op in _OPERATORS)
    + r""")
    """,
    re.VERBOSE | re.DOTALL,
)

# Tokens allowed in the package clause and import declarations.
_HEADER_OPS = frozenset({"(", ")", ";", "."})


class GoGrammar(Grammar):
    name = "go"
    extensions = (".go",)
    trivia_kinds = frozenset({"whitespace", "comment"})
    multiline_kinds = frozenset({"comment", "raw_string"})
    # bindata-packed files embed this helper; it never appears in hand-written code.
    generated_markers = ("\nfunc bindataRead(",)

    def iter_tokens(self, text: str) -> Iterator[Token]:
        pos = 0
        while pos < len(text):
            m = _TOKEN_RE.match(text, pos)
            if m is None or m.lastgroup == "unterminated":
                raise TokenizeError(f"illegal Go token at offset {pos}: {text[pos:pos + 10]!r}", pos)
            kind = m.lastgroup
            lexeme = m.group()
            if kind == "ident" and lexeme in GO_KEYWORDS:
                kind = "keyword"
            yield Token(kind, lexeme, m.start(), m.end())
            pos = m.end()

    def tokenize(self, text: str, *, fragment: bool = False) -> List[Token]:
        return list(self.iter_tokens(text))

    def is_well_formed(self, text: str) -> bool:
        parser = Parser(GO_LANGUAGE)
        tree = parser.parse(text.encode("utf-8", "surrogateescape"))
        return not tree.root_node.has_error

    def header_comments(self, text: str) -> List[str]:
        comments: List[str] = []
        seen_package = False
        try:
            for tok in self.iter_tokens(text):
                if tok.kind == "whitespace":
                    continue
                if tok.kind == "comment":
                    comments.append(_comment_text(tok.text))
                    continue
                if not seen_package:
                    if tok.text != "package":
                        return []
                    seen_package = True
                    continue
                if tok.kind in ("ident", "string", "raw_string") or tok.text == "import":
                    continue
                if tok.kind == "op" and tok.text in _HEADER_OPS:
                    continue
                break
        except TokenizeError as e:
            logger.debug(f"Go header did not tokenize: {e}")
            return []
        return comments if seen_package else []


def _comment_text(raw: str) -> str:
    if raw.startswith("//"):
        return raw[2:].strip()
    return raw[2:-2].strip()
