"""
Language grammars used by the grammar-aware match tiers and the
autogenerated-file check.
"""

from patchvision.core.grammars.base import Grammar, Token, TokenizeError
from patchvision.core.grammars.go_grammar import GoGrammar
from patchvision.core.grammars.python_grammar import PythonGrammar
from patchvision.core.grammars.registry import GrammarRegistry, default_registry

__all__ = [
    "Grammar",
    "Token",
    "TokenizeError",
    "GoGrammar",
    "PythonGrammar",
    "GrammarRegistry",
    "default_registry",
]
