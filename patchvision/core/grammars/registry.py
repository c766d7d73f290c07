"""
Grammar Registry

Maps file paths to the grammar that understands them. Files whose extension
has no registered grammar get ``None``, which makes the grammar-aware ladder
tiers step aside.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from patchvision.core.grammars.base import Grammar
from patchvision.core.grammars.go_grammar import GoGrammar
from patchvision.core.grammars.python_grammar import PythonGrammar

logger = logging.getLogger(__name__)


class GrammarRegistry:
    """
    Registry of language grammars.

    Supports:
    - Registration by grammar name
    - Lookup by file extension, with per-extension overrides
    - Disabling grammars by name
    """

    def __init__(self):
        self._grammars: Dict[str, Grammar] = {}
        self._extensions: Dict[str, str] = {}
        self._disabled: set = set()

    def register(self, grammar: Grammar) -> None:
        """
        Register a grammar instance and claim its extensions.

        Args:
            grammar: Grammar instance
        """
        if grammar.name in self._grammars:
            logger.warning(f"Grammar {grammar.name} already registered, overwriting")
        self._grammars[grammar.name] = grammar
        for ext in grammar.extensions:
            self._extensions[ext.lower()] = grammar.name
        logger.debug(f"Registered grammar: {grammar.name} {list(grammar.extensions)}")

    def map_extension(self, extension: str, name: str) -> None:
        """Route files ending in ``extension`` to the grammar called ``name``."""
        if not extension.startswith("."):
            extension = "." + extension
        self._extensions[extension.lower()] = name

    def disable(self, names: Iterable[str]) -> None:
        self._disabled.update(names)

    def get(self, name: str) -> Optional[Grammar]:
        if name in self._disabled:
            return None
        return self._grammars.get(name)

    def for_path(self, path: Union[str, Path]) -> Optional[Grammar]:
        """
        Grammar for a file path, or None when no enabled grammar claims it.

        Args:
            path: File path (only the suffix is inspected)
        """
        suffix = Path(path).suffix.lower()
        name = self._extensions.get(suffix)
        if name is None:
            return None
        grammar = self.get(name)
        if grammar is None and name not in self._disabled:
            logger.warning(f"Extension {suffix} mapped to unknown grammar {name!r}")
        return grammar

    def names(self) -> List[str]:
        return sorted(self._grammars)


def default_registry(
    extensions: Optional[Dict[str, str]] = None,
    disabled: Optional[Iterable[str]] = None,
) -> GrammarRegistry:
    """Registry holding the bundled Go and Python grammars."""
    registry = GrammarRegistry()
    registry.register(GoGrammar())
    registry.register(PythonGrammar())
    for ext, name in (extensions or {}).items():
        registry.map_extension(ext, name)
    registry.disable(disabled or ())
    return registry
