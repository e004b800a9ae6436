"""Tree-sitter parser wrapper.

Provides a unified interface for tree-sitter parsing across the
JavaScript, TypeScript/TSX and Python grammars.

Usage:
    parser = TreeSitterParser()
    tree = parser.parse(code_bytes, "typescript")
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable

import tree_sitter
import tree_sitter_javascript
import tree_sitter_python
import tree_sitter_typescript

from ..exceptions import ParsingError, UnsupportedLanguageError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Language name -> callable returning the raw grammar capsule.
# TSX is bundled with tree-sitter-typescript under its own entry point.
_GRAMMARS: dict[str, Callable[[], Any]] = {
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
    "python": tree_sitter_python.language,
}


def get_supported_languages() -> list[str]:
    """Get list of languages with installed grammars."""
    return list(_GRAMMARS)


class TreeSitterParser:
    """Wrapper around tree-sitter for multi-language parsing.

    Languages are loaded once; parser objects are kept per thread since a
    tree_sitter.Parser must not be shared between concurrent parses.
    """

    def __init__(self) -> None:
        self._languages: dict[str, tree_sitter.Language] = {
            name: tree_sitter.Language(grammar()) for name, grammar in _GRAMMARS.items()
        }
        self._local = threading.local()

    @property
    def supported_languages(self) -> list[str]:
        return list(self._languages)

    def _parser(self, language: str) -> tree_sitter.Parser:
        parsers = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = self._local.parsers = {}
        parser = parsers.get(language)
        if parser is None:
            parser = parsers[language] = tree_sitter.Parser(self._languages[language])
        return parser

    def parse(self, code: bytes, language: str, filepath: Path | None = None) -> tree_sitter.Tree:
        """Parse code and return syntax tree.

        Args:
            code: Source code as bytes
            language: Language name (e.g., "typescript")
            filepath: Used only for error reporting

        Raises:
            UnsupportedLanguageError: If no grammar is loaded for language
            ParsingError: If tree-sitter rejects the input
        """
        if language not in self._languages:
            raise UnsupportedLanguageError(language, self.supported_languages)

        try:
            tree = self._parser(language).parse(code)
        except (ValueError, TypeError) as e:
            raise ParsingError(filepath or Path("<memory>"), language, str(e)) from e

        if tree.root_node.has_error:
            # tree-sitter recovers from syntax errors; the tree is still walkable
            logger.debug(f"Syntax errors recovered while parsing {filepath or '<memory>'} ({language})")
        return tree
