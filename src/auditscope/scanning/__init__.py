"""Source enumeration and syntax-tree providers."""

from .files import SourceCollection, collect_sources, enumerate_files, read_source
from .languages import detect_language, find_manifest
from .nodes import NodeKind, SyntaxNode, classify
from .provider import ParseResult, SyntaxTreeProvider
from .treesitter_parser import TreeSitterParser, get_supported_languages

__all__ = [
    "SourceCollection",
    "collect_sources",
    "enumerate_files",
    "read_source",
    "detect_language",
    "find_manifest",
    "NodeKind",
    "SyntaxNode",
    "classify",
    "ParseResult",
    "SyntaxTreeProvider",
    "TreeSitterParser",
    "get_supported_languages",
]
