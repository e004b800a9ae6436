"""Language table: extension mapping, grammar availability, skip rules.

Adding a new language:
  1. Map its extensions in _EXTENSION_TO_LANGUAGE.
  2. If a tree-sitter grammar is wired up in treesitter_parser, add it to
     SYNTAX_LANGUAGES and give it a classifier table in nodes.py.
"""

from __future__ import annotations

from pathlib import Path, PurePath

_EXTENSION_TO_LANGUAGE = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".py": "python",
    ".html": "html",
    ".htm": "html",
    ".vue": "vue",
    ".svelte": "svelte",
    ".css": "css",
    ".scss": "css",
}

# Languages with a tree-sitter grammar; only these get a syntax tree
SYNTAX_LANGUAGES = frozenset({"typescript", "tsx", "javascript", "python"})

# Type declaration files are not authored code under audit
DECLARATION_SUFFIXES = (".d.ts", ".d.mts", ".d.cts")

# Third-party or generated directories, skipped wherever they appear
DEPENDENCY_DIRS = frozenset(
    {
        "node_modules",
        "bower_components",
        "jspm_packages",
        "vendor",
        "site-packages",
        ".venv",
        "venv",
        "__pycache__",
        ".git",
        ".tox",
        ".mypy_cache",
        ".pytest_cache",
    }
)

# Files that mark a directory as a project root
MANIFEST_FILES = (
    "tsconfig.json",
    "jsconfig.json",
    "package.json",
    "pyproject.toml",
    "setup.py",
    "setup.cfg",
)


def detect_language(filepath: str | PurePath) -> str:
    """Detect language from file extension.

    Returns:
        Language name (e.g., "typescript", "html") or "unknown"
    """
    path = PurePath(filepath)
    return _EXTENSION_TO_LANGUAGE.get(path.suffix.lower(), "unknown")


def has_syntax_tree(language: str) -> bool:
    return language in SYNTAX_LANGUAGES


def is_declaration_file(filepath: str | PurePath) -> bool:
    return PurePath(filepath).name.lower().endswith(DECLARATION_SUFFIXES)


def is_dependency_path(filepath: str | PurePath) -> bool:
    return any(part in DEPENDENCY_DIRS for part in PurePath(filepath).parts)


def find_manifest(root: Path) -> Path | None:
    """Return the first project manifest found directly under root."""
    for name in MANIFEST_FILES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None
