"""Syntax-tree provider: attaches parsed trees to SourceUnits.

Configuration problems (no project manifest under the root) raise
ProjectManifestError before any parsing starts; per-file parse problems
raise ScanFailure subclasses that parse_all() collects and skips.
"""

from __future__ import annotations

import dataclasses
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Optional, Sequence

from ..exceptions import ProjectManifestError, ScanFailure
from ..logging_config import get_logger
from ..models import SourceUnit
from .languages import MANIFEST_FILES, find_manifest, has_syntax_tree, is_declaration_file, is_dependency_path
from .nodes import SyntaxNode
from .treesitter_parser import TreeSitterParser

logger = get_logger(__name__)

# Default worker count: CPU count, capped at 8
_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)


@dataclass
class ParseResult:
    """Parsed units plus the files that failed to parse."""

    units: list[SourceUnit] = field(default_factory=list)
    failures: list[ScanFailure] = field(default_factory=list)


class SyntaxTreeProvider:
    """Given SourceUnits and a project root, yields walkable syntax trees.

    Attributes:
        parsed_count: Number of units parsed successfully in the last call
        failed_count: Number of units that failed in the last call
    """

    def __init__(
        self,
        parser: Optional[TreeSitterParser] = None,
        require_manifest: bool = True,
        max_workers: int | None = None,
    ) -> None:
        self._parser = parser or TreeSitterParser()
        self.require_manifest = require_manifest
        self._max_workers = max_workers or _DEFAULT_WORKERS
        self._lock = Lock()
        self.parsed_count = 0
        self.failed_count = 0

    def check_manifest(self, root: Path) -> Optional[Path]:
        """Locate the project manifest under root.

        Raises:
            ProjectManifestError: If required and none is found
        """
        manifest = find_manifest(root)
        if manifest is None and self.require_manifest:
            raise ProjectManifestError(root, MANIFEST_FILES)
        if manifest is not None:
            logger.debug(f"Using project manifest {manifest}")
        return manifest

    @staticmethod
    def is_analyzable(unit: SourceUnit) -> bool:
        return (
            has_syntax_tree(unit.language)
            and not is_declaration_file(unit.path)
            and not is_dependency_path(unit.path)
        )

    def parse(self, unit: SourceUnit) -> SourceUnit:
        """Return a copy of unit with its syntax tree attached.

        Raises:
            UnsupportedLanguageError: If the unit's language has no grammar
            ParsingError: If parsing fails
        """
        tree = self._parser.parse(unit.text.encode("utf-8"), unit.language, Path(unit.path))
        return dataclasses.replace(unit, tree=tree)

    def root(self, unit: SourceUnit) -> SyntaxNode:
        """Root node of a parsed unit."""
        if unit.tree is None:
            unit = self.parse(unit)
        return SyntaxNode(unit.tree.root_node, unit.language)

    def parse_all(self, units: Sequence[SourceUnit], root: Path) -> ParseResult:
        """Parse every analyzable unit, in parallel.

        Units without a grammar, declaration files and dependency files
        are left out. Results keep the input order.

        Raises:
            ProjectManifestError: If a manifest is required and missing
        """
        self.check_manifest(root)

        candidates = [u for u in units if self.is_analyzable(u)]
        result = ParseResult()
        parsed: dict[int, SourceUnit] = {}
        self.parsed_count = 0
        self.failed_count = 0

        if len(candidates) <= 1:
            for i, unit in enumerate(candidates):
                self._parse_one(i, unit, parsed, result)
        else:
            workers = min(self._max_workers, len(candidates))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self._parse_one, i, unit, parsed, result): unit
                    for i, unit in enumerate(candidates)
                }
                for future in as_completed(futures):
                    future.result()

        result.units = [parsed[i] for i in sorted(parsed)]
        logger.debug(f"Parsed {self.parsed_count} files, {self.failed_count} failed")
        return result

    def _parse_one(
        self, index: int, unit: SourceUnit, parsed: dict[int, SourceUnit], result: ParseResult
    ) -> None:
        try:
            done = self.parse(unit)
        except ScanFailure as e:
            logger.warning(f"Parse error for {unit.path}: {e}")
            with self._lock:
                result.failures.append(e)
                self.failed_count += 1
            return
        with self._lock:
            parsed[index] = done
            self.parsed_count += 1
