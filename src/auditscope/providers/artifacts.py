"""Build-artifact provider: bundle chunk metadata from stats JSON or build output.

Lookup order:
    1. Webpack-style stats JSON (chunks[].names / size / modules)
    2. .js files under the first existing build directory
An optional build command runs first, bounded by a timeout.
"""

from __future__ import annotations

import json
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..config import PerformanceConfig
from ..exceptions import BuildArtifactsUnavailable, PhaseTimeoutError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Rough gzip ratio for minified JavaScript
GZIP_RATIO = 0.3


@dataclass(frozen=True)
class Chunk:
    name: str
    size: int
    modules: tuple[str, ...] = ()


@dataclass(frozen=True)
class BundleStats:
    """Chunk breakdown of one build.

    Attributes:
        chunks: Per-chunk name, byte size and contained module identifiers
        source: Where the numbers came from (stats file or build directory)
    """

    chunks: tuple[Chunk, ...] = ()
    source: str = ""

    @property
    def total_size(self) -> int:
        return sum(c.size for c in self.chunks)

    @property
    def gzipped_size(self) -> int:
        return round(self.total_size * GZIP_RATIO)

    def duplicate_modules(self) -> list[str]:
        """Module identifiers that appear in more than one chunk."""
        seen: dict[str, int] = {}
        for chunk in self.chunks:
            for module in set(chunk.modules):
                seen[module] = seen.get(module, 0) + 1
        return sorted(m for m, count in seen.items() if count > 1)


class BuildArtifactProvider(ABC):
    @abstractmethod
    def load(self) -> BundleStats:
        """Return bundle stats.

        Raises:
            BuildArtifactsUnavailable: If no artifacts can be found
            PhaseTimeoutError: If a build command exceeds its timeout
        """


@dataclass
class StaticArtifactProvider(BuildArtifactProvider):
    """Serves pre-computed stats; raises when given none."""

    stats: Optional[BundleStats] = None
    searched: list[str] = field(default_factory=list)

    def load(self) -> BundleStats:
        if self.stats is None:
            raise BuildArtifactsUnavailable(self.searched, "no artifacts found")
        return self.stats


class FilesystemArtifactProvider(BuildArtifactProvider):
    """Reads stats files and build directories under a project root."""

    def __init__(self, root: Path, config: Optional[PerformanceConfig] = None):
        self.root = Path(root)
        self.config = config or PerformanceConfig()

    def load(self) -> BundleStats:
        if self.config.build_command:
            self.run_build()

        for stats_file in self.config.stats_files:
            path = self.root / stats_file
            if path.is_file():
                try:
                    data = json.loads(path.read_text(encoding="utf-8"))
                except (OSError, json.JSONDecodeError) as e:
                    logger.warning(f"Unreadable bundle stats {path}: {e}")
                    continue
                logger.debug(f"Using bundle stats from {path}")
                return parse_webpack_stats(data, source=stats_file)

        for build_dir in self.config.build_dirs:
            directory = self.root / build_dir
            if directory.is_dir():
                stats = scan_build_directory(directory, self.root)
                if stats.chunks:
                    logger.debug(f"Using build output in {directory}")
                    return stats

        searched = list(self.config.stats_files) + list(self.config.build_dirs)
        raise BuildArtifactsUnavailable(searched, "no artifacts found")

    def run_build(self) -> None:
        """Run the configured build command.

        A non-zero exit is logged and the lookup continues with whatever
        artifacts already exist.

        Raises:
            PhaseTimeoutError: If the build exceeds build_timeout
        """
        command = shlex.split(self.config.build_command or "")
        logger.info(f"Running build: {self.config.build_command}")
        try:
            result = subprocess.run(
                command,
                cwd=self.root,
                capture_output=True,
                text=True,
                timeout=self.config.build_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise PhaseTimeoutError("performance build", self.config.build_timeout) from e
        except FileNotFoundError as e:
            logger.warning(f"Build command not found: {e}")
            return
        if result.returncode != 0:
            logger.warning(f"Build exited with status {result.returncode}: {result.stderr.strip()[:200]}")


def parse_webpack_stats(stats: dict[str, Any], source: str = "") -> BundleStats:
    chunks = []
    for chunk in stats.get("chunks") or []:
        names = chunk.get("names") or []
        modules = tuple(
            m.get("name") or m.get("identifier") or ""
            for m in chunk.get("modules") or []
            if isinstance(m, dict)
        )
        chunks.append(
            Chunk(
                name=names[0] if names else "unnamed",
                size=int(chunk.get("size") or 0),
                modules=tuple(m for m in modules if m),
            )
        )
    return BundleStats(tuple(chunks), source)


def scan_build_directory(directory: Path, root: Path) -> BundleStats:
    """One chunk per .js file under directory; the file is its own module."""
    chunks = []
    for path in sorted(directory.rglob("*.js")):
        try:
            size = path.stat().st_size
        except OSError as e:
            logger.debug(f"Cannot stat {path}: {e}")
            continue
        relative = path.relative_to(root).as_posix()
        chunks.append(Chunk(name=path.name, size=size, modules=(relative,)))
    return BundleStats(tuple(chunks), directory.relative_to(root).as_posix())
