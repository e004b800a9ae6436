"""File enumeration provider: roots in, SourceUnits out.

Unreadable directories are skipped silently (logged at DEBUG); an
unreadable file becomes a FileAccessError that the caller records and
moves past. Only a root that does not exist, or a tree with no candidate
files at all, stops the run.
"""

from __future__ import annotations

import fnmatch
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from ..exceptions import FileAccessError, SourceEnumerationError
from ..logging_config import get_logger
from ..models import SourceUnit
from .languages import detect_language, is_declaration_file, is_dependency_path

logger = get_logger(__name__)


@dataclass
class SourceCollection:
    """SourceUnits loaded for one run, plus the files that could not be read."""

    root: Path
    units: list[SourceUnit] = field(default_factory=list)
    failures: list[FileAccessError] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.units)

    def __iter__(self):
        return iter(self.units)

    def by_extension(self, extensions: Iterable[str]) -> list[SourceUnit]:
        wanted = {e.lower() for e in extensions}
        return [u for u in self.units if u.extension in wanted]


def should_skip_file(relative: Path, exclude_patterns: Sequence[str]) -> bool:
    """Check a root-relative path against the exclusion globs."""
    posix = relative.as_posix()
    for pattern in exclude_patterns:
        if relative.match(pattern) or fnmatch.fnmatch(posix, pattern):
            return True
    return False


def enumerate_files(
    roots: Sequence[Path],
    extensions: Sequence[str],
    exclude_patterns: Sequence[str] = (),
    max_file_size_bytes: int | None = None,
) -> list[tuple[Path, Path]]:
    """List candidate files under each root.

    Args:
        roots: Directories to walk
        extensions: File extensions to include (e.g. ['.ts', '.py'])
        exclude_patterns: Glob patterns matched against root-relative paths
        max_file_size_bytes: Larger files are skipped

    Returns:
        Sorted (root, absolute path) pairs

    Raises:
        SourceEnumerationError: If no root exists
    """
    ext_set = {e.lower() for e in extensions}
    existing = [r for r in roots if r.is_dir()]
    if not existing:
        raise SourceEnumerationError(roots, "no audit root exists")

    def _on_error(err: OSError) -> None:
        logger.debug(f"Skipping unreadable directory: {err.filename} ({err.strerror})")

    found: list[tuple[Path, Path]] = []
    skipped = 0
    for root in existing:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            # Prune dependency directories before descending
            dirnames[:] = sorted(d for d in dirnames if not is_dependency_path(d))
            for name in sorted(filenames):
                filepath = Path(dirpath) / name
                if filepath.suffix.lower() not in ext_set:
                    continue
                relative = filepath.relative_to(root)
                if is_declaration_file(filepath) or should_skip_file(relative, exclude_patterns):
                    skipped += 1
                    logger.debug(f"Skipped (pattern): {relative}")
                    continue
                if max_file_size_bytes is not None:
                    try:
                        size = filepath.stat().st_size
                    except OSError as e:
                        logger.debug(f"Cannot stat {filepath}: {e}")
                        continue
                    if size > max_file_size_bytes:
                        skipped += 1
                        logger.debug(f"Skipped (size): {relative} ({size} bytes)")
                        continue
                found.append((root, filepath))

    logger.debug(f"Enumerated {len(found)} files, skipped {skipped}")
    return found


def read_source(root: Path, filepath: Path) -> SourceUnit:
    """Load one file as a SourceUnit.

    Raises:
        FileAccessError: If the file cannot be read
    """
    try:
        text = filepath.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise FileAccessError(filepath, f"Cannot read file: {e}") from e
    return SourceUnit(
        path=filepath.relative_to(root).as_posix(),
        text=text,
        language=detect_language(filepath),
    )


def collect_sources(
    roots: Sequence[Path],
    extensions: Sequence[str],
    exclude_patterns: Sequence[str] = (),
    max_file_size_bytes: int | None = None,
) -> SourceCollection:
    """Enumerate and read every candidate file under roots.

    Raises:
        SourceEnumerationError: If no root exists or no file could be listed
    """
    pairs = enumerate_files(roots, extensions, exclude_patterns, max_file_size_bytes)
    if not pairs:
        raise SourceEnumerationError(roots, "no source files found")

    collection = SourceCollection(root=roots[0])
    for root, filepath in pairs:
        try:
            collection.units.append(read_source(root, filepath))
        except FileAccessError as e:
            collection.failures.append(e)
            logger.warning(f"Access error for {filepath}: {e.reason}")

    logger.info(f"Loaded {len(collection.units)} files ({len(collection.failures)} unreadable)")
    return collection
