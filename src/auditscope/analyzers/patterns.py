"""Pattern engine: named regex rules matched over raw source text.

Matching is stateless: every call compiles nothing and shares nothing,
it runs ``re.finditer`` over the given text and returns all matches.
"""

from __future__ import annotations

import os
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from ..models import Severity, SourceUnit

_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)


@dataclass(frozen=True)
class PatternRule:
    """A named rule: one regex plus the text reported when it matches."""

    rule_id: str
    name: str
    pattern: str
    severity: Severity
    description: str
    recommendation: str
    flags: int = re.IGNORECASE
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern, self.flags))


@dataclass(frozen=True)
class PatternMatch:
    rule: PatternRule
    file: str
    line: int
    column: int
    start: int
    end: int
    text: str


def line_col(text: str, offset: int) -> tuple[int, int]:
    """1-indexed (line, column) of a character offset."""
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


def line_at(text: str, offset: int) -> str:
    """The full source line containing offset."""
    start = text.rfind("\n", 0, offset) + 1
    end = text.find("\n", offset)
    return text[start:] if end == -1 else text[start:end]


def scan_text(text: str, rules: Iterable[PatternRule], path: str = "<memory>") -> list[PatternMatch]:
    """Every non-overlapping match of every rule, rule order then offset order."""
    matches = []
    for rule in rules:
        for m in rule.regex.finditer(text):
            line, column = line_col(text, m.start())
            matches.append(PatternMatch(rule, path, line, column, m.start(), m.end(), m.group(0)))
    return matches


class PatternScanner:
    """Runs a fixed rule table over SourceUnits, one file per worker."""

    def __init__(self, rules: Sequence[PatternRule], max_workers: Optional[int] = None):
        self.rules = tuple(rules)
        self._max_workers = max_workers or _DEFAULT_WORKERS

    def scan(self, unit: SourceUnit) -> list[PatternMatch]:
        return scan_text(unit.text, self.rules, unit.path)

    def scan_all(
        self,
        units: Sequence[SourceUnit],
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> list[PatternMatch]:
        """Scan units in parallel; results keep the input order.

        ``should_stop`` is polled between files so a cancelled run stops
        submitting work.
        """
        if len(units) <= 1:
            return [m for unit in units for m in self.scan(unit)]

        results: list[list[PatternMatch]] = []
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(units))) as executor:
            futures = []
            for unit in units:
                if should_stop is not None and should_stop():
                    break
                futures.append(executor.submit(self.scan, unit))
            for future in futures:
                results.append(future.result())
        return [m for file_matches in results for m in file_matches]
