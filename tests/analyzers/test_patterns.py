"""Tests for the regex pattern engine."""

import re

from auditscope.analyzers.patterns import PatternRule, PatternScanner, line_at, line_col, scan_text
from auditscope.models import Severity

TODO_RULE = PatternRule("demo.todo", "Todo", r"TODO", Severity.LOW, "Todo left in code", "Resolve it")
FIXME_RULE = PatternRule("demo.fixme", "Fixme", r"FIXME", Severity.MEDIUM, "Fixme left in code", "Fix it")


class TestPositions:
    """1-indexed line and column from character offsets."""

    def test_first_character(self):
        assert line_col("abc", 0) == (1, 1)

    def test_after_newline(self):
        assert line_col("ab\ncd", 3) == (2, 1)
        assert line_col("ab\ncd", 4) == (2, 2)

    def test_line_at(self):
        text = "one\ntwo three\nfour"
        assert line_at(text, text.index("three")) == "two three"
        assert line_at(text, text.index("four")) == "four"


class TestScanText:
    """Every non-overlapping match, rule order then offset order."""

    def test_reports_every_match(self):
        text = "// TODO a\nx = 1 // TODO b\n"
        matches = scan_text(text, [TODO_RULE], "a.js")
        assert [(m.line, m.column) for m in matches] == [(1, 4), (2, 10)]
        assert all(m.file == "a.js" for m in matches)

    def test_rule_order_then_offset(self):
        text = "FIXME TODO FIXME"
        matches = scan_text(text, [TODO_RULE, FIXME_RULE])
        assert [(m.rule.rule_id, m.start) for m in matches] == [
            ("demo.todo", 6),
            ("demo.fixme", 0),
            ("demo.fixme", 11),
        ]

    def test_case_insensitive_by_default(self):
        assert len(scan_text("todo", [TODO_RULE])) == 1

    def test_explicit_flags(self):
        strict = PatternRule("demo.strict", "Strict", r"TODO", Severity.LOW, "d", "r", flags=0)
        assert scan_text("todo", [strict]) == []
        assert strict.regex.flags & re.IGNORECASE == 0

    def test_no_match(self):
        assert scan_text("clean code", [TODO_RULE, FIXME_RULE]) == []


class TestPatternScanner:
    """Parallel scanning keeps input order."""

    def test_scan_all_keeps_unit_order(self, unit):
        units = [unit(f"src/f{i}.js", f"// TODO {i}\n") for i in range(12)]
        matches = PatternScanner([TODO_RULE], max_workers=4).scan_all(units)
        assert [m.file for m in matches] == [u.path for u in units]

    def test_should_stop_stops_submitting(self, unit):
        units = [unit(f"src/f{i}.js", "// TODO\n") for i in range(5)]
        matches = PatternScanner([TODO_RULE]).scan_all(units, should_stop=lambda: True)
        assert matches == []

    def test_single_unit(self, unit):
        matches = PatternScanner([TODO_RULE]).scan_all([unit("a.js", "TODO TODO")])
        assert len(matches) == 2
