"""WCAG compliance scanner: pattern rules plus contextual document checks.

Pattern rules run over every non-Python unit. The contextual checks
(heading order, low contrast, main landmark) only run over files whose
extension is in AccessibilityConfig.markup_extensions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from ..config import AccessibilityConfig
from ..logging_config import get_logger
from ..models import Phase, PhaseReport, PhaseStatus, Severity, SourceUnit, Violation, WcagViolation, penalized_score
from .base import Analyzer, AuditContext, recommendations_from
from .patterns import PatternMatch, PatternRule, PatternScanner, line_col

logger = get_logger(__name__)

LEVEL_RANK = {"A": 1, "AA": 2, "AAA": 3}

# Phase fails below this score
_PASSING_SCORE = 80.0


@dataclass(frozen=True)
class WcagRule:
    rule: PatternRule
    level: str
    criterion: str


def _wcag(rule_id, pattern, severity, level, criterion, description, recommendation) -> WcagRule:
    return WcagRule(
        PatternRule(f"a11y.{rule_id}", rule_id, pattern, severity, description, recommendation),
        level,
        criterion,
    )


WCAG_RULES = (
    _wcag(
        "img-alt", r"<img(?![^>]*\balt\s*=)[^>]*>", Severity.HIGH, "A", "1.1.1",
        "Images must have alternative text", "Add alt attribute to all images",
    ),
    _wcag(
        "decorative-img",
        r"<img(?=[^>]*(?:role\s*=\s*[\"']presentation[\"']|aria-hidden\s*=\s*[\"']true[\"']))"
        r"[^>]*\balt\s*=\s*[\"'][^\"']+[\"'][^>]*>",
        Severity.MEDIUM, "A", "1.1.1",
        "Decorative images should have empty alt text", 'Use alt="" for decorative images',
    ),
    _wcag(
        "form-label",
        r"<input(?![^>]*(?:aria-label|aria-labelledby|\bid\s*=|type\s*=\s*[\"'](?:hidden|submit|button)[\"']))[^>]*>",
        Severity.HIGH, "A", "1.3.1",
        "Form inputs must have associated labels",
        "Associate labels with form controls using for/id or aria-label",
    ),
    _wcag(
        "button-text", r"<button(?![^>]*aria-label)(?![^>]*title)[^>]*>\s*</button>", Severity.HIGH, "A", "2.4.4",
        "Buttons must have accessible text", "Provide text content or aria-label for buttons",
    ),
    _wcag(
        "page-title", r"<title>\s*</title>|<title>[^<]{1,10}</title>", Severity.HIGH, "A", "2.4.2",
        "Pages must have descriptive titles", "Provide descriptive page titles",
    ),
    _wcag(
        "color-only", r"style\s*=\s*[\"'][^\"']*color\s*:\s*red[^\"']*[\"']", Severity.MEDIUM, "A", "1.4.1",
        "Information should not be conveyed by color alone", "Use additional visual indicators beyond color",
    ),
    _wcag(
        "tabindex-positive", r"tabindex\s*=\s*[\"'{]?[1-9]\d*", Severity.MEDIUM, "A", "2.4.3",
        "Avoid positive tabindex values", 'Use tabindex="0" or rely on natural tab order',
    ),
    _wcag(
        "focus-visible", r"outline\s*:\s*(?:none|0)\b", Severity.HIGH, "AA", "2.4.7",
        "Interactive elements must have visible focus indicators",
        "Ensure focus indicators are visible for keyboard users",
    ),
    _wcag(
        "aria-hidden-focusable",
        r"aria-hidden\s*=\s*[\"']true[\"'][^>]*(?:tabindex\s*=\s*[\"']0[\"']|href)",
        Severity.HIGH, "A", "4.1.2",
        "Elements with aria-hidden should not be focusable", "Remove tabindex or href from aria-hidden elements",
    ),
    _wcag(
        "aria-label-empty", r"aria-label\s*=\s*[\"']\s*[\"']", Severity.MEDIUM, "A", "4.1.2",
        "aria-label should not be empty", "Provide meaningful aria-label text",
    ),
    _wcag(
        "click-events-keyboard", r"<[a-z][\w.-]*(?=[^>]*\bonClick)(?![^>]*\bonKey(?:Down|Up|Press))[^>]*>",
        Severity.HIGH, "A", "2.1.1",
        "Click events should have keyboard equivalents", "Add keyboard event handlers for click events",
    ),
    _wcag(
        "video-captions", r"<video\b(?!(?:(?!</video>)[\s\S])*kind\s*=\s*[\"']captions[\"'])",
        Severity.HIGH, "A", "1.2.2",
        "Videos should have captions", "Provide captions for video content",
    ),
    _wcag(
        "html-lang", r"<html(?![^>]*\blang\s*=)[^>]*>", Severity.HIGH, "A", "3.1.1",
        "HTML elements should have lang attribute", "Add lang attribute to html element",
    ),
)

_RULE_INFO = {w.rule.rule_id: w for w in WCAG_RULES}

_HEADING = re.compile(r"<h([1-6])\b", re.IGNORECASE)
_LOW_CONTRAST = (
    re.compile(r"color\s*:\s*#[a-f0-9]{6}.*background-color\s*:\s*#[a-f0-9]{6}", re.IGNORECASE),
    re.compile(r"background\s*:\s*white.*color\s*:\s*#[cdef][a-f0-9]{5}", re.IGNORECASE),
)
_MAIN_LANDMARK = re.compile(r"<main\b|role\s*=\s*[\"']main[\"']", re.IGNORECASE)
_FULL_DOCUMENT = re.compile(r"<html\b|<body\b", re.IGNORECASE)
_TITLE = re.compile(r"<title\b", re.IGNORECASE)

_FOCUSABLE = (
    re.compile(r"<a\b[^>]*href[^>]*>", re.IGNORECASE),
    re.compile(r"<button\b[^>]*>", re.IGNORECASE),
    re.compile(r"<input\b(?![^>]*type\s*=\s*[\"']hidden[\"'])[^>]*>", re.IGNORECASE),
    re.compile(r"<select\b[^>]*>", re.IGNORECASE),
    re.compile(r"<textarea\b[^>]*>", re.IGNORECASE),
)
_KEY_HANDLER = re.compile(r"onKey(?:Down|Up|Press)", re.IGNORECASE)
_TABINDEX = re.compile(r"tabindex\s*=\s*[\"'{]?(-?\d+)", re.IGNORECASE)
_SEMANTIC = re.compile(r"<(?:header|nav|main|section|article|aside|footer|h[1-6])\b", re.IGNORECASE)
_CLICKABLE_DIV = re.compile(r"<div\b[^>]*\bonClick[^>]*>", re.IGNORECASE)


def _violation(
    rule_id: str,
    severity: Severity,
    unit: SourceUnit,
    offset: int,
    description: str,
    recommendation: str,
    level: str,
    criterion: str,
    excerpt: Optional[str] = None,
) -> WcagViolation:
    line, column = line_col(unit.text, offset)
    return WcagViolation(
        rule_id=rule_id,
        severity=severity,
        file=unit.path,
        line=line,
        column=column,
        description=description,
        recommendation=recommendation,
        excerpt=excerpt[:100] if excerpt else None,
        wcag_level=level,
        wcag_criterion=criterion,
    )


def to_wcag_violation(match: PatternMatch) -> WcagViolation:
    info = _RULE_INFO[match.rule.rule_id]
    return WcagViolation(
        rule_id=match.rule.rule_id,
        severity=match.rule.severity,
        file=match.file,
        line=match.line,
        column=match.column,
        description=match.rule.description,
        recommendation=match.rule.recommendation,
        excerpt=match.text[:100],
        wcag_level=info.level,
        wcag_criterion=info.criterion,
    )


def check_heading_order(unit: SourceUnit) -> list[WcagViolation]:
    """Flag any heading more than one level deeper than the previous one."""
    violations = []
    previous = 0
    for m in _HEADING.finditer(unit.text):
        level = int(m.group(1))
        if level > previous + 1:
            violations.append(
                _violation(
                    "a11y.heading-order", Severity.MEDIUM, unit, m.start(),
                    f"Heading level skipped: h{previous} to h{level}" if previous else f"Document starts at h{level}",
                    "Use headings in logical order (h1, h2, h3, etc.)",
                    "A", "1.3.1", m.group(0),
                )
            )
        previous = level
    return violations


def check_contrast(unit: SourceUnit) -> list[WcagViolation]:
    violations = []
    for pattern in _LOW_CONTRAST:
        for m in pattern.finditer(unit.text):
            violations.append(
                _violation(
                    "a11y.color-contrast", Severity.MEDIUM, unit, m.start(),
                    "Foreground/background colors may not meet the 4.5:1 contrast ratio",
                    "Verify color contrast meets WCAG AA (4.5:1 for normal text)",
                    "AA", "1.4.3", m.group(0),
                )
            )
    return violations


def check_landmarks(unit: SourceUnit) -> list[WcagViolation]:
    """Full documents (<html>/<body>) need a main landmark."""
    if not _FULL_DOCUMENT.search(unit.text) or _MAIN_LANDMARK.search(unit.text):
        return []
    return [
        _violation(
            "a11y.landmark-main", Severity.MEDIUM, unit, 0,
            "Document has no main content landmark",
            'Wrap the primary content in <main> or add role="main"',
            "A", "1.3.1",
        )
    ]


def check_page_title(unit: SourceUnit) -> list[WcagViolation]:
    """Full documents need a <title>; empty or short titles are a pattern rule."""
    if not _FULL_DOCUMENT.search(unit.text) or _TITLE.search(unit.text):
        return []
    return [
        _violation(
            "a11y.page-title", Severity.HIGH, unit, 0,
            "Document has no <title> element",
            "Provide descriptive page titles",
            "A", "2.4.2",
        )
    ]


def check_clickable_divs(unit: SourceUnit) -> list[WcagViolation]:
    violations = []
    for m in _CLICKABLE_DIV.finditer(unit.text):
        tag = m.group(0)
        if "role=" not in tag and "tabindex=" not in tag.lower() and "tabIndex=" not in tag:
            violations.append(
                _violation(
                    "a11y.clickable-div", Severity.MEDIUM, unit, m.start(),
                    "Clickable div without proper role or tabindex",
                    'Use a button element or add role="button" and tabindex="0"',
                    "A", "4.1.2", tag,
                )
            )
    return violations


def keyboard_stats(units: list[SourceUnit]) -> dict[str, Any]:
    focusable = 0
    keyboard_accessible = 0
    tab_order: list[dict[str, Any]] = []
    for unit in units:
        for pattern in _FOCUSABLE:
            for m in pattern.finditer(unit.text):
                tag = m.group(0)
                focusable += 1
                if _KEY_HANDLER.search(tag) or "href" in tag.lower() or "onClick" not in tag:
                    keyboard_accessible += 1
                tabindex = _TABINDEX.search(tag)
                if tabindex:
                    tab_order.append({"file": unit.path, "element": tag[:60], "tab_index": int(tabindex.group(1))})
    tab_order.sort(key=lambda item: item["tab_index"])
    return {
        "focusable_elements": focusable,
        "keyboard_accessible": keyboard_accessible,
        "keyboard_accessibility_pct": round(keyboard_accessible / max(focusable, 1) * 100, 1),
        "tab_order": tab_order,
    }


def screen_reader_stats(units: list[SourceUnit]) -> dict[str, Any]:
    aria_labels = aria_descriptions = semantic = 0
    for unit in units:
        aria_labels += len(re.findall(r"aria-label\s*=", unit.text, re.IGNORECASE))
        aria_descriptions += len(re.findall(r"aria-describedby\s*=", unit.text, re.IGNORECASE))
        semantic += len(_SEMANTIC.findall(unit.text))
    return {
        "aria_labels": aria_labels,
        "aria_descriptions": aria_descriptions,
        "semantic_elements": semantic,
    }


def filter_by_level(violations: list[Violation], level: str) -> list[Violation]:
    """Keep violations at or below the configured conformance level."""
    limit = LEVEL_RANK[level]
    return [v for v in violations if LEVEL_RANK.get(getattr(v, "wcag_level", "A"), 1) <= limit]


def compliance_level(violations: list[Violation]) -> str:
    """AA, A or NON_COMPLIANT for an already level-filtered violation set."""
    if any(v.severity >= Severity.HIGH for v in violations):
        return "NON_COMPLIANT"
    levels = {getattr(v, "wcag_level", "A") for v in violations}
    if "AA" not in levels:
        return "AA"
    if "A" not in levels:
        return "A"
    return "NON_COMPLIANT"


class AccessibilityAnalyzer(Analyzer):
    """WCAG pattern rules, contextual checks and navigation statistics."""

    phase = Phase.ACCESSIBILITY

    def __init__(self, config: Optional[AccessibilityConfig] = None, scanner: Optional[PatternScanner] = None):
        self.config = config or AccessibilityConfig()
        self.scanner = scanner or PatternScanner([w.rule for w in WCAG_RULES])

    def is_markup(self, unit: SourceUnit) -> bool:
        return unit.extension in self.config.markup_extensions

    def check_units(self, units: list[SourceUnit], context: Optional[AuditContext] = None) -> list[Violation]:
        scannable = [u for u in units if u.language != "python"]
        should_stop = (lambda: context.cancelled) if context is not None else None
        violations: list[Violation] = [to_wcag_violation(m) for m in self.scanner.scan_all(scannable, should_stop)]
        for unit in scannable:
            if self.is_markup(unit):
                violations.extend(check_heading_order(unit))
                violations.extend(check_contrast(unit))
                violations.extend(check_landmarks(unit))
                violations.extend(check_page_title(unit))
                violations.extend(check_clickable_divs(unit))
        return violations

    def analyze(self, context: AuditContext) -> PhaseReport:
        units = context.sources.units
        found = self.check_units(units, context)
        context.check_cancelled(self.phase)

        violations = filter_by_level(found, self.config.wcag_level)
        level = compliance_level(violations)
        score = penalized_score(violations)

        if score < _PASSING_SCORE:
            status = PhaseStatus.FAILED
        elif violations:
            status = PhaseStatus.WARNING
        else:
            status = PhaseStatus.PASSED

        markup = [u for u in units if self.is_markup(u)]
        summary = {
            "files_scanned": len([u for u in units if u.language != "python"]),
            "markup_files": len(markup),
            "total_violations": len(violations),
            "filtered_out": len(found) - len(violations),
            "target_level": self.config.wcag_level,
            "compliance_level": level,
            "keyboard": keyboard_stats(markup),
            "screen_reader": screen_reader_stats(markup),
        }
        logger.info(f"Accessibility: {len(violations)} violations, compliance {level}, score {score:.1f}")
        return PhaseReport(
            phase=self.phase,
            score=score,
            status=status,
            violations=tuple(violations),
            summary=summary,
            recommendations=recommendations_from(violations, self.phase),
        )
