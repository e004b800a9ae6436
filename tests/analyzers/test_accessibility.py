"""Tests for the WCAG compliance scanner."""

from auditscope.analyzers.accessibility import (
    AccessibilityAnalyzer,
    check_clickable_divs,
    check_heading_order,
    check_landmarks,
    check_page_title,
    compliance_level,
    filter_by_level,
    keyboard_stats,
)
from auditscope.config import AccessibilityConfig
from auditscope.models import PhaseStatus, Severity, WcagViolation

GOOD_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head><title>Account settings</title></head>
<body>
  <main>
    <h1>Settings</h1>
    <h2>Profile</h2>
    <img src="avatar.png" alt="Your avatar">
    <label for="name">Name</label>
    <input id="name" type="text">
    <button>Save</button>
  </main>
</body>
</html>
"""


def _rule_ids(report):
    return [v.rule_id for v in report.violations]


class TestPatternRules:
    """Single-element WCAG rules."""

    def test_clean_page_passes(self, unit, make_context):
        report = AccessibilityAnalyzer().analyze(make_context(unit("index.html", GOOD_PAGE)))
        assert report.violations == ()
        assert report.status == PhaseStatus.PASSED
        assert report.score == 100.0
        assert report.summary["compliance_level"] == "AA"

    def test_missing_alt(self, unit, make_context):
        report = AccessibilityAnalyzer().analyze(make_context(unit("logo.html", '<img src="logo.png">')))
        assert _rule_ids(report) == ["a11y.img-alt"]
        violation = report.violations[0]
        assert isinstance(violation, WcagViolation)
        assert violation.wcag_criterion == "1.1.1"
        assert violation.severity == Severity.HIGH
        assert report.score == 90.0
        assert report.status == PhaseStatus.WARNING

    def test_missing_lang(self, unit, make_context):
        page = (
            '<html><head><title>Quarterly report</title></head>'
            '<body><main><img src="x.png" alt="Chart"></main></body></html>'
        )
        report = AccessibilityAnalyzer().analyze(make_context(unit("index.html", page)))
        assert _rule_ids(report) == ["a11y.html-lang"]

    def test_empty_button_in_component(self, unit, make_context):
        report = AccessibilityAnalyzer().analyze(make_context(unit("src/Close.tsx", "<button></button>")))
        assert _rule_ids(report) == ["a11y.button-text"]

    def test_python_files_are_skipped(self, unit, make_context):
        report = AccessibilityAnalyzer().analyze(make_context(unit("app/views.py", 'HTML = "<img src=x>"')))
        assert report.violations == ()
        assert report.summary["files_scanned"] == 0

    def test_many_high_findings_fail(self, unit, make_context):
        page = '<img src="a.png">\n<img src="b.png">\n<img src="c.png">\n'
        report = AccessibilityAnalyzer().analyze(make_context(unit("gallery.html", page)))
        assert report.score == 70.0
        assert report.status == PhaseStatus.FAILED
        assert [v.line for v in report.violations] == [1, 2, 3]


class TestContextualChecks:
    """Document-level checks only for markup files."""

    def test_heading_order(self, unit):
        violations = check_heading_order(unit("page.html", "<h1>A</h1>\n<h3>B</h3>\n<h2>C</h2>"))
        assert [(v.rule_id, v.line) for v in violations] == [("a11y.heading-order", 2)]

    def test_document_starting_below_h1(self, unit):
        (violation,) = check_heading_order(unit("page.html", "<h2>Intro</h2>"))
        assert "h2" in violation.description

    def test_landmark_needs_full_document(self, unit):
        assert check_landmarks(unit("part.html", "<div>fragment</div>")) == []
        assert len(check_landmarks(unit("page.html", "<html><body><div></div></body></html>"))) == 1
        assert check_landmarks(unit("page.html", '<body><div role="main"></div></body>')) == []

    def test_document_without_title(self, unit, make_context):
        page = '<!DOCTYPE html><html lang="en"><head></head><body><main><h1>Shop</h1></main></body></html>'
        report = AccessibilityAnalyzer().analyze(make_context(unit("index.html", page)))
        assert _rule_ids(report) == ["a11y.page-title"]
        violation = report.violations[0]
        assert violation.severity == Severity.HIGH
        assert (violation.wcag_level, violation.wcag_criterion) == ("A", "2.4.2")

    def test_title_needs_full_document(self, unit):
        assert check_page_title(unit("part.html", "<div>fragment</div>")) == []
        assert check_page_title(unit("index.html", GOOD_PAGE)) == []

    def test_clickable_div(self, unit):
        source = unit("src/Card.jsx", '<div onClick={open}>x</div>\n<div onClick={open} role="button">y</div>')
        assert [v.line for v in check_clickable_divs(source)] == [1]

    def test_contextual_checks_skip_scripts(self, unit, make_context):
        script = unit("src/render.js", "const html = '<h1>A</h1><h4>B</h4>';")
        report = AccessibilityAnalyzer().analyze(make_context(script))
        assert "a11y.heading-order" not in _rule_ids(report)

    def test_markup_extensions_are_configurable(self, unit, make_context):
        script = unit("src/render.js", "const html = '<h1>A</h1><h4>B</h4>';")
        analyzer = AccessibilityAnalyzer(AccessibilityConfig(markup_extensions=(".js",)))
        report = analyzer.analyze(make_context(script))
        assert "a11y.heading-order" in _rule_ids(report)


class TestConformanceLevel:
    """Target level filtering and compliance."""

    def test_aa_rules_filtered_at_level_a(self, unit, make_context):
        css = unit("styles/app.css", "a:focus { outline: none; }")
        level_aa = AccessibilityAnalyzer().analyze(make_context(css))
        level_a = AccessibilityAnalyzer(AccessibilityConfig(wcag_level="A")).analyze(make_context(css))

        assert _rule_ids(level_aa) == ["a11y.focus-visible"]
        assert level_a.violations == ()
        assert level_a.summary["filtered_out"] == 1

    def test_filter_by_level_keeps_lower_levels(self):
        a = WcagViolation("a11y.x", Severity.LOW, "f", 1, 1, "d", "r", wcag_level="A")
        aa = WcagViolation("a11y.y", Severity.LOW, "f", 1, 1, "d", "r", wcag_level="AA")
        assert filter_by_level([a, aa], "A") == [a]
        assert filter_by_level([a, aa], "AAA") == [a, aa]

    def test_high_finding_is_non_compliant(self):
        high = WcagViolation("a11y.x", Severity.HIGH, "f", 1, 1, "d", "r")
        assert compliance_level([high]) == "NON_COMPLIANT"
        assert compliance_level([]) == "AA"


class TestNavigationStats:
    """Keyboard and screen-reader statistics."""

    def test_tab_order_sorted(self, unit):
        page = unit("nav.html", '<button tabindex="2">b</button><a href="/" tabindex="1">a</a>')
        stats = keyboard_stats([page])
        assert stats["focusable_elements"] == 2
        assert [item["tab_index"] for item in stats["tab_order"]] == [1, 2]

    def test_summary_includes_stats(self, unit, make_context):
        report = AccessibilityAnalyzer().analyze(make_context(unit("index.html", GOOD_PAGE)))
        assert report.summary["keyboard"]["focusable_elements"] == 2
        assert report.summary["screen_reader"]["semantic_elements"] == 3
