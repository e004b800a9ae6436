"""Audit phase analyzers."""

from ..config import AuditConfig
from ..models import Phase
from .accessibility import AccessibilityAnalyzer
from .base import Analyzer, AuditContext, merge_recommendations, recommendations_from
from .complexity import ComplexityAnalyzer, ComplexityReport
from .coverage import CoverageAnalyzer
from .patterns import PatternMatch, PatternRule, PatternScanner, scan_text
from .performance import PerformanceAnalyzer
from .security import SecurityAnalyzer, redact


def get_default_analyzers(config: AuditConfig) -> list[Analyzer]:
    """One analyzer per enabled phase, in phase order."""
    factories = {
        Phase.COMPLEXITY: lambda: ComplexityAnalyzer(config.complexity),
        Phase.SECURITY: lambda: SecurityAnalyzer(config.security),
        Phase.COVERAGE: lambda: CoverageAnalyzer(config.coverage),
        Phase.PERFORMANCE: lambda: PerformanceAnalyzer(config.performance),
        Phase.ACCESSIBILITY: lambda: AccessibilityAnalyzer(config.accessibility),
    }
    return [factories[phase]() for phase in config.phases.enabled()]


__all__ = [
    "Analyzer",
    "AuditContext",
    "AccessibilityAnalyzer",
    "ComplexityAnalyzer",
    "ComplexityReport",
    "CoverageAnalyzer",
    "PerformanceAnalyzer",
    "SecurityAnalyzer",
    "PatternMatch",
    "PatternRule",
    "PatternScanner",
    "get_default_analyzers",
    "merge_recommendations",
    "recommendations_from",
    "redact",
    "scan_text",
]
