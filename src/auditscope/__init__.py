"""
auditscope - Static Source-Code Audit Engine

Walks a codebase once and reports structural complexity, exposed
secrets, test coverage, bundle and load-time performance, and
accessibility compliance as one scored, prioritized report.
"""

__version__ = "0.1.0"

from .api import run_audit
from .config import AuditConfig, load_config
from .models import ComprehensiveReport, PhaseReport, ReadinessTier, Severity, Violation

__all__ = [
    "run_audit",  # Main entry point
    "AuditConfig",
    "load_config",
    "ComprehensiveReport",
    "PhaseReport",
    "ReadinessTier",
    "Severity",
    "Violation",
]
