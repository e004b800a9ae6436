"""Orchestration exceptions: timeouts, cancellation, enumeration."""

from pathlib import Path
from typing import Sequence

from ..models import Severity
from .base import AuditscopeError
from .taxonomy import ErrorCategory, ErrorCode


class PhaseTimeoutError(AuditscopeError):
    """Raised when a phase exceeds its time limit."""

    category = ErrorCategory.TIMEOUT
    code = ErrorCode.AU401
    remediation = "Raise phase_timeout or narrow the audited paths"

    def __init__(self, phase: str, seconds: float):
        super().__init__(
            f"Phase '{phase}' timed out after {seconds:g}s",
            details={"phase": phase, "timeout": f"{seconds:g}"},
        )
        self.phase = phase
        self.seconds = seconds


class AuditCancelledError(AuditscopeError):
    """Raised inside a phase when the run has been cancelled."""

    category = ErrorCategory.CANCELLED
    code = ErrorCode.AU402
    severity = Severity.LOW
    remediation = "Re-run the audit to completion"

    def __init__(self, phase: str = ""):
        details = {"phase": phase} if phase else None
        super().__init__("Audit cancelled", details=details)
        self.phase = phase


class SourceEnumerationError(AuditscopeError):
    """Raised when the audited roots cannot be listed. Fatal for the run."""

    category = ErrorCategory.CONFIGURATION
    code = ErrorCode.AU403
    severity = Severity.CRITICAL
    remediation = "Check that the audit root exists and is readable"

    def __init__(self, roots: Sequence[Path], reason: str):
        super().__init__(
            f"Cannot enumerate sources: {reason}",
            details={"roots": ", ".join(str(r) for r in roots), "reason": reason},
        )
        self.roots = list(roots)
        self.reason = reason
