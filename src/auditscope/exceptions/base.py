"""Base exception for auditscope."""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..models import Severity
from .taxonomy import ErrorCategory, ErrorCode


class AuditscopeError(Exception):
    """Base exception for all auditscope errors.

    Every error carries a category, a severity and a remediation hint so
    the orchestrator can record it as an ExecutionError without knowing
    the concrete type.
    """

    category: ErrorCategory = ErrorCategory.INTERNAL
    code: ErrorCode = ErrorCode.AU400
    severity: Severity = Severity.HIGH
    remediation: str = "Re-run with --verbose and inspect the log output"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, str]] = None,
        *,
        severity: Optional[Severity] = None,
        remediation: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if severity is not None:
            self.severity = severity
        if remediation is not None:
            self.remediation = remediation

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_json(self) -> dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "context": self.details,
            "remediation": self.remediation,
        }
