"""Phase orchestration, progress reporting and error tracking."""

from .orchestrator import AuditOrchestrator, OrchestrationResult, to_execution_error
from .progress import PhaseCompleteCallback, PhaseProgress, PhaseState, ProgressCallback
from .tracking import ErrorTracker, LoggingErrorTracker

__all__ = [
    "AuditOrchestrator",
    "OrchestrationResult",
    "to_execution_error",
    "PhaseProgress",
    "PhaseState",
    "ProgressCallback",
    "PhaseCompleteCallback",
    "ErrorTracker",
    "LoggingErrorTracker",
]
