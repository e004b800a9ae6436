"""AuditOrchestrator: runs the phases and isolates their failures.

Lifecycle per phase: PENDING -> RUNNING -> COMPLETED | FAILED, or SKIPPED
when the run is cancelled before the phase starts. A failing phase is
recorded as an ExecutionError and never stops the others.

All results, errors, progress updates and callbacks go through
_record(), which only ever runs on the calling thread. Worker threads
return outcomes; they never write shared state.
"""

from __future__ import annotations

import concurrent.futures
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..analyzers.base import Analyzer, AuditContext
from ..exceptions import AuditCancelledError, AuditscopeError, PhaseTimeoutError
from ..exceptions.taxonomy import ErrorCategory
from ..logging_config import get_logger
from ..models import ExecutionError, Phase, PhaseReport, Severity
from .progress import PhaseCompleteCallback, PhaseProgress, PhaseState, ProgressCallback
from .tracking import ErrorTracker, LoggingErrorTracker

logger = get_logger(__name__)

# Default timeout for a single phase (5 minutes)
_PHASE_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True)
class _Outcome:
    phase: Phase
    report: Optional[PhaseReport] = None
    error: Optional[ExecutionError] = None
    cancelled: bool = False


@dataclass(frozen=True)
class OrchestrationResult:
    """Everything the phases produced, in phase order."""

    reports: tuple[PhaseReport, ...]
    errors: tuple[ExecutionError, ...]
    progress: tuple[PhaseProgress, ...]
    started_at: datetime
    finished_at: datetime
    cancelled: bool = False

    @property
    def phases_executed(self) -> tuple[Phase, ...]:
        return tuple(r.phase for r in self.reports)

    @property
    def phases_failed(self) -> tuple[Phase, ...]:
        return tuple(e.phase for e in self.errors)


def to_execution_error(phase: Phase, error: Exception) -> ExecutionError:
    """Convert anything a phase raised into an ExecutionError record."""
    if isinstance(error, AuditscopeError):
        return ExecutionError(
            phase=phase,
            category=error.category.value,
            severity=error.severity,
            message=str(error),
            remediation=error.remediation,
        )
    return ExecutionError(
        phase=phase,
        category=ErrorCategory.INTERNAL.value,
        severity=Severity.HIGH,
        message=f"{type(error).__name__}: {error}",
        remediation="Re-run with --verbose and inspect the log output",
    )


class AuditOrchestrator:
    """Run analyzers sequentially or on a thread pool.

    Args:
        analyzers: One analyzer per phase, in execution order
        parallel: Run phases concurrently; results are identical either way
        workers: Pool size for parallel runs (default: one per phase)
        phase_timeout: Seconds a phase may run before it is recorded as failed
        stop_on_error: Skip remaining phases after the first failure
        tracker: Receives every captured ExecutionError
        on_progress: Called with a PhaseProgress on every state change
        on_phase_complete: Called with each PhaseReport as it is produced
    """

    def __init__(
        self,
        analyzers: Sequence[Analyzer],
        *,
        parallel: bool = True,
        workers: Optional[int] = None,
        phase_timeout: Optional[float] = _PHASE_TIMEOUT_SECONDS,
        stop_on_error: bool = False,
        tracker: Optional[ErrorTracker] = None,
        on_progress: ProgressCallback = None,
        on_phase_complete: PhaseCompleteCallback = None,
    ):
        self.analyzers = list(analyzers)
        self.parallel = parallel
        self.workers = workers
        self.phase_timeout = phase_timeout
        self.stop_on_error = stop_on_error
        self.tracker = tracker or LoggingErrorTracker()
        self.on_progress = on_progress
        self.on_phase_complete = on_phase_complete

        self._progress: dict[Phase, PhaseProgress] = {}
        self._reports: dict[Phase, PhaseReport] = {}
        self._errors: dict[Phase, ExecutionError] = {}
        self._cancel_event: Optional[threading.Event] = None

    def get_progress(self) -> list[PhaseProgress]:
        return list(self._progress.values())

    def overall_percent(self) -> int:
        """Share of phases finished, 0-100."""
        if not self._progress:
            return 0
        done = sum(1 for p in self._progress.values() if p.done)
        return round(done * 100 / len(self._progress))

    def cancel(self) -> None:
        """Abort remaining phases of the active run; finished reports are kept."""
        if self._cancel_event is not None:
            logger.info("Audit cancellation requested")
            self._cancel_event.set()

    def run(self, context: AuditContext) -> OrchestrationResult:
        self._progress = {a.phase: PhaseProgress(a.phase) for a in self.analyzers}
        self._reports = {}
        self._errors = {}
        self._cancel_event = context.cancel_event
        started = datetime.now()

        with self.tracker:
            if self.parallel and len(self.analyzers) > 1:
                self._run_parallel(context)
            else:
                self._run_sequential(context)

        order = {a.phase: i for i, a in enumerate(self.analyzers)}
        return OrchestrationResult(
            reports=tuple(sorted(self._reports.values(), key=lambda r: order[r.phase])),
            errors=tuple(sorted(self._errors.values(), key=lambda e: order[e.phase])),
            progress=tuple(self._progress.values()),
            started_at=started,
            finished_at=datetime.now(),
            cancelled=context.cancelled,
        )

    # ── Scheduling ──────────────────────────────────────────────────

    def _halted(self, context: AuditContext) -> bool:
        return context.cancelled or (self.stop_on_error and bool(self._errors))

    def _run_sequential(self, context: AuditContext) -> None:
        for analyzer in self.analyzers:
            if self._halted(context):
                self._record(_Outcome(analyzer.phase, cancelled=True))
                continue
            self._update(self._progress[analyzer.phase].running())
            self._record(self._execute(analyzer, context))

    def _run_parallel(self, context: AuditContext) -> None:
        workers = self.workers or len(self.analyzers)
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="auditscope-phase"
        ) as pool:
            futures = {}
            for analyzer in self.analyzers:
                self._update(self._progress[analyzer.phase].running())
                futures[pool.submit(self._execute, analyzer, context)] = analyzer.phase

            for future in concurrent.futures.as_completed(futures):
                phase = futures[future]
                if future.cancelled():
                    self._record(_Outcome(phase, cancelled=True))
                    continue
                self._record(future.result())
                if self._halted(context):
                    for pending in futures:
                        pending.cancel()

    # ── Execution (worker side) ─────────────────────────────────────

    def _execute(self, analyzer: Analyzer, context: AuditContext) -> _Outcome:
        """Run one phase and wrap whatever happens; never raises."""
        phase = analyzer.phase
        if context.cancelled:
            return _Outcome(phase, cancelled=True)
        try:
            report = self._invoke(analyzer, context)
        except AuditCancelledError:
            logger.debug(f"Phase {phase.value} stopped by cancellation")
            return _Outcome(phase, cancelled=True)
        except AuditscopeError as e:
            logger.debug(f"Phase {phase.value} failed: {e}", exc_info=True)
            return _Outcome(phase, error=to_execution_error(phase, e))
        except Exception as e:
            logger.debug(f"Phase {phase.value} raised unexpectedly", exc_info=True)
            return _Outcome(phase, error=to_execution_error(phase, e))
        return _Outcome(phase, report=report)

    def _invoke(self, analyzer: Analyzer, context: AuditContext) -> PhaseReport:
        """Run analyze() bounded by phase_timeout.

        A timed-out phase keeps running on its own thread until it next
        checks for cancellation; its result is discarded.
        """
        if not self.phase_timeout:
            return analyzer.analyze(context)
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"auditscope-{analyzer.phase.value}"
        )
        future = executor.submit(analyzer.analyze, context)
        try:
            return future.result(timeout=self.phase_timeout)
        except concurrent.futures.TimeoutError:
            raise PhaseTimeoutError(analyzer.phase.value, self.phase_timeout) from None
        finally:
            executor.shutdown(wait=False)

    # ── Aggregation (calling thread only) ───────────────────────────

    def _record(self, outcome: _Outcome) -> None:
        phase = outcome.phase
        current = self._progress[phase]
        if outcome.report is not None:
            self._reports[phase] = outcome.report
            self._update(current.completed())
            self._notify_complete(outcome.report)
        elif outcome.error is not None:
            self._errors[phase] = outcome.error
            self.tracker.capture(outcome.error)
            self._update(current.failed(outcome.error.message))
        else:
            self._update(current.skipped())

    def _update(self, progress: PhaseProgress) -> None:
        self._progress[progress.phase] = progress
        if self.on_progress is None:
            return
        try:
            self.on_progress(progress)
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")

    def _notify_complete(self, report: PhaseReport) -> None:
        if self.on_phase_complete is None:
            return
        try:
            self.on_phase_complete(report)
        except Exception as e:
            logger.warning(f"Phase-complete callback failed: {e}")


__all__ = [
    "AuditOrchestrator",
    "OrchestrationResult",
    "PhaseState",
    "to_execution_error",
]
