"""Public API for auditscope.

Example:
    >>> from auditscope import run_audit, load_config
    >>>
    >>> report = run_audit(load_config(roots=("./webapp",)))
    >>> report.readiness.value
    'NEEDS_WORK'
    >>>
    >>> # Streaming progress
    >>> report = run_audit(
    ...     config,
    ...     on_progress=lambda p: print(p.phase.value, p.state.value),
    ...     on_phase_complete=lambda r: print(r.phase.value, r.score),
    ... )
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

from .analyzers import AuditContext, get_default_analyzers
from .config import AuditConfig
from .logging_config import get_logger
from .models import ComprehensiveReport
from .orchestrator import AuditOrchestrator, ErrorTracker, PhaseCompleteCallback, ProgressCallback
from .providers import BuildArtifactProvider, MeasurementProvider
from .scanning import SyntaxTreeProvider, collect_sources
from .scoring import build_report

logger = get_logger(__name__)


def run_audit(
    config: Optional[AuditConfig] = None,
    *,
    on_progress: ProgressCallback = None,
    on_phase_complete: PhaseCompleteCallback = None,
    cancel_event: Optional[threading.Event] = None,
    artifacts: Optional[BuildArtifactProvider] = None,
    measurements: Optional[MeasurementProvider] = None,
    syntax: Optional[SyntaxTreeProvider] = None,
    tracker: Optional[ErrorTracker] = None,
    stop_on_error: bool = False,
) -> ComprehensiveReport:
    """Audit a codebase and return one ComprehensiveReport.

    Pipeline:
    1. Enumerate and read source files under config.roots
    2. Run each enabled phase through the orchestrator
    3. Score the reports that were produced

    Every phase failure is captured in the report's error list. A run
    cancelled through cancel_event returns the reports finished so far.

    Args:
        config: Run configuration (default: AuditConfig())
        on_progress: Receives a PhaseProgress on every phase state change
        on_phase_complete: Receives each PhaseReport as soon as it exists
        cancel_event: Set it to abort the remaining phases
        artifacts: Build-artifact provider (default: read from the project root)
        measurements: Load-time and cost provider (default: report files)
        syntax: Syntax-tree provider for the complexity phase
        tracker: Error tracker receiving captured phase failures
        stop_on_error: Skip remaining phases after the first failure

    Raises:
        SourceEnumerationError: If no root exists or no source file is found
    """
    config = config or AuditConfig()
    roots = [Path(r) for r in config.roots]
    logger.info(f"Starting audit of {', '.join(str(r) for r in roots)}")

    sources = collect_sources(
        roots,
        config.extensions,
        config.exclude_patterns,
        config.max_file_size_bytes,
    )

    context = AuditContext(
        config=config,
        sources=sources,
        cancel_event=cancel_event or threading.Event(),
        syntax=syntax or SyntaxTreeProvider(require_manifest=config.require_manifest, max_workers=config.workers),
        artifacts=artifacts,
        measurements=measurements,
    )
    orchestrator = AuditOrchestrator(
        get_default_analyzers(config),
        parallel=config.parallel,
        workers=config.workers,
        phase_timeout=config.phase_timeout,
        stop_on_error=stop_on_error,
        tracker=tracker,
        on_progress=on_progress,
        on_phase_complete=on_phase_complete,
    )
    return build_report(orchestrator.run(context), config.scoring)
