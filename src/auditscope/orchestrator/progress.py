"""Per-phase progress records pushed to the caller during a run."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from ..models import Phase, PhaseReport


class PhaseState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class PhaseProgress:
    """Snapshot of one phase's lifecycle.

    Idle phases are PENDING; a phase moves to RUNNING and then to exactly
    one of COMPLETED or FAILED. Phases never started because the run was
    cancelled end as SKIPPED.
    """

    phase: Phase
    state: PhaseState = PhaseState.PENDING
    message: str = ""
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def done(self) -> bool:
        return self.state in (PhaseState.COMPLETED, PhaseState.FAILED, PhaseState.SKIPPED)

    @property
    def percent(self) -> int:
        return 100 if self.done else 0

    def running(self) -> "PhaseProgress":
        return replace(
            self,
            state=PhaseState.RUNNING,
            message=f"Running {self.phase.value} audit",
            started_at=datetime.now(),
        )

    def completed(self) -> "PhaseProgress":
        return replace(
            self,
            state=PhaseState.COMPLETED,
            message=f"{self.phase.value} audit completed",
            finished_at=datetime.now(),
        )

    def failed(self, reason: str) -> "PhaseProgress":
        return replace(
            self,
            state=PhaseState.FAILED,
            message=f"{self.phase.value} audit failed: {reason}",
            finished_at=datetime.now(),
        )

    def skipped(self) -> "PhaseProgress":
        return replace(
            self,
            state=PhaseState.SKIPPED,
            message=f"{self.phase.value} audit skipped: run cancelled",
            finished_at=datetime.now(),
        )


ProgressCallback = Optional[Callable[[PhaseProgress], None]]
PhaseCompleteCallback = Optional[Callable[[PhaseReport], None]]
