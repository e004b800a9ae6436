"""Error tracking for captured phase failures.

The orchestrator does not talk to any monitoring backend. It hands every
ExecutionError to an injected ErrorTracker, started before the first
phase and flushed after aggregation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..logging_config import get_logger
from ..models import ExecutionError

logger = get_logger(__name__)


class ErrorTracker(ABC):
    """Start/capture/flush lifecycle; usable as a context manager."""

    @abstractmethod
    def start(self) -> None: ...

    @abstractmethod
    def capture(self, error: ExecutionError) -> None: ...

    @abstractmethod
    def flush(self) -> None: ...

    def __enter__(self) -> "ErrorTracker":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.flush()


class LoggingErrorTracker(ErrorTracker):
    """Writes captured errors to the log; flush logs a one-line summary."""

    def __init__(self) -> None:
        self.captured: list[ExecutionError] = []
        self.active = False

    def start(self) -> None:
        self.captured = []
        self.active = True

    def capture(self, error: ExecutionError) -> None:
        if not self.active:
            raise RuntimeError("ErrorTracker.capture() called before start()")
        self.captured.append(error)
        logger.warning(f"[{error.phase.value}] {error.category}: {error.message}")

    def flush(self) -> None:
        if self.captured:
            logger.info(f"{len(self.captured)} phase error(s) captured")
        self.active = False
