"""Base formatter interface for auditscope output rendering."""

from abc import ABC, abstractmethod

from ..models import ComprehensiveReport


class BaseFormatter(ABC):
    """Abstract base class for report formatters."""

    @abstractmethod
    def render(self, report: ComprehensiveReport) -> None:
        """Render the report to stdout/stderr as appropriate."""

    @abstractmethod
    def format(self, report: ComprehensiveReport) -> str:
        """Return formatted string representation of the report."""
