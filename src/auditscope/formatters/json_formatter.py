"""JSON formatter for auditscope."""

import json

from ..models import ComprehensiveReport
from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render the report as JSON."""

    def render(self, report: ComprehensiveReport) -> None:
        print(self.format(report))

    def format(self, report: ComprehensiveReport) -> str:
        return json.dumps(report.to_dict(), indent=2, default=str)
