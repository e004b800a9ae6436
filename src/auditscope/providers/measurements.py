"""Runtime measurement provider: load-time metrics and resource-cost catalogs.

The engine never measures a live page itself; it reads reports produced
by external tools (a Lighthouse JSON report, a gas/cost report) or takes
values injected by the caller.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..config import PerformanceConfig
from ..exceptions import MeasurementUnavailable
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoadMetrics:
    """Page load timings in milliseconds; layout shift is unitless."""

    initial_load_ms: float
    time_to_interactive_ms: float
    first_contentful_paint_ms: float = 0.0
    largest_contentful_paint_ms: float = 0.0
    cumulative_layout_shift: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "initial_load_ms": round(self.initial_load_ms, 1),
            "time_to_interactive_ms": round(self.time_to_interactive_ms, 1),
            "first_contentful_paint_ms": round(self.first_contentful_paint_ms, 1),
            "largest_contentful_paint_ms": round(self.largest_contentful_paint_ms, 1),
            "cumulative_layout_shift": round(self.cumulative_layout_shift, 3),
        }


@dataclass(frozen=True)
class OperationCost:
    name: str
    cost: int


class MeasurementProvider(ABC):
    @abstractmethod
    def load_metrics(self) -> LoadMetrics:
        """Raises MeasurementUnavailable when no load measurement exists."""

    @abstractmethod
    def operation_costs(self) -> list[OperationCost]:
        """Raises MeasurementUnavailable when no cost catalog exists."""


class StaticMeasurementProvider(MeasurementProvider):
    """Serves values handed in by the caller."""

    def __init__(self, metrics: Optional[LoadMetrics] = None, costs: Optional[list[OperationCost]] = None):
        self._metrics = metrics
        self._costs = costs

    def load_metrics(self) -> LoadMetrics:
        if self._metrics is None:
            raise MeasurementUnavailable("load-time", "no measurement supplied")
        return self._metrics

    def operation_costs(self) -> list[OperationCost]:
        if self._costs is None:
            raise MeasurementUnavailable("resource-cost", "no cost catalog supplied")
        return list(self._costs)


class ReportFileMeasurementProvider(MeasurementProvider):
    """Reads a Lighthouse JSON report and a JSON cost catalog under root."""

    def __init__(self, root: Path, config: Optional[PerformanceConfig] = None):
        self.root = Path(root)
        self.config = config or PerformanceConfig()

    def _read_json(self, relative: str, capability: str) -> Any:
        path = self.root / relative
        if not path.is_file():
            raise MeasurementUnavailable(capability, f"{relative} not found")
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise MeasurementUnavailable(capability, f"cannot read {relative}: {e}") from e

    def load_metrics(self) -> LoadMetrics:
        report = self._read_json(self.config.lighthouse_report, "load-time")
        return parse_lighthouse(report)

    def operation_costs(self) -> list[OperationCost]:
        report = self._read_json(self.config.cost_report, "resource-cost")
        return parse_cost_report(report)


def _audit_value(audits: dict[str, Any], key: str) -> Optional[float]:
    value = (audits.get(key) or {}).get("numericValue")
    return float(value) if isinstance(value, (int, float)) else None


def parse_lighthouse(report: dict[str, Any]) -> LoadMetrics:
    """Extract load timings from a Lighthouse JSON report.

    Initial load prefers the observed load event, then the speed index.

    Raises:
        MeasurementUnavailable: If the report has no usable audits
    """
    audits = report.get("audits")
    if not isinstance(audits, dict):
        raise MeasurementUnavailable("load-time", "report has no audits")

    initial = None
    metrics_items = ((audits.get("metrics") or {}).get("details") or {}).get("items") or []
    if metrics_items and isinstance(metrics_items[0], dict):
        observed = metrics_items[0].get("observedLoad")
        if isinstance(observed, (int, float)):
            initial = float(observed)
    if initial is None:
        initial = _audit_value(audits, "speed-index")

    tti = _audit_value(audits, "interactive")
    if initial is None or tti is None:
        raise MeasurementUnavailable("load-time", "report lacks load or interactive timings")

    return LoadMetrics(
        initial_load_ms=initial,
        time_to_interactive_ms=tti,
        first_contentful_paint_ms=_audit_value(audits, "first-contentful-paint") or 0.0,
        largest_contentful_paint_ms=_audit_value(audits, "largest-contentful-paint") or 0.0,
        cumulative_layout_shift=_audit_value(audits, "cumulative-layout-shift") or 0.0,
    )


def parse_cost_report(report: Any) -> list[OperationCost]:
    """Accepts {"operations": [{"name", "cost"}...]} or a flat {name: cost} map."""
    if isinstance(report, dict) and isinstance(report.get("operations"), list):
        entries = [(op.get("name"), op.get("cost", op.get("gas"))) for op in report["operations"] if isinstance(op, dict)]
    elif isinstance(report, dict):
        entries = list(report.items())
    else:
        raise MeasurementUnavailable("resource-cost", "unrecognized cost report layout")

    costs = []
    for name, cost in entries:
        if name and isinstance(cost, (int, float)):
            costs.append(OperationCost(str(name), int(cost)))
    if not costs:
        raise MeasurementUnavailable("resource-cost", "cost report is empty")
    return costs
