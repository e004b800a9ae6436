"""Overall score, readiness tier and recommendation ranking."""

from .engine import (
    build_report,
    overall_score,
    overall_status,
    rank_recommendations,
    readiness_tier,
    severity_counts,
)

__all__ = [
    "build_report",
    "overall_score",
    "overall_status",
    "rank_recommendations",
    "readiness_tier",
    "severity_counts",
]
