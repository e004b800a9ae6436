"""Build-artifact and runtime measurement providers."""

from .artifacts import (
    BuildArtifactProvider,
    BundleStats,
    Chunk,
    FilesystemArtifactProvider,
    StaticArtifactProvider,
)
from .measurements import (
    LoadMetrics,
    MeasurementProvider,
    OperationCost,
    ReportFileMeasurementProvider,
    StaticMeasurementProvider,
)

__all__ = [
    "BuildArtifactProvider",
    "BundleStats",
    "Chunk",
    "FilesystemArtifactProvider",
    "StaticArtifactProvider",
    "LoadMetrics",
    "MeasurementProvider",
    "OperationCost",
    "ReportFileMeasurementProvider",
    "StaticMeasurementProvider",
]
