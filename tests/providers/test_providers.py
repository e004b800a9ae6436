"""Tests for build-artifact and measurement providers."""

import json
import sys

import pytest

from auditscope.config import PerformanceConfig
from auditscope.exceptions import BuildArtifactsUnavailable, MeasurementUnavailable, PhaseTimeoutError
from auditscope.providers import (
    BundleStats,
    Chunk,
    FilesystemArtifactProvider,
    LoadMetrics,
    OperationCost,
    ReportFileMeasurementProvider,
    StaticArtifactProvider,
    StaticMeasurementProvider,
)
from auditscope.providers.artifacts import parse_webpack_stats
from auditscope.providers.measurements import parse_cost_report, parse_lighthouse

WEBPACK_STATS = {
    "chunks": [
        {"names": ["main"], "size": 2048, "modules": [{"name": "./src/a.js"}, {"name": "./node_modules/lodash"}]},
        {"names": [], "size": 512, "modules": [{"identifier": "./node_modules/lodash"}]},
    ]
}

LIGHTHOUSE = {
    "audits": {
        "metrics": {"details": {"items": [{"observedLoad": 2100}]}},
        "speed-index": {"numericValue": 1800.5},
        "interactive": {"numericValue": 3200.25},
        "first-contentful-paint": {"numericValue": 900},
        "largest-contentful-paint": {"numericValue": 1500},
        "cumulative-layout-shift": {"numericValue": 0.05},
    }
}


class TestArtifacts:
    """Bundle stats from stats files and build directories."""

    def test_parse_webpack_stats(self):
        stats = parse_webpack_stats(WEBPACK_STATS, source="webpack-stats.json")
        assert [(c.name, c.size) for c in stats.chunks] == [("main", 2048), ("unnamed", 512)]
        assert stats.total_size == 2560
        assert stats.duplicate_modules() == ["./node_modules/lodash"]

    def test_stats_file_preferred(self, tmp_path):
        (tmp_path / "webpack-stats.json").write_text(json.dumps(WEBPACK_STATS))
        (tmp_path / "dist").mkdir()
        (tmp_path / "dist" / "app.js").write_text("x" * 100)

        stats = FilesystemArtifactProvider(tmp_path).load()
        assert stats.source == "webpack-stats.json"
        assert len(stats.chunks) == 2

    def test_build_directory_fallback(self, tmp_path):
        (tmp_path / "build" / "static").mkdir(parents=True)
        (tmp_path / "build" / "static" / "main.js").write_text("x" * 300)
        (tmp_path / "build" / "vendor.js").write_text("x" * 200)
        (tmp_path / "build" / "index.html").write_text("<html></html>")

        stats = FilesystemArtifactProvider(tmp_path).load()
        assert stats.source == "build"
        assert sorted((c.name, c.size) for c in stats.chunks) == [("main.js", 300), ("vendor.js", 200)]

    def test_nothing_found(self, tmp_path):
        with pytest.raises(BuildArtifactsUnavailable) as exc_info:
            FilesystemArtifactProvider(tmp_path).load()
        assert "dist" in exc_info.value.searched

    def test_unreadable_stats_file_is_skipped(self, tmp_path):
        (tmp_path / "webpack-stats.json").write_text("{not json")
        with pytest.raises(BuildArtifactsUnavailable):
            FilesystemArtifactProvider(tmp_path).load()

    @pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX sleep command")
    def test_build_timeout(self, tmp_path):
        config = PerformanceConfig(build_command="sleep 5", build_timeout=0.2)
        with pytest.raises(PhaseTimeoutError):
            FilesystemArtifactProvider(tmp_path, config).load()

    def test_missing_build_command_falls_through(self, tmp_path):
        config = PerformanceConfig(build_command="auditscope-no-such-build-tool --prod")
        with pytest.raises(BuildArtifactsUnavailable):
            FilesystemArtifactProvider(tmp_path, config).load()

    def test_static_provider(self):
        stats = BundleStats((Chunk("main", 10),))
        assert StaticArtifactProvider(stats).load() is stats
        with pytest.raises(BuildArtifactsUnavailable):
            StaticArtifactProvider().load()


class TestMeasurements:
    """Load metrics and cost catalogs."""

    def test_parse_lighthouse(self):
        metrics = parse_lighthouse(LIGHTHOUSE)
        assert metrics.initial_load_ms == 2100.0
        assert metrics.time_to_interactive_ms == 3200.25
        assert metrics.cumulative_layout_shift == 0.05

    def test_speed_index_fallback(self):
        report = {"audits": {k: v for k, v in LIGHTHOUSE["audits"].items() if k != "metrics"}}
        assert parse_lighthouse(report).initial_load_ms == 1800.5

    def test_lighthouse_without_timings(self):
        with pytest.raises(MeasurementUnavailable):
            parse_lighthouse({"audits": {}})
        with pytest.raises(MeasurementUnavailable):
            parse_lighthouse({})

    def test_cost_report_layouts(self):
        listed = parse_cost_report({"operations": [{"name": "mint", "cost": 120000}, {"name": "burn", "gas": 90000}]})
        flat = parse_cost_report({"mint": 120000, "burn": 90000})
        assert listed == flat == [OperationCost("mint", 120000), OperationCost("burn", 90000)]

    def test_empty_cost_report(self):
        with pytest.raises(MeasurementUnavailable):
            parse_cost_report({})
        with pytest.raises(MeasurementUnavailable):
            parse_cost_report([1, 2])

    def test_report_files(self, tmp_path):
        (tmp_path / "lighthouse-report.json").write_text(json.dumps(LIGHTHOUSE))
        (tmp_path / "gas-report.json").write_text(json.dumps({"swap": 400000}))
        provider = ReportFileMeasurementProvider(tmp_path)
        assert provider.load_metrics().initial_load_ms == 2100.0
        assert provider.operation_costs() == [OperationCost("swap", 400000)]

    def test_report_files_missing(self, tmp_path):
        provider = ReportFileMeasurementProvider(tmp_path)
        with pytest.raises(MeasurementUnavailable):
            provider.load_metrics()
        with pytest.raises(MeasurementUnavailable):
            provider.operation_costs()

    def test_static_provider(self):
        metrics = LoadMetrics(1000, 2000)
        provider = StaticMeasurementProvider(metrics, [OperationCost("read", 1)])
        assert provider.load_metrics() is metrics
        assert provider.operation_costs() == [OperationCost("read", 1)]
        with pytest.raises(MeasurementUnavailable):
            StaticMeasurementProvider().load_metrics()
