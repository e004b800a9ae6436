"""Configuration loading and management for auditscope.

Configuration sources are merged in priority order:
    1. Defaults (defined in AuditConfig and its sections)
    2. Global config (~/.auditscope.toml)
    3. Project config (./auditscope.toml)
    4. Explicit config file
    5. Environment variables (AUDITSCOPE_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(parallel=False, complexity={"max_cyclomatic": 8})
    >>> config.complexity.max_cyclomatic
    8
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError
from .models import Phase, Severity

WCAG_LEVELS = ("A", "AA", "AAA")


@dataclass(frozen=True)
class ComplexityThresholds:
    """Per-function limits. A value strictly above a limit is a violation.

    Attributes:
        max_cyclomatic: Decision-point count limit
        max_length: Function body length limit, in lines
        max_nesting: Nested control-construct depth limit
        max_parameters: Declared parameter limit
    """

    max_cyclomatic: int = 10
    max_length: int = 50
    max_nesting: int = 3
    max_parameters: int = 5

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 1:
                raise InvalidConfigError(f"complexity.{f.name}", value, "must be at least 1")


@dataclass(frozen=True)
class SecurityConfig:
    """Security-exposure scan settings.

    The phase fails when the overall risk level reaches ``risk_threshold``.
    """

    risk_threshold: str = "MEDIUM"
    check_storage: bool = True

    def __post_init__(self) -> None:
        try:
            Severity.parse(self.risk_threshold)
        except ValueError:
            raise InvalidConfigError(
                "security.risk_threshold", self.risk_threshold, "must be LOW, MEDIUM, HIGH or CRITICAL"
            ) from None

    @property
    def threshold_severity(self) -> Severity:
        return Severity.parse(self.risk_threshold)


@dataclass(frozen=True)
class AccessibilityConfig:
    wcag_level: str = "AA"
    # Contextual document checks (headings, landmarks, contrast) run only here
    markup_extensions: tuple[str, ...] = (".html", ".htm", ".jsx", ".tsx", ".vue", ".svelte")

    def __post_init__(self) -> None:
        if self.wcag_level not in WCAG_LEVELS:
            raise InvalidConfigError("accessibility.wcag_level", self.wcag_level, "must be A, AA or AAA")


@dataclass(frozen=True)
class PerformanceConfig:
    """Performance profiler settings.

    Attributes:
        max_bundle_bytes: Total bundle size limit
        max_chunk_bytes: Single chunk size limit
        max_load_ms: Initial load time limit
        max_tti_ms: Time-to-interactive ceiling
        cost_ceiling: Resource-cost ceiling per operation
        build_command: Optional shell command that produces build artifacts
        build_timeout: Seconds before the build command is killed
        build_dirs: Build output directories scanned for .js chunks
        stats_files: Bundle stats JSON files, relative to the root
        lighthouse_report: Lighthouse JSON report used for load metrics
        cost_report: JSON resource-cost catalog
    """

    max_bundle_bytes: int = 1024 * 1024
    max_chunk_bytes: int = 100 * 1024
    max_load_ms: int = 3000
    max_tti_ms: int = 5000
    cost_ceiling: int = 500_000
    build_command: Optional[str] = None
    build_timeout: float = 300.0
    build_dirs: tuple[str, ...] = ("dist", "build", "out")
    stats_files: tuple[str, ...] = (
        "dist/bundle-stats.json",
        "build/static/js/bundle-stats.json",
        "webpack-stats.json",
    )
    lighthouse_report: str = "lighthouse-report.json"
    cost_report: str = "gas-report.json"

    def __post_init__(self) -> None:
        for name in ("max_bundle_bytes", "max_chunk_bytes", "max_load_ms", "max_tti_ms", "cost_ceiling"):
            value = getattr(self, name)
            if value <= 0:
                raise InvalidConfigError(f"performance.{name}", value, "must be positive")
        if self.build_timeout <= 0:
            raise InvalidConfigError("performance.build_timeout", self.build_timeout, "must be positive")


@dataclass(frozen=True)
class CoverageConfig:
    min_coverage: float = 80.0
    summary_files: tuple[str, ...] = ("coverage/coverage-summary.json",)
    lcov_files: tuple[str, ...] = ("coverage/lcov.info",)

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_coverage <= 100.0:
            raise InvalidConfigError("coverage.min_coverage", self.min_coverage, "must be between 0 and 100")


@dataclass(frozen=True)
class ScoringConfig:
    """Readiness bars applied to the overall score."""

    production_ready_score: float = 90.0
    ready_score: float = 75.0
    needs_work_score: float = 50.0
    max_high_for_ready: int = 3

    def __post_init__(self) -> None:
        if not 0 <= self.needs_work_score <= self.ready_score <= self.production_ready_score <= 100:
            raise InvalidConfigError(
                "scoring",
                f"{self.needs_work_score}/{self.ready_score}/{self.production_ready_score}",
                "bars must satisfy 0 <= needs_work <= ready <= production_ready <= 100",
            )
        if self.max_high_for_ready < 0:
            raise InvalidConfigError("scoring.max_high_for_ready", self.max_high_for_ready, "must be non-negative")


@dataclass(frozen=True)
class PhaseToggles:
    complexity: bool = True
    security: bool = True
    coverage: bool = True
    performance: bool = True
    accessibility: bool = True

    def enabled(self) -> list[Phase]:
        """Enabled phases in execution order."""
        return [phase for phase in Phase if getattr(self, phase.value)]


@dataclass(frozen=True)
class AuditConfig:
    """Configuration for one audit run.

    Attributes:
        roots: Directories to audit (the first is the project root)
        extensions: File extensions collected as SourceUnits
        exclude_patterns: Glob patterns skipped during enumeration
        max_file_size_mb: Files larger than this are skipped
        parallel: Run phases on a thread pool
        workers: Pool size (None = one per enabled phase)
        phase_timeout: Seconds a single phase may run
        require_manifest: Complexity phase needs a project manifest
        output_format: "rich", "json" or "github"
    """

    roots: tuple[str, ...] = (".",)
    extensions: tuple[str, ...] = (
        ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".py",
        ".html", ".htm", ".vue", ".svelte", ".css",
    )
    exclude_patterns: tuple[str, ...] = (
        "node_modules/*",
        ".git/*",
        "dist/*",
        "build/*",
        "out/*",
        "coverage/*",
        ".venv/*",
        "venv/*",
        "__pycache__/*",
        "*.min.js",
        "*.d.ts",
    )
    max_file_size_mb: float = 5.0
    parallel: bool = True
    workers: Optional[int] = None
    phase_timeout: float = 300.0
    require_manifest: bool = True
    output_format: str = "rich"

    complexity: ComplexityThresholds = field(default_factory=ComplexityThresholds)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    accessibility: AccessibilityConfig = field(default_factory=AccessibilityConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    phases: PhaseToggles = field(default_factory=PhaseToggles)

    def __post_init__(self) -> None:
        if not self.roots:
            raise InvalidConfigError("roots", self.roots, "at least one root is required")
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.phase_timeout <= 0:
            raise InvalidConfigError("phase_timeout", self.phase_timeout, "must be positive")
        if self.max_file_size_mb <= 0:
            raise InvalidConfigError("max_file_size_mb", self.max_file_size_mb, "must be positive")
        if self.output_format not in ("rich", "json", "github"):
            raise InvalidConfigError("output_format", self.output_format, "must be 'rich', 'json' or 'github'")

    @property
    def root(self) -> Path:
        return Path(self.roots[0])

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)


# Nested TOML tables and the dataclass each one builds
SECTIONS: dict[str, type] = {
    "complexity": ComplexityThresholds,
    "security": SecurityConfig,
    "accessibility": AccessibilityConfig,
    "performance": PerformanceConfig,
    "coverage": CoverageConfig,
    "scoring": ScoringConfig,
    "phases": PhaseToggles,
}


def load_config(config_file: Optional[Path] = None, **overrides) -> AuditConfig:
    """Load configuration with auto-discovery and merging.

    Nested sections can be overridden with a dict (``complexity={...}``)
    or a ready-made section instance.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AuditConfig instance

    Raises:
        ConfigurationError: If a config file is missing or malformed
        InvalidConfigError: If a value fails validation
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".auditscope.toml"
    if global_config.exists():
        _merge(merged, _load_toml_file(global_config))

    project_config = Path.cwd() / "auditscope.toml"
    if project_config.exists():
        _merge(merged, _load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        _merge(merged, _load_toml_file(config_file))

    _merge(merged, _load_env_vars())
    _merge(merged, {k: v for k, v in overrides.items() if v is not None})

    return build_config(merged)


def build_config(values: dict[str, Any]) -> AuditConfig:
    """Build an AuditConfig from a merged mapping of plain values."""
    values = dict(values)
    for name, section_cls in SECTIONS.items():
        section = values.pop(name, None)
        if section is None or isinstance(section, section_cls):
            if section is not None:
                values[name] = section
            continue
        if not isinstance(section, dict):
            raise InvalidConfigError(name, section, "expected a table")
        values[name] = _build_section(name, section_cls, section)

    try:
        return AuditConfig(**_coerce_sequences(AuditConfig, values))
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def production_config(**overrides) -> AuditConfig:
    """Stricter preset for release gates."""
    base = AuditConfig()
    preset = replace(
        base,
        complexity=replace(base.complexity, max_cyclomatic=8, max_length=15),
        security=replace(base.security, risk_threshold="LOW"),
        coverage=replace(base.coverage, min_coverage=90.0),
        performance=replace(base.performance, max_bundle_bytes=512 * 1024, max_load_ms=2000),
    )
    return replace(preset, **overrides) if overrides else preset


def development_config(**overrides) -> AuditConfig:
    """Relaxed preset for day-to-day work."""
    base = AuditConfig()
    preset = replace(
        base,
        complexity=replace(base.complexity, max_cyclomatic=15, max_length=30),
        security=replace(base.security, risk_threshold="HIGH"),
        coverage=replace(base.coverage, min_coverage=60.0),
        performance=replace(base.performance, max_bundle_bytes=2 * 1024 * 1024, max_load_ms=5000),
    )
    return replace(preset, **overrides) if overrides else preset


def config_to_dict(config: AuditConfig) -> dict[str, Any]:
    """Flatten a config into TOML-friendly plain values."""
    result: dict[str, Any] = {}
    for f in fields(config):
        value = getattr(config, f.name)
        if f.name in SECTIONS:
            result[f.name] = {
                sf.name: _plain(getattr(value, sf.name))
                for sf in fields(value)
                if getattr(value, sf.name) is not None
            }
        elif value is not None:
            result[f.name] = _plain(value)
    return result


def _plain(value: Any) -> Any:
    return list(value) if isinstance(value, tuple) else value


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    """Merge source into target, one level deep for section tables."""
    for key, value in source.items():
        if key in SECTIONS and isinstance(value, dict) and isinstance(target.get(key), dict):
            target[key] = {**target[key], **value}
        else:
            target[key] = value


def _build_section(name: str, section_cls: type, values: dict[str, Any]) -> Any:
    try:
        return section_cls(**_coerce_sequences(section_cls, values))
    except TypeError as e:
        raise ConfigurationError(f"Invalid [{name}] config: {e}") from e


def _coerce_sequences(cls: type, values: dict[str, Any]) -> dict[str, Any]:
    """Convert TOML arrays into the tuples the frozen dataclasses use."""
    hints = get_type_hints(cls)
    coerced = dict(values)
    for key, value in values.items():
        if isinstance(value, list) and getattr(hints.get(key), "__origin__", None) is tuple:
            coerced[key] = tuple(value)
    return coerced


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from AUDITSCOPE_* environment variables.

    Top-level fields map to ``AUDITSCOPE_<FIELD>`` (e.g. AUDITSCOPE_PARALLEL)
    and section fields to ``AUDITSCOPE_<SECTION>_<FIELD>``
    (e.g. AUDITSCOPE_COMPLEXITY_MAX_CYCLOMATIC). Tuple fields are read as
    comma-separated lists.

    Returns:
        Dict of field_name -> parsed_value for any AUDITSCOPE_* vars found.
    """
    result: dict[str, Any] = {}
    hints = get_type_hints(AuditConfig)

    for f in fields(AuditConfig):
        if f.name in SECTIONS:
            section_cls = SECTIONS[f.name]
            section_hints = get_type_hints(section_cls)
            section_values: dict[str, Any] = {}
            for sf in fields(section_cls):
                env_key = f"AUDITSCOPE_{f.name.upper()}_{sf.name.upper()}"
                parsed = _read_env(env_key, section_hints[sf.name])
                if parsed is not None:
                    section_values[sf.name] = parsed
            if section_values:
                result[f.name] = section_values
            continue

        parsed = _read_env(f"AUDITSCOPE_{f.name.upper()}", hints[f.name])
        if parsed is not None:
            result[f.name] = parsed

    return result


def _read_env(env_key: str, type_hint: Any) -> Any:
    env_value = os.environ.get(env_key)
    if env_value is None:
        return None
    try:
        return _parse_env_value(env_value, type_hint)
    except ValueError as e:
        raise InvalidConfigError(env_key, env_value, str(e)) from e


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the annotated type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]

    if getattr(type_hint, "__origin__", None) is tuple:
        return tuple(part.strip() for part in value.split(",") if part.strip())

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    return value


def _load_toml_file(path: Path) -> dict:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid config file '{path}': {e}") from e
