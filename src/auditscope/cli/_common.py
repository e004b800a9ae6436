"""Shared CLI helpers."""

from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from ..config import AuditConfig, development_config, load_config, production_config

console = Console()

PROJECT_CONFIG = "auditscope.toml"

PRESETS = {
    "production": production_config,
    "development": development_config,
}


def resolve_config(
    path: Path,
    config: Optional[Path] = None,
    preset: Optional[str] = None,
    **overrides: Any,
) -> AuditConfig:
    """Build the run configuration from CLI options.

    A project's own auditscope.toml is used when no --config is given. A
    preset replaces the threshold sections of whatever was loaded.
    """
    if config is None and (path / PROJECT_CONFIG).is_file():
        config = path / PROJECT_CONFIG
    resolved = load_config(config_file=config, roots=(str(path),), **overrides)
    if preset is None:
        return resolved
    template = PRESETS[preset]()
    return replace(
        resolved,
        complexity=template.complexity,
        security=template.security,
        coverage=template.coverage,
        performance=template.performance,
    )
