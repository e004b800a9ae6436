"""Configuration exceptions: paths, settings, project manifests."""

from pathlib import Path
from typing import Any, Sequence

from ..models import Severity
from .base import AuditscopeError
from .taxonomy import ErrorCategory, ErrorCode


class ConfigurationError(AuditscopeError):
    """Base class for configuration-related errors."""

    category = ErrorCategory.CONFIGURATION
    code = ErrorCode.AU100
    remediation = "Check auditscope.toml and AUDITSCOPE_* environment variables"


class InvalidPathError(ConfigurationError):
    """Raised when a provided path is invalid."""

    code = ErrorCode.AU101
    remediation = "Pass an existing directory as the audit root"

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid path: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    code = ErrorCode.AU102

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class ProjectManifestError(ConfigurationError):
    """Raised when the audited root has no recognizable project manifest."""

    code = ErrorCode.AU103
    severity = Severity.MEDIUM
    remediation = "Add a tsconfig.json, package.json or pyproject.toml to the project root"

    def __init__(self, root: Path, searched: Sequence[str]):
        super().__init__(
            f"No project manifest found under {root}",
            details={"root": str(root), "searched": ", ".join(searched)},
        )
        self.root = root
        self.searched = list(searched)
