"""Exception hierarchy for auditscope."""

from .analysis import (
    BuildArtifactsUnavailable,
    CapabilityUnavailable,
    FileAccessError,
    MeasurementUnavailable,
    ParsingError,
    ScanFailure,
    UnsupportedLanguageError,
)
from .base import AuditscopeError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
    ProjectManifestError,
)
from .orchestration import (
    AuditCancelledError,
    PhaseTimeoutError,
    SourceEnumerationError,
)
from .taxonomy import ErrorCategory, ErrorCode

__all__ = [
    "AuditscopeError",
    "ErrorCategory",
    "ErrorCode",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "ProjectManifestError",
    "CapabilityUnavailable",
    "BuildArtifactsUnavailable",
    "MeasurementUnavailable",
    "ScanFailure",
    "FileAccessError",
    "ParsingError",
    "UnsupportedLanguageError",
    "PhaseTimeoutError",
    "AuditCancelledError",
    "SourceEnumerationError",
]
