"""Analysis exceptions: missing capabilities and scan failures."""

from pathlib import Path
from typing import List, Sequence

from ..models import Severity
from .base import AuditscopeError
from .taxonomy import ErrorCategory, ErrorCode


class CapabilityUnavailable(AuditscopeError):
    """A phase input (artifacts, measurements) is not available."""

    category = ErrorCategory.CAPABILITY_UNAVAILABLE
    code = ErrorCode.AU200
    severity = Severity.MEDIUM
    remediation = "Provide the missing input or disable the phase"


class BuildArtifactsUnavailable(CapabilityUnavailable):
    """Raised when no bundle statistics or build output can be found."""

    code = ErrorCode.AU201
    remediation = "Run the production build (or set performance.build_command) before auditing"

    def __init__(self, searched: Sequence[str], reason: str):
        super().__init__(
            f"Build artifacts unavailable: {reason}",
            details={"searched": ", ".join(searched), "reason": reason},
        )
        self.searched = list(searched)
        self.reason = reason


class MeasurementUnavailable(CapabilityUnavailable):
    """Raised when a runtime measurement source cannot be read."""

    code = ErrorCode.AU202

    def __init__(self, capability: str, reason: str):
        super().__init__(
            f"Measurement unavailable: {capability}",
            details={"capability": capability, "reason": reason},
        )
        self.capability = capability
        self.reason = reason


class ScanFailure(AuditscopeError):
    """Base class for per-file read and parse failures."""

    category = ErrorCategory.SCAN_FAILURE
    code = ErrorCode.AU300
    severity = Severity.LOW
    remediation = "Check file permissions and encoding"


class FileAccessError(ScanFailure):
    """Raised when a file cannot be accessed or read."""

    code = ErrorCode.AU301

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ParsingError(ScanFailure):
    """Raised when file content cannot be parsed."""

    code = ErrorCode.AU302
    remediation = "Install the tree-sitter grammar for this language"

    def __init__(self, filepath: Path, language: str, reason: str):
        super().__init__(
            f"Failed to parse {language} file: {filepath}",
            details={"filepath": str(filepath), "language": language, "reason": reason},
        )
        self.filepath = filepath
        self.language = language
        self.reason = reason


class UnsupportedLanguageError(ScanFailure):
    """Raised when attempting to parse an unsupported language."""

    code = ErrorCode.AU303

    def __init__(self, language: str, supported_languages: List[str]):
        super().__init__(
            f"Unsupported language: {language}",
            details={"language": language, "supported": ", ".join(supported_languages)},
        )
        self.language = language
        self.supported_languages = supported_languages
