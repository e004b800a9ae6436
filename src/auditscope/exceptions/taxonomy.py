"""Error taxonomy: categories and structured error codes.

Error Code Convention:
    AU1xx - Configuration errors (bad paths, values, missing manifest)
    AU2xx - Capability unavailable (no build artifacts, no measurements)
    AU3xx - Scan failures (unreadable or unparseable files)
    AU4xx - Orchestration errors (timeouts, cancellation, enumeration)
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(Enum):
    """Coarse classification reported alongside each phase failure."""

    CONFIGURATION = "configuration"
    CAPABILITY_UNAVAILABLE = "capability_unavailable"
    SCAN_FAILURE = "scan_failure"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Configuration errors (AU1xx)
    AU100 = "AU100"  # Generic configuration error
    AU101 = "AU101"  # Invalid path
    AU102 = "AU102"  # Invalid configuration value
    AU103 = "AU103"  # Project manifest missing

    # Capability errors (AU2xx)
    AU200 = "AU200"  # Capability unavailable
    AU201 = "AU201"  # Build artifacts unavailable
    AU202 = "AU202"  # Runtime measurement unavailable

    # Scan failures (AU3xx)
    AU300 = "AU300"  # Generic scan failure
    AU301 = "AU301"  # File read error
    AU302 = "AU302"  # Tree-sitter parse failed
    AU303 = "AU303"  # Unsupported language

    # Orchestration errors (AU4xx)
    AU400 = "AU400"  # Internal error
    AU401 = "AU401"  # Phase timeout
    AU402 = "AU402"  # Run cancelled
    AU403 = "AU403"  # Source enumeration failed
