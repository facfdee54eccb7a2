"""Shared constants for insightengine.

Centralized limits and defaults used across the analysis, validation and
runtime packages. Placing them here avoids circular imports and gives one
place to tune them.

Constants are grouped by domain:
- Input limits: bounds on analysed source text
- Analysis limits: bounds on matches and insights per pass
- Diagnostic defaults: values stamped on published diagnostics
- Runtime: lock polling of async writers
- Logging limits: truncation of user-derived text in log records

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Input limits
    "MAX_SOURCE_SIZE",
    # Analysis limits
    "MAX_MATCHES_PER_RULE",
    "MAX_INSIGHTS",
    # Diagnostic defaults
    "DEFAULT_DIAGNOSTIC_SOURCE",
    "MAX_DIAGNOSTICS_PER_DOCUMENT",
    # Runtime
    "WRITE_LOCK_RETRY_INTERVAL",
    # Logging limits
    "LOG_TRUNCATE_WARNING",
    "LOG_TRUNCATE_DEBUG",
]

# ============================================================================
# INPUT LIMITS
# ============================================================================

# Maximum document size in characters (10 M).
# Larger documents are rejected before any rule runs.
MAX_SOURCE_SIZE: int = 10 * 1024 * 1024

# ============================================================================
# ANALYSIS LIMITS
# ============================================================================

# Matches kept per rule per pass. A runaway pattern (e.g. one matching every
# character) would otherwise flood the editor with diagnostics.
MAX_MATCHES_PER_RULE: int = 1000

# Insights kept per pass across all rules.
MAX_INSIGHTS: int = 5000

# ============================================================================
# DIAGNOSTIC DEFAULTS
# ============================================================================

# Value of Diagnostic.source for diagnostics produced by this package.
DEFAULT_DIAGNOSTIC_SOURCE: str = "insightengine"

# Diagnostics published per document. Editors degrade badly past a few
# thousand markers in one file.
MAX_DIAGNOSTICS_PER_DOCUMENT: int = 5000

# ============================================================================
# RUNTIME
# ============================================================================

# Seconds an async writer yields to the event loop between attempts on a
# contended RWLock. Readers on other threads may hold the lock; the loop
# must keep running meanwhile.
WRITE_LOCK_RETRY_INTERVAL: float = 0.001

# ============================================================================
# LOGGING LIMITS
# ============================================================================

# Warnings show more context as they're surfaced to users.
LOG_TRUNCATE_WARNING: int = 100

# Debug messages are high-volume; shorter keeps logs manageable.
LOG_TRUNCATE_DEBUG: int = 50
