"""insightengine - rule-driven document analysis with editor-agnostic diagnostics.

Turns document text into located pattern matches, folds them into insights,
validates the insights, and publishes them as diagnostics to a hosting
editor through a small async port. No editor API is imported anywhere.

Public API:
    AnalysisEngine - Runs an ordered rule set over documents
    RuleSet - Ordered rule registry
    RegexRule, KeywordRule, LineLengthRule, pattern_rule - Built-in rules
    InsightValidator - All-or-nothing structural validation of insights
    DiagnosticPort - validate_document / clear_diagnostics / dispose
    InMemoryDiagnosticCollection - Thread-safe reference sink

Values:
    Ok, Err, Result - Every fallible operation returns a Result
    Severity - ERROR=1, WARNING=2, INFORMATION=3, HINT=4

Submodules:
    insightengine.text - Positions, locations and line indexing
    insightengine.diagnostics - Error values, codes, formatting
    insightengine.analysis - Matches, insights, rules, synthesis, engine
    insightengine.validation - Insight validator
    insightengine.runtime - Diagnostic port, sinks, locking
"""

from .analysis import (
    AnalysisEngine,
    AnalysisInsight,
    AnalysisReport,
    EngineConfig,
    KeywordRule,
    LineLengthRule,
    PatternMatch,
    PatternRule,
    RegexRule,
    RuleSet,
    RuleSetLoader,
    pattern_rule,
    rules_from_mapping,
)
from .core import Err, Ok, Result
from .diagnostics import (
    AnalysisDomainError,
    Diagnostic,
    DiagnosticError,
    DiagnosticErrorCode,
    DiagnosticFormatter,
    OutputFormat,
    ValidationError,
)
from .enums import Severity, SynthesisMode
from .runtime import (
    DiagnosticPort,
    DiagnosticSink,
    DocumentInfo,
    InMemoryDiagnosticCollection,
    PortConfig,
)
from .text import Position, SourceLocation
from .validation import InsightValidator, validate_insights

# Version information - populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError  # noqa: E402
from importlib.metadata import version as _get_version  # noqa: E402

try:
    __version__ = _get_version("insightengine")
except PackageNotFoundError:
    # Running from a source checkout without installation
    __version__ = "0.0.0+dev"

__all__ = [
    "AnalysisDomainError",
    "AnalysisEngine",
    "AnalysisInsight",
    "AnalysisReport",
    "Diagnostic",
    "DiagnosticError",
    "DiagnosticErrorCode",
    "DiagnosticFormatter",
    "DiagnosticPort",
    "DiagnosticSink",
    "DocumentInfo",
    "EngineConfig",
    "Err",
    "InMemoryDiagnosticCollection",
    "InsightValidator",
    "KeywordRule",
    "LineLengthRule",
    "Ok",
    "OutputFormat",
    "PatternMatch",
    "PatternRule",
    "PortConfig",
    "Position",
    "RegexRule",
    "Result",
    "RuleSet",
    "RuleSetLoader",
    "Severity",
    "SourceLocation",
    "SynthesisMode",
    "ValidationError",
    "__version__",
    "pattern_rule",
    "rules_from_mapping",
    "validate_insights",
]
