"""Pytest configuration for the insightengine test suite.

Single Source of Truth for Hypothesis max_examples:
- dev: Local development with 500 examples (thorough property testing)
- ci: CI runs with 50 examples (fast feedback)
- verbose: Debug mode with progress output (100 examples)

Profile auto-detection:
- HYPOTHESIS_PROFILE env var -> explicit override
- CI=true environment variable -> "ci" profile
- Otherwise -> "dev" profile (local development)

Override manually: HYPOTHESIS_PROFILE=verbose pytest tests/

Fuzzing Test Separation:
Tests marked with @pytest.mark.fuzz are excluded from normal test runs.
Run them via: pytest -m fuzz
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from insightengine.analysis import AnalysisEngine, KeywordRule, LineLengthRule, RegexRule, RuleSet
from insightengine.enums import Severity, SynthesisMode
from insightengine.runtime import DiagnosticPort, InMemoryDiagnosticCollection

# =============================================================================
# HYPOTHESIS PROFILES - SINGLE SOURCE OF TRUTH
# =============================================================================

settings.register_profile(
    "dev",
    max_examples=500,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
)

settings.register_profile(
    "ci",
    max_examples=50,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=True,
    print_blob=True,
)

settings.register_profile(
    "verbose",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    derandomize=False,
    verbosity=Verbosity.verbose,
)


def _detect_profile() -> str:
    """Detect appropriate Hypothesis profile based on execution context.

    Priority:
    1. HYPOTHESIS_PROFILE env var (explicit override)
    2. CI=true env var
    3. Default to "dev" (local development)
    """
    explicit = os.environ.get("HYPOTHESIS_PROFILE")
    if explicit in ("dev", "ci", "verbose"):
        return explicit
    if os.environ.get("CI") == "true":
        return "ci"
    return "dev"


settings.load_profile(_detect_profile())


# =============================================================================
# FUZZING TEST SEPARATION
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register the 'fuzz' marker for intensive property tests."""
    config.addinivalue_line(
        "markers",
        "fuzz: Intensive property tests for fuzzing (excluded from normal test runs)",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip fuzz-marked tests unless explicitly requested with ``-m fuzz``."""
    marker_expr = config.getoption("-m", default="")
    if "fuzz" in str(marker_expr):
        return

    skip_fuzz = pytest.mark.skip(reason="Fuzzing test - run with: pytest -m fuzz")
    for item in items:
        if "fuzz" in item.keywords:
            item.add_marker(skip_fuzz)


# =============================================================================
# SHARED FIXTURES
# =============================================================================


@pytest.fixture
def sample_rules() -> RuleSet:
    """A small rule set exercising several rule kinds and synthesis modes."""
    return RuleSet(
        [
            RegexRule(
                "todo-marker",
                r"\b(?P<tag>TODO|FIXME)\b",
                message="Unresolved {tag}",
                severity=Severity.WARNING,
            ),
            KeywordRule(
                "debug-print",
                ["print"],
                message="Debug output left in code",
                severity=Severity.HINT,
                synthesis=SynthesisMode.AGGREGATE,
            ),
            LineLengthRule("long-line", 30),
        ]
    )


@pytest.fixture
def engine(sample_rules: RuleSet) -> AnalysisEngine:
    """Engine over ``sample_rules``."""
    return AnalysisEngine(sample_rules)


@pytest.fixture
def collection() -> InMemoryDiagnosticCollection:
    """Fresh in-memory sink."""
    return InMemoryDiagnosticCollection()


@pytest.fixture
def port(engine: AnalysisEngine, collection: InMemoryDiagnosticCollection) -> DiagnosticPort:
    """Port publishing into ``collection``."""
    return DiagnosticPort(engine, collection)
