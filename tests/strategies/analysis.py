"""Hypothesis strategies for positions, locations, matches, insights and documents."""

from __future__ import annotations

import string

from hypothesis import strategies as st
from hypothesis.strategies import composite

from insightengine.analysis import AnalysisInsight, PatternMatch
from insightengine.enums import Severity
from insightengine.text import Position, SourceLocation

RULE_IDS = ["todo-marker", "long-line", "debug-print", "secret", "tab"]


@composite
def positions(draw: st.DrawFn, max_line: int = 500, max_character: int = 200) -> Position:
    """Generate non-negative positions."""
    return Position(
        draw(st.integers(min_value=0, max_value=max_line)),
        draw(st.integers(min_value=0, max_value=max_character)),
    )


@composite
def locations(draw: st.DrawFn) -> SourceLocation:
    """Generate well-formed locations (end >= start)."""
    a = draw(positions())
    b = draw(positions())
    return SourceLocation(min(a, b), max(a, b))


@composite
def pattern_matches(draw: st.DrawFn, rule_id: str | None = None) -> PatternMatch:
    """Generate matches at well-formed locations."""
    return PatternMatch(
        rule_id=rule_id if rule_id is not None else draw(st.sampled_from(RULE_IDS)),
        location=draw(locations()),
        capture=draw(st.text(alphabet=string.ascii_letters, min_size=1, max_size=8)),
        confidence=draw(st.floats(min_value=0.0, max_value=1.0)),
    )


messages = st.text(alphabet=string.ascii_letters + " ", min_size=1, max_size=40).filter(
    str.strip
)


@composite
def well_formed_insights(draw: st.DrawFn) -> AnalysisInsight:
    """Generate insights built from their own evidence."""
    rule_id = draw(st.sampled_from(RULE_IDS))
    evidence = draw(st.lists(pattern_matches(rule_id=rule_id), min_size=1, max_size=5))
    return AnalysisInsight.from_matches(
        f"{rule_id}/{draw(st.integers(min_value=0, max_value=99))}",
        draw(st.sampled_from(list(Severity))),
        draw(messages),
        evidence,
    )


# Text built from words, markers and every line terminator style.
document_texts = st.lists(
    st.sampled_from(
        ["TODO", "FIXME", "print", "x", "secret", " ", "\t", "\n", "\r\n", "\r", "é", "日本"]
    ),
    max_size=60,
).map("".join)
