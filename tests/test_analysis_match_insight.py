"""Tests for analysis/match.py and analysis/insight.py.

Python 3.13+.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from insightengine.analysis import AnalysisInsight, PatternMatch
from insightengine.enums import Severity
from insightengine.text import Position, SourceLocation
from tests.strategies import pattern_matches


def _loc(line: int, start: int, end: int) -> SourceLocation:
    return SourceLocation(Position(line, start), Position(line, end))


class TestPatternMatch:
    """PatternMatch construction and immutability."""

    def test_defaults(self) -> None:
        match = PatternMatch("r", _loc(0, 0, 4), "TODO")
        assert match.confidence == 1.0
        assert dict(match.metadata) == {}
        assert match.is_high_confidence

    def test_metadata_is_copied_and_read_only(self) -> None:
        source = {"tag": "TODO"}
        match = PatternMatch("r", _loc(0, 0, 4), "TODO", metadata=source)
        source["tag"] = "changed"
        assert match.get("tag") == "TODO"
        with pytest.raises(TypeError):
            match.metadata["tag"] = "x"  # type: ignore[index]

    @pytest.mark.parametrize("confidence", [-0.1, 1.5])
    def test_confidence_range(self, confidence: float) -> None:
        with pytest.raises(ValueError, match="confidence"):
            PatternMatch("r", _loc(0, 0, 1), "x", confidence=confidence)

    def test_low_confidence(self) -> None:
        assert not PatternMatch("r", _loc(0, 0, 1), "x", confidence=0.5).is_high_confidence

    def test_get_default(self) -> None:
        assert PatternMatch("r", _loc(0, 0, 1), "x").get("missing", "d") == "d"

    def test_equality_includes_metadata(self) -> None:
        a = PatternMatch("r", _loc(0, 0, 1), "x", metadata={"k": "1"})
        b = PatternMatch("r", _loc(0, 0, 1), "x", metadata={"k": "2"})
        assert a != b
        assert hash(a) == hash(b)

    @given(pattern_matches())
    def test_hashable_and_self_equal(self, match: PatternMatch) -> None:
        assert match == match
        assert len({match, match}) == 1


class TestAnalysisInsight:
    """AnalysisInsight construction and derived properties."""

    def test_from_matches_keeps_evidence_order(self) -> None:
        second = PatternMatch("r", _loc(3, 0, 1), "b")
        first = PatternMatch("r", _loc(1, 0, 1), "a")
        insight = AnalysisInsight.from_matches("r/0", Severity.WARNING, "m", [second, first])
        assert insight.locations == (second.location, first.location)
        assert insight.primary_location == second.location
        assert insight.evidence_count == 2

    def test_from_matches_lists_repeated_location_once(self) -> None:
        location = _loc(0, 0, 3)
        matches = [PatternMatch("a", location, "x"), PatternMatch("b", location, "x")]
        insight = AnalysisInsight.from_matches("i", Severity.HINT, "m", matches)
        assert insight.locations == (location,)
        assert insight.rule_ids == ("a", "b")
        assert insight.rule_id == "a"

    def test_raw_constructor_accepts_malformed(self) -> None:
        insight = AnalysisInsight("i", Severity.ERROR, "m", (), ())
        assert insight.primary_location is None
        assert insight.rule_id is None

    def test_sequences_become_tuples(self) -> None:
        match = PatternMatch("r", _loc(0, 0, 1), "x")
        insight = AnalysisInsight("i", Severity.ERROR, "m", [match.location], [match])
        assert isinstance(insight.locations, tuple)
        assert isinstance(insight.source_matches, tuple)

    @pytest.mark.parametrize(
        ("severity", "actionable"),
        [
            (Severity.ERROR, True),
            (Severity.WARNING, True),
            (Severity.INFORMATION, False),
            (Severity.HINT, False),
        ],
    )
    def test_is_actionable(self, severity: Severity, actionable: bool) -> None:
        match = PatternMatch("r", _loc(0, 0, 1), "x")
        assert AnalysisInsight.from_matches("i", severity, "m", [match]).is_actionable is actionable

    @given(st.lists(pattern_matches(), min_size=1, max_size=10))
    def test_from_matches_is_well_formed(self, matches: list[PatternMatch]) -> None:
        insight = AnalysisInsight.from_matches("i", Severity.WARNING, "m", matches)
        derived = {m.location for m in matches}
        assert insight.locations
        assert all(location in derived for location in insight.locations)
        assert len(insight.locations) == len(derived)
