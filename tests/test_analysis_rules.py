"""Tests for analysis/rules.py: built-in rules and the RuleSet registry.

Python 3.13+.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

import pytest

from insightengine.analysis import (
    CallableRule,
    KeywordRule,
    LineLengthRule,
    PatternMatch,
    PatternRule,
    RegexRule,
    RuleSet,
    TextDocument,
    pattern_rule,
)
from insightengine.enums import Severity, SynthesisMode
from insightengine.text import Position, SourceLocation


def _loc(line: int, start: int, end: int) -> SourceLocation:
    return SourceLocation(Position(line, start), Position(line, end))


class TestTextDocument:
    """Document view handed to rules."""

    def test_location_from_offsets(self) -> None:
        document = TextDocument("u", "ab\ncdef")
        assert document.location(4, 6) == _loc(1, 1, 3)

    def test_lines_strip_terminators(self) -> None:
        document = TextDocument("u", "a\r\nb\rc\n")
        assert list(document.lines()) == [(0, "a"), (1, "b"), (2, "c"), (3, "")]

    def test_equality_ignores_index(self) -> None:
        assert TextDocument("u", "x") == TextDocument("u", "x")


class TestPatternRuleBase:
    """Identity and option checking shared by all rules."""

    @pytest.mark.parametrize("rule_id", ["", "   ", None, 3])
    def test_rule_without_identity_rejected(self, rule_id: object) -> None:
        with pytest.raises(ValueError, match="identity"):
            RegexRule(rule_id, "x")  # type: ignore[arg-type]

    def test_unknown_severity_rejected(self) -> None:
        with pytest.raises(ValueError, match="severity"):
            RegexRule("r", "x", severity="fatal")

    def test_unknown_synthesis_rejected(self) -> None:
        with pytest.raises(ValueError):
            RegexRule("r", "x", synthesis="merge")

    def test_severity_and_synthesis_by_name(self) -> None:
        rule = RegexRule("r", "x", severity="error", synthesis="aggregate")
        assert rule.severity is Severity.ERROR
        assert rule.synthesis is SynthesisMode.AGGREGATE

    def test_default_message(self) -> None:
        assert RegexRule("r", "x").message == "{rule_id}: {capture}"

    def test_abstract(self) -> None:
        with pytest.raises(TypeError):
            PatternRule("r")  # type: ignore[abstract]

    def test_repr(self) -> None:
        expected = "RegexRule(rule_id='r', severity=WARNING, synthesis=each)"
        assert repr(RegexRule("r", "x")) == expected


class TestRegexRule:
    """RegexRule scanning."""

    def test_named_groups_become_metadata(self) -> None:
        rule = RegexRule("todo", r"\b(?P<tag>TODO|FIXME)(?::(?P<owner>\w+))?")
        matches = list(rule.scan(TextDocument("u", "x TODO:ann\nFIXME")))
        assert [m.capture for m in matches] == ["TODO:ann", "FIXME"]
        assert dict(matches[0].metadata) == {"tag": "TODO", "owner": "ann"}
        assert dict(matches[1].metadata) == {"tag": "FIXME"}
        assert matches[1].location == _loc(1, 0, 5)

    def test_group_selects_capture(self) -> None:
        rule = RegexRule("assign", r"(?P<name>\w+) = ", group="name")
        (match,) = rule.scan(TextDocument("u", "  value = 3"))
        assert match.capture == "value"
        assert match.location == _loc(0, 2, 7)

    def test_empty_hits_skipped(self) -> None:
        rule = RegexRule("r", r"x*")
        assert [m.capture for m in rule.scan(TextDocument("u", "axxb"))] == ["xx"]

    def test_nonparticipating_group_skipped(self) -> None:
        rule = RegexRule("r", r"a(b)?", group=1)
        assert [m.capture for m in rule.scan(TextDocument("u", "a ab"))] == ["b"]

    def test_invalid_pattern(self) -> None:
        with pytest.raises(ValueError, match="invalid pattern"):
            RegexRule("r", "(unclosed")

    @pytest.mark.parametrize("group", [2, "missing", -1])
    def test_unknown_group(self, group: int | str) -> None:
        with pytest.raises(ValueError, match="group"):
            RegexRule("r", "(a)", group=group)

    def test_precompiled_pattern(self) -> None:
        rule = RegexRule("r", re.compile("abc", re.IGNORECASE))
        assert [m.capture for m in rule.scan(TextDocument("u", "ABC"))] == ["ABC"]

    def test_confidence_propagates(self) -> None:
        rule = RegexRule("r", "a", confidence=0.25)
        assert [m.confidence for m in rule.scan(TextDocument("u", "aa"))] == [0.25, 0.25]

    def test_confidence_checked(self) -> None:
        with pytest.raises(ValueError, match="confidence"):
            RegexRule("r", "a", confidence=2.0)


class TestKeywordRule:
    """Whole-word keyword matching."""

    def test_whole_words_only(self) -> None:
        rule = KeywordRule("kw", ["print"])
        matches = list(rule.scan(TextDocument("u", "print(x); sprint; printer; print")))
        assert [m.location.start.character for m in matches] == [0, 27]

    def test_case_insensitive_keeps_configured_keyword(self) -> None:
        rule = KeywordRule("kw", ["Secret"])
        (match,) = rule.scan(TextDocument("u", "my SECRET key"))
        assert match.capture == "SECRET"
        assert match.get("keyword") == "Secret"

    def test_case_sensitive(self) -> None:
        rule = KeywordRule("kw", ["TODO"], case_sensitive=True)
        assert list(rule.scan(TextDocument("u", "todo"))) == []

    def test_longest_keyword_wins(self) -> None:
        rule = KeywordRule("kw", ["max", "max-width"])
        (match,) = rule.scan(TextDocument("u", "set max-width"))
        assert match.capture == "max-width"

    def test_special_characters_escaped(self) -> None:
        rule = KeywordRule("kw", ["a.b"])
        assert list(rule.scan(TextDocument("u", "axb"))) == []
        assert len(list(rule.scan(TextDocument("u", "a.b")))) == 1

    def test_keywords_required(self) -> None:
        with pytest.raises(ValueError, match="keyword"):
            KeywordRule("kw", ["", ""])

    def test_keywords_property_deduplicates(self) -> None:
        assert KeywordRule("kw", ["a", "b", "a"]).keywords == ("a", "b")


class TestLineLengthRule:
    """Overflow of long lines."""

    def test_flags_overflow(self) -> None:
        rule = LineLengthRule("long", 5)
        matches = list(rule.scan(TextDocument("u", "short\ntoo long\r\nok")))
        assert len(matches) == 1
        assert matches[0].location == _loc(1, 5, 8)
        assert matches[0].capture == "ong"
        assert dict(matches[0].metadata) == {"length": "8", "limit": "5"}

    def test_default_message_uses_metadata(self) -> None:
        assert "{length}" in LineLengthRule("long", 5).message

    @pytest.mark.parametrize("limit", [0, -1, True, 2.5])
    def test_limit_checked(self, limit: object) -> None:
        with pytest.raises(ValueError, match="max_length"):
            LineLengthRule("long", limit)  # type: ignore[arg-type]


class TestCallableRule:
    """Function-backed rules."""

    def test_decorator_derives_id(self) -> None:
        @pattern_rule(severity="hint")
        def trailing_space(document: TextDocument) -> Iterable[PatternMatch]:
            for line_number, text in document.lines():
                stripped = len(text.rstrip(" "))
                if stripped < len(text):
                    yield PatternMatch(
                        "trailing-space", _loc(line_number, stripped, len(text)), text[stripped:]
                    )

        assert isinstance(trailing_space, CallableRule)
        assert trailing_space.rule_id == "trailing-space"
        assert trailing_space.severity is Severity.HINT
        (match,) = trailing_space.scan(TextDocument("u", "a  \nb"))
        assert match.location == _loc(0, 1, 3)

    def test_explicit_id(self) -> None:
        @pattern_rule("custom-id")
        def anything(document: TextDocument) -> list[PatternMatch]:
            return []

        assert anything.rule_id == "custom-id"

    def test_match_at_helper(self) -> None:
        rule = CallableRule("r", lambda document: [rule.match_at(document, 2, 4)])
        (match,) = rule.scan(TextDocument("u", "a\nbcd"))
        assert match.rule_id == "r"
        assert match.capture == "bc"
        assert match.location == _loc(1, 0, 2)

    def test_non_callable_rejected(self) -> None:
        with pytest.raises(TypeError):
            CallableRule("r", "not callable")  # type: ignore[arg-type]


class TestRuleSet:
    """Ordered registry."""

    def test_declaration_order(self) -> None:
        rules = RuleSet([RegexRule("b", "x"), RegexRule("a", "y")])
        assert rules.rule_ids == ("b", "a")
        assert [rule.rule_id for rule in rules] == ["b", "a"]

    def test_duplicate_id_rejected(self) -> None:
        rules = RuleSet([RegexRule("a", "x")])
        with pytest.raises(ValueError, match="Duplicate"):
            rules.add(RegexRule("a", "y"))

    def test_non_rule_rejected(self) -> None:
        with pytest.raises(TypeError):
            RuleSet().add("a")  # type: ignore[arg-type]

    def test_contains_id_and_instance(self) -> None:
        rule = RegexRule("a", "x")
        rules = RuleSet([rule])
        assert "a" in rules
        assert rule in rules
        assert RegexRule("a", "x") not in rules

    def test_remove_and_get(self) -> None:
        rule = RegexRule("a", "x")
        rules = RuleSet([rule])
        assert rules.get("a") is rule
        assert rules.remove("a") is rule
        assert rules.get("a") is None
        with pytest.raises(KeyError):
            rules.remove("a")

    def test_copy_is_independent(self) -> None:
        rules = RuleSet([RegexRule("a", "x")])
        copied = rules.copy()
        copied.add(RegexRule("b", "y"))
        assert len(rules) == 1
        assert len(copied) == 2

    def test_repr(self) -> None:
        assert repr(RuleSet()) == "RuleSet(rules=0)"
