"""Synthesis: folding one rule's matches into insights.

Each SynthesisMode partitions a rule's ordered matches into evidence groups;
every group becomes one insight. Matches that belong to no group are returned
as DroppedMatch records, so the caller can account for every match:

    EACH              one group per match
    AGGREGATE         one group holding every match
    GROUP_BY_CAPTURE  one group per distinct capture, first-seen order
    DUPLICATES        one group per capture seen twice or more;
                      singletons dropped with DropReason.UNIQUE_CAPTURE

Insight messages come from the rule's message template, formatted with
``{rule_id}``, ``{capture}``, ``{count}`` and the metadata keys of the
group's first match. Placeholders naming anything else are left in the
message as written.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from insightengine.enums import DropReason, Severity, SynthesisMode

from .insight import AnalysisInsight
from .match import PatternMatch

__all__ = [
    "DroppedMatch",
    "RuleSynthesis",
    "group_matches",
    "render_message",
    "synthesize_matches",
]

type MatchGroup = tuple[PatternMatch, ...]


@dataclass(frozen=True, slots=True)
class DroppedMatch:
    """A match that became evidence for no insight, and why.

    Attributes:
        match: The dropped match
        reason: Why it was dropped
    """

    match: PatternMatch
    reason: DropReason

    def __str__(self) -> str:
        return f"{self.match.rule_id} at {self.match.location} dropped: {self.reason}"


@dataclass(frozen=True, slots=True)
class RuleSynthesis:
    """Output of synthesizing one rule's matches.

    Attributes:
        insights: Insights in synthesis order
        dropped: Matches that became evidence for no insight
    """

    insights: tuple[AnalysisInsight, ...] = ()
    dropped: tuple[DroppedMatch, ...] = ()


class _TemplateValues(dict[str, object]):
    """Format mapping that renders unknown placeholders back as written."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_message(
    template: str,
    *,
    rule_id: str,
    capture: str,
    count: int,
    metadata: Mapping[str, str] | None = None,
) -> str:
    """Format an insight message template.

    Built-in placeholders take precedence over metadata keys of the same
    name.

    Args:
        template: Message template, ``str.format`` syntax
        rule_id: Rule identity
        capture: Capture of the first evidence match
        count: Number of evidence matches
        metadata: Metadata of the first evidence match

    Returns:
        Formatted message

    Raises:
        ValueError: Malformed template (e.g. unbalanced braces)
        IndexError: Positional placeholder such as ``{0}``
        AttributeError: Attribute placeholder naming a missing attribute

    Example:
        >>> render_message("{count}x {capture} ({owner})", rule_id="r",
        ...                capture="TODO", count=2)
        '2x TODO ({owner})'
    """
    values = _TemplateValues(metadata or {})
    values.update(rule_id=rule_id, capture=capture, count=count)
    return template.format_map(values)


def _group_by_capture(matches: Sequence[PatternMatch]) -> dict[str, list[PatternMatch]]:
    groups: dict[str, list[PatternMatch]] = {}
    for match in matches:
        groups.setdefault(match.capture, []).append(match)
    return groups


def group_matches(
    mode: SynthesisMode, matches: Sequence[PatternMatch]
) -> tuple[tuple[MatchGroup, ...], tuple[DroppedMatch, ...]]:
    """Partition ordered matches into evidence groups.

    Args:
        mode: Synthesis mode
        matches: One rule's matches in pass order

    Returns:
        Tuple of (groups, dropped). Every input match is in exactly one
        group or in dropped.
    """
    match mode:
        case SynthesisMode.EACH:
            return tuple((m,) for m in matches), ()
        case SynthesisMode.AGGREGATE:
            return ((tuple(matches),) if matches else ()), ()
        case SynthesisMode.GROUP_BY_CAPTURE:
            return tuple(tuple(g) for g in _group_by_capture(matches).values()), ()
        case SynthesisMode.DUPLICATES:
            groups: list[MatchGroup] = []
            dropped: list[DroppedMatch] = []
            for group in _group_by_capture(matches).values():
                if len(group) > 1:
                    groups.append(tuple(group))
                else:
                    dropped.append(DroppedMatch(group[0], DropReason.UNIQUE_CAPTURE))
            # Singletons are reported in pass order, not capture order.
            order = {id(m): i for i, m in enumerate(matches)}
            dropped.sort(key=lambda d: order[id(d.match)])
            return tuple(groups), tuple(dropped)


def synthesize_matches(
    rule_id: str,
    matches: Sequence[PatternMatch],
    *,
    mode: SynthesisMode,
    template: str,
    severity: Severity,
) -> RuleSynthesis:
    """Build the insights for one rule.

    Insight ids are ``"<rule_id>/<ordinal>"`` with ordinals counted from 0
    per rule, so ids are unique within a pass as long as rule ids are.

    Args:
        rule_id: Rule identity
        matches: The rule's matches in pass order
        mode: Synthesis mode
        template: Message template (see render_message)
        severity: Severity of every produced insight

    Returns:
        RuleSynthesis

    Raises:
        ValueError, IndexError, AttributeError: Template cannot be formatted
    """
    groups, dropped = group_matches(mode, matches)
    insights = []
    for ordinal, group in enumerate(groups):
        first = group[0]
        message = render_message(
            template,
            rule_id=rule_id,
            capture=first.capture,
            count=len(group),
            metadata=first.metadata,
        )
        insights.append(
            AnalysisInsight.from_matches(f"{rule_id}/{ordinal}", severity, message, group)
        )
    return RuleSynthesis(tuple(insights), dropped)
