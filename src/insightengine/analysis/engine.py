"""Analysis engine: rules over a document, then matches into insights.

The engine runs in two phases that callers may also invoke separately:

    match()       every rule scans the document, in declaration order
    synthesize()  every rule folds its own matches into insights

A rule that raises, or emits something that is not a well-formed match of
its own, is isolated: its output is discarded, a RuleFailure is recorded and
logged, and the other rules carry on. Only a pass in which every rule failed
is an error (RULES_FAILED); anything less is a partial success.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from insightengine.constants import LOG_TRUNCATE_WARNING
from insightengine.core.result import Err, Ok, Result
from insightengine.diagnostics.errors import AnalysisDomainError, RuleFailure
from insightengine.diagnostics.templates import ErrorTemplate
from insightengine.enums import DropReason

from .config import EngineConfig
from .insight import AnalysisInsight
from .match import PatternMatch
from .rules import PatternRule, RuleSet, TextDocument
from .synthesis import DroppedMatch, RuleSynthesis

__all__ = [
    "AnalysisEngine",
    "AnalysisReport",
    "MatchPass",
    "SynthesisPass",
]

logger = logging.getLogger(__name__)

type RuleMatches = tuple[str, tuple[PatternMatch, ...]]


def _match_order(match: PatternMatch) -> tuple[object, object]:
    return match.location.start, match.location.end


@dataclass(frozen=True, slots=True)
class MatchPass:
    """Result of the match phase for one document.

    Attributes:
        document: The analysed document
        rule_matches: ``(rule_id, matches)`` for every rule that did not
            fail, in declaration order; matches sorted by location, then
            emission order
        failures: Rules that failed while scanning
        dropped: Matches cut by the per-rule match limit
        rule_count: Number of rules that ran
    """

    document: TextDocument
    rule_matches: tuple[RuleMatches, ...]
    failures: tuple[RuleFailure, ...] = ()
    dropped: tuple[DroppedMatch, ...] = ()
    rule_count: int = 0

    @property
    def document_uri(self) -> str:
        """Identity of the analysed document."""
        return self.document.uri

    @property
    def matches(self) -> tuple[PatternMatch, ...]:
        """Every kept match, rule by rule."""
        return tuple(m for _, matches in self.rule_matches for m in matches)

    def matches_for(self, rule_id: str) -> tuple[PatternMatch, ...]:
        """Kept matches of one rule (empty for unknown or failed rules)."""
        for candidate, matches in self.rule_matches:
            if candidate == rule_id:
                return matches
        return ()


@dataclass(frozen=True, slots=True)
class SynthesisPass:
    """Result of the synthesis phase.

    Attributes:
        insights: Insights in rule declaration order, then synthesis order
        dropped: Matches of successful rules that are evidence for no insight
        failures: Rules whose synthesis failed
    """

    insights: tuple[AnalysisInsight, ...] = ()
    dropped: tuple[DroppedMatch, ...] = ()
    failures: tuple[RuleFailure, ...] = ()


@dataclass(frozen=True, slots=True)
class AnalysisReport:
    """Outcome of a successful (possibly partial) analysis pass.

    Every match in ``matches`` is evidence for at least one insight or is
    listed in ``dropped``.

    Attributes:
        document_uri: Analysed document
        insights: Synthesized insights
        matches: Matches of the rules that succeeded
        failures: Isolated rule failures, in rule declaration order
        dropped: Matches that became evidence for no insight
        rule_count: Number of rules that ran
    """

    document_uri: str
    insights: tuple[AnalysisInsight, ...] = ()
    matches: tuple[PatternMatch, ...] = ()
    failures: tuple[RuleFailure, ...] = ()
    dropped: tuple[DroppedMatch, ...] = ()
    rule_count: int = 0

    @property
    def is_partial(self) -> bool:
        """True if at least one rule failed."""
        return bool(self.failures)

    @property
    def failed_rule_ids(self) -> tuple[str, ...]:
        """Ids of failed rules, in declaration order."""
        return tuple(dict.fromkeys(failure.rule_id for failure in self.failures))

    def dropped_for(self, reason: DropReason) -> tuple[DroppedMatch, ...]:
        """Dropped matches with one reason."""
        return tuple(d for d in self.dropped if d.reason is reason)


class AnalysisEngine:
    """Runs an ordered rule set over documents.

    The engine holds no per-document state; one instance may analyse any
    number of documents, from any number of threads.

    Args:
        rules: Rules in declaration order (a RuleSet is copied)
        config: Limits (defaults to ``EngineConfig()``)

    Raises:
        ValueError: If two rules share an id

    Example:
        >>> engine = AnalysisEngine([RegexRule("todo", r"TODO")])
        >>> result = engine.analyze("file:///a.txt", "x = 1  # TODO")
        >>> [insight.id for insight in result.unwrap().insights]
        ['todo/0']
    """

    __slots__ = ("_config", "_order", "_rules")

    def __init__(
        self,
        rules: RuleSet | Iterable[PatternRule] = (),
        *,
        config: EngineConfig | None = None,
    ) -> None:
        self._rules = rules.copy() if isinstance(rules, RuleSet) else RuleSet(rules)
        self._config = config if config is not None else EngineConfig()
        self._order = {rule_id: i for i, rule_id in enumerate(self._rules.rule_ids)}

    @property
    def rules(self) -> tuple[PatternRule, ...]:
        """Rules in declaration order."""
        return tuple(self._rules)

    @property
    def config(self) -> EngineConfig:
        """Engine limits."""
        return self._config

    def analyze(
        self, document_uri: str, content: str | bytes
    ) -> Result[AnalysisReport, AnalysisDomainError]:
        """Run both phases over a document.

        Args:
            document_uri: Document identity
            content: Document text, or UTF-8 bytes (a BOM is stripped)

        Returns:
            Ok(AnalysisReport), or Err(AnalysisDomainError) for undecodable or
            oversized content, or when every rule failed
        """
        match self.match(document_uri, content):
            case Err() as err:
                return err
            case Ok(value=match_pass):
                pass

        synthesis = self.synthesize(match_pass)
        failures = self._in_declaration_order(match_pass.failures + synthesis.failures)
        failed_ids = {failure.rule_id for failure in failures}

        if match_pass.rule_count and len(failed_ids) == match_pass.rule_count:
            logger.error(
                "All %d rule(s) failed for %s", match_pass.rule_count, document_uri
            )
            return Err(ErrorTemplate.rules_failed(document_uri, failures))

        report = AnalysisReport(
            document_uri=document_uri,
            insights=synthesis.insights,
            matches=tuple(
                m
                for rule_id, matches in match_pass.rule_matches
                if rule_id not in failed_ids
                for m in matches
            ),
            failures=failures,
            dropped=synthesis.dropped,
            rule_count=match_pass.rule_count,
        )
        logger.debug(
            "Analysed %s: %d rule(s), %d match(es), %d insight(s), %d dropped, %d failed",
            document_uri,
            report.rule_count,
            len(report.matches),
            len(report.insights),
            len(report.dropped),
            len(failed_ids),
        )
        return Ok(report)

    def match(
        self, document_uri: str, content: str | bytes
    ) -> Result[MatchPass, AnalysisDomainError]:
        """Match phase: run every rule's scan over the document.

        Args:
            document_uri: Document identity
            content: Document text, or UTF-8 bytes (a BOM is stripped)

        Returns:
            Ok(MatchPass), or Err(AnalysisDomainError) for undecodable or
            oversized content
        """
        match self._decode(document_uri, content):
            case Err() as err:
                return err
            case Ok(value=text):
                pass

        if len(text) > self._config.max_source_size:
            return Err(
                ErrorTemplate.source_too_large(
                    document_uri, len(text), self._config.max_source_size
                )
            )

        document = TextDocument(document_uri, text)
        limit = self._config.max_matches_per_rule
        rule_matches: list[RuleMatches] = []
        failures: list[RuleFailure] = []
        dropped: list[DroppedMatch] = []

        for rule in self._rules:
            match self._scan(rule, document):
                case Err(error=failure):
                    self._log_failure(document_uri, failure)
                    failures.append(failure)
                case Ok(value=matches):
                    if len(matches) > limit:
                        logger.debug(
                            "Rule %s produced %d matches in %s; keeping %d",
                            rule.rule_id,
                            len(matches),
                            document_uri,
                            limit,
                        )
                        dropped.extend(
                            DroppedMatch(m, DropReason.MATCH_LIMIT) for m in matches[limit:]
                        )
                    rule_matches.append((rule.rule_id, matches[:limit]))

        return Ok(
            MatchPass(
                document=document,
                rule_matches=tuple(rule_matches),
                failures=tuple(failures),
                dropped=tuple(dropped),
                rule_count=len(self._rules),
            )
        )

    def synthesize(self, match_pass: MatchPass) -> SynthesisPass:
        """Synthesis phase: fold each rule's matches into insights.

        Every match of a rule whose synthesis succeeds ends up as evidence or
        in ``dropped``; a rule whose synthesis raises, or loses matches, is
        isolated like a rule that failed to scan.

        Args:
            match_pass: Output of ``match()`` on this engine

        Returns:
            SynthesisPass

        Raises:
            ValueError: If match_pass contains a rule this engine does not have
        """
        insights: list[AnalysisInsight] = []
        dropped: list[DroppedMatch] = []
        failures: list[RuleFailure] = []

        for rule_id, matches in match_pass.rule_matches:
            rule = self._rules.get(rule_id)
            if rule is None:
                msg = f"Match pass contains rule '{rule_id}' unknown to this engine"
                raise ValueError(msg)
            match self._fold(rule, matches):
                case Err(error=failure):
                    self._log_failure(match_pass.document_uri, failure)
                    failures.append(failure)
                case Ok(value=outcome):
                    dropped.extend(d for d in match_pass.dropped if d.match.rule_id == rule_id)
                    insights.extend(outcome.insights)
                    dropped.extend(outcome.dropped)

        limit = self._config.max_insights
        if len(insights) > limit:
            kept, overflow = insights[:limit], insights[limit:]
            covered = {m for insight in kept for m in insight.source_matches}
            lost = dict.fromkeys(
                m for insight in overflow for m in insight.source_matches if m not in covered
            )
            logger.debug(
                "Pass for %s produced %d insights; keeping %d",
                match_pass.document_uri,
                len(insights),
                limit,
            )
            dropped.extend(DroppedMatch(m, DropReason.INSIGHT_LIMIT) for m in lost)
            insights = kept

        return SynthesisPass(tuple(insights), tuple(dropped), tuple(failures))

    @staticmethod
    def _decode(document_uri: str, content: str | bytes) -> Result[str, AnalysisDomainError]:
        if isinstance(content, str):
            return Ok(content)
        if isinstance(content, (bytes, bytearray, memoryview)):
            try:
                return Ok(bytes(content).decode("utf-8-sig"))
            except UnicodeDecodeError as e:
                return Err(ErrorTemplate.unreadable_input(document_uri, str(e)))
        reason = f"expected str or bytes, got {type(content).__name__}"
        return Err(ErrorTemplate.unreadable_input(document_uri, reason))

    @staticmethod
    def _scan(
        rule: PatternRule, document: TextDocument
    ) -> Result[tuple[PatternMatch, ...], RuleFailure]:
        try:
            emitted = list(rule.scan(document))
        except Exception as e:  # pylint: disable=broad-exception-caught
            return Err(ErrorTemplate.rule_raised(rule.rule_id, e, "match"))

        for match in emitted:
            if not isinstance(match, PatternMatch):
                return Err(ErrorTemplate.not_a_match(rule.rule_id, match))
            if match.rule_id != rule.rule_id:
                return Err(ErrorTemplate.foreign_match(rule.rule_id, match.rule_id))
            if not match.location.is_well_formed:
                return Err(ErrorTemplate.malformed_match(rule.rule_id, match.location))

        # sorted() is stable: equal locations keep emission order
        return Ok(tuple(sorted(emitted, key=_match_order)))

    @staticmethod
    def _fold(
        rule: PatternRule, matches: tuple[PatternMatch, ...]
    ) -> Result[RuleSynthesis, RuleFailure]:
        try:
            outcome = rule.synthesize(matches)
            accounted = {m for insight in outcome.insights for m in insight.source_matches}
            accounted.update(d.match for d in outcome.dropped)
        except Exception as e:  # pylint: disable=broad-exception-caught
            return Err(ErrorTemplate.rule_raised(rule.rule_id, e, "synthesis"))

        missing = sum(1 for m in matches if m not in accounted)
        if missing:
            return Err(ErrorTemplate.incomplete_synthesis(rule.rule_id, missing))
        return Ok(outcome)

    def _in_declaration_order(self, failures: tuple[RuleFailure, ...]) -> tuple[RuleFailure, ...]:
        return tuple(sorted(failures, key=lambda f: self._order.get(f.rule_id, len(self._order))))

    @staticmethod
    def _log_failure(document_uri: str, failure: RuleFailure) -> None:
        logger.warning(
            "Rule %s failed during %s for %s: %s: %s",
            failure.rule_id,
            failure.phase,
            document_uri,
            failure.error_type,
            failure.message[:LOG_TRUNCATE_WARNING],
        )
