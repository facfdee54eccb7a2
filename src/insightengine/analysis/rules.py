"""Pattern rules and the ordered rule registry.

A rule scans one TextDocument and yields PatternMatch objects attributed to
its own id; it then folds those matches into insights according to its
SynthesisMode. Built-in rules:

    RegexRule       one match per non-empty regex hit
    KeywordRule     whole-word literal terms
    LineLengthRule  the overflow of each line longer than a limit
    CallableRule    any function (TextDocument) -> Iterable[PatternMatch]

Rules are stateless between passes. The engine isolates anything a rule
raises, so rule code may fail without affecting other rules.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field

from insightengine.enums import Severity, SynthesisMode
from insightengine.text.location import SourceLocation
from insightengine.text.position import LineIndex

from .match import PatternMatch
from .synthesis import RuleSynthesis, synthesize_matches

__all__ = [
    "CallableRule",
    "KeywordRule",
    "LineLengthRule",
    "PatternRule",
    "RegexRule",
    "RuleSet",
    "TextDocument",
    "pattern_rule",
]

type ScanFunction = Callable[[TextDocument], Iterable[PatternMatch]]

_DEFAULT_MESSAGE = "{rule_id}: {capture}"


@dataclass(frozen=True, slots=True)
class TextDocument:
    """Immutable view of one document handed to every rule of a pass.

    Attributes:
        uri: Document identity
        text: Decoded document text
        index: Line index over ``text``
    """

    uri: str
    text: str
    index: LineIndex = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "index", LineIndex(self.text))

    def location(self, start_offset: int, end_offset: int) -> SourceLocation:
        """Location spanning two character offsets."""
        return SourceLocation(self.index.position(start_offset), self.index.position(end_offset))

    def line(self, line_number: int) -> str:
        """Text of a 0-based line without its terminator.

        Raises:
            ValueError: If the line does not exist
        """
        start, end = self.index.line_span(line_number)
        return self.text[start:end]

    def lines(self) -> Iterator[tuple[int, str]]:
        """Yield ``(line_number, text)`` for every line."""
        for line_number in range(self.index.line_count):
            yield line_number, self.line(line_number)


class PatternRule(ABC):
    """Base class for all pattern rules.

    Subclasses implement ``scan()``; ``synthesize()`` may be overridden for
    synthesis logic the SynthesisMode values do not cover.

    Args:
        rule_id: Unique, non-blank identity
        message: Message template (see ``synthesis.render_message``)
        severity: Severity of produced insights (member, number or name)
        synthesis: How matches are folded into insights

    Raises:
        ValueError: Blank rule_id, unknown severity or synthesis mode
    """

    __slots__ = ("_message", "_rule_id", "_severity", "_synthesis")

    def __init__(
        self,
        rule_id: str,
        *,
        message: str | None = None,
        severity: Severity | int | str = Severity.WARNING,
        synthesis: SynthesisMode | str = SynthesisMode.EACH,
    ) -> None:
        if not isinstance(rule_id, str) or not rule_id.strip():
            msg = f"Rule identity must be a non-blank string, got {rule_id!r}"
            raise ValueError(msg)
        resolved = Severity.parse(severity)
        if resolved is None:
            msg = f"Rule '{rule_id}' has unknown severity {severity!r}"
            raise ValueError(msg)
        self._rule_id = rule_id
        self._message = message if message is not None else _DEFAULT_MESSAGE
        self._severity = resolved
        self._synthesis = SynthesisMode(synthesis)

    @property
    def rule_id(self) -> str:
        """Rule identity."""
        return self._rule_id

    @property
    def message(self) -> str:
        """Message template."""
        return self._message

    @property
    def severity(self) -> Severity:
        """Severity of produced insights."""
        return self._severity

    @property
    def synthesis(self) -> SynthesisMode:
        """Synthesis mode."""
        return self._synthesis

    @abstractmethod
    def scan(self, document: TextDocument) -> Iterable[PatternMatch]:
        """Find every match of this rule in a document.

        Args:
            document: Document to scan

        Returns:
            Matches attributed to ``self.rule_id``, in any order
        """

    def synthesize(self, matches: Sequence[PatternMatch]) -> RuleSynthesis:
        """Fold this rule's ordered matches into insights.

        Args:
            matches: Matches in pass order

        Returns:
            RuleSynthesis covering every match
        """
        return synthesize_matches(
            self._rule_id,
            matches,
            mode=self._synthesis,
            template=self._message,
            severity=self._severity,
        )

    def match_at(
        self,
        document: TextDocument,
        start_offset: int,
        end_offset: int,
        *,
        metadata: Mapping[str, str] | None = None,
        confidence: float = 1.0,
    ) -> PatternMatch:
        """Build a match of this rule over a character span of a document."""
        return PatternMatch(
            rule_id=self._rule_id,
            location=document.location(start_offset, end_offset),
            capture=document.text[start_offset:end_offset],
            metadata=metadata or {},
            confidence=confidence,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(rule_id={self._rule_id!r}, "
            f"severity={self._severity.name}, synthesis={self._synthesis})"
        )


class RegexRule(PatternRule):
    """Rule matching a regular expression.

    Every non-empty hit of ``group`` becomes one match. Named groups that
    participated in the hit are copied into the match metadata.

    Example:
        >>> rule = RegexRule(
        ...     "todo-marker",
        ...     r"\\b(?P<tag>TODO|FIXME)\\b",
        ...     message="Unresolved {tag}",
        ... )
    """

    __slots__ = ("_confidence", "_group", "_pattern")

    def __init__(
        self,
        rule_id: str,
        pattern: str | re.Pattern[str],
        *,
        message: str | None = None,
        severity: Severity | int | str = Severity.WARNING,
        synthesis: SynthesisMode | str = SynthesisMode.EACH,
        group: int | str = 0,
        flags: int = 0,
        confidence: float = 1.0,
    ) -> None:
        super().__init__(rule_id, message=message, severity=severity, synthesis=synthesis)
        try:
            compiled = re.compile(pattern, flags) if isinstance(pattern, str) else pattern
        except re.error as e:
            msg = f"Rule '{rule_id}' has an invalid pattern: {e}"
            raise ValueError(msg) from e
        if isinstance(group, str):
            known = group in compiled.groupindex
        else:
            known = 0 <= group <= compiled.groups
        if not known:
            msg = f"Rule '{rule_id}' selects group {group!r} the pattern does not define"
            raise ValueError(msg)
        if not 0.0 <= confidence <= 1.0:
            msg = f"Rule '{rule_id}' confidence must be in [0, 1], got {confidence}"
            raise ValueError(msg)
        self._pattern = compiled
        self._group = group
        self._confidence = confidence

    @property
    def pattern(self) -> re.Pattern[str]:
        """Compiled pattern."""
        return self._pattern

    def scan(self, document: TextDocument) -> Iterator[PatternMatch]:
        for hit in self._pattern.finditer(document.text):
            start, end = hit.span(self._group)
            # -1: the group did not participate in this hit
            if start < 0 or start == end:
                continue
            metadata = {k: v for k, v in hit.groupdict().items() if v is not None}
            yield self.match_at(
                document, start, end, metadata=metadata, confidence=self._confidence
            )


class KeywordRule(RegexRule):
    """Rule matching whole-word occurrences of literal terms.

    The matched text is the capture; metadata ``keyword`` holds the term as
    configured (useful when matching case-insensitively).
    """

    __slots__ = ("_keywords",)

    def __init__(
        self,
        rule_id: str,
        keywords: Iterable[str],
        *,
        case_sensitive: bool = False,
        message: str | None = None,
        severity: Severity | int | str = Severity.WARNING,
        synthesis: SynthesisMode | str = SynthesisMode.EACH,
        confidence: float = 1.0,
    ) -> None:
        terms = tuple(dict.fromkeys(k for k in keywords if isinstance(k, str) and k))
        if not terms:
            msg = f"Rule '{rule_id}' needs at least one non-empty keyword"
            raise ValueError(msg)
        # Longest first so that "TODOS" wins over "TODO" at the same offset.
        ordered = sorted(terms, key=lambda term: (-len(term), term))
        alternation = "|".join(re.escape(term) for term in ordered)
        super().__init__(
            rule_id,
            rf"(?<!\w)(?:{alternation})(?!\w)",
            message=message,
            severity=severity,
            synthesis=synthesis,
            flags=0 if case_sensitive else re.IGNORECASE,
            confidence=confidence,
        )
        self._keywords = {term if case_sensitive else term.casefold(): term for term in terms}

    @property
    def keywords(self) -> tuple[str, ...]:
        """Configured terms in configuration order."""
        return tuple(self._keywords.values())

    def scan(self, document: TextDocument) -> Iterator[PatternMatch]:
        case_sensitive = not self._pattern.flags & re.IGNORECASE
        for match in super().scan(document):
            key = match.capture if case_sensitive else match.capture.casefold()
            keyword = self._keywords.get(key, match.capture)
            yield PatternMatch(
                rule_id=match.rule_id,
                location=match.location,
                capture=match.capture,
                metadata={"keyword": keyword},
                confidence=match.confidence,
            )


class LineLengthRule(PatternRule):
    """Rule flagging lines longer than a limit.

    Each long line produces one match covering the characters past the
    limit. Metadata carries ``length`` and ``limit``.
    """

    __slots__ = ("_max_length",)

    def __init__(
        self,
        rule_id: str,
        max_length: int,
        *,
        message: str | None = None,
        severity: Severity | int | str = Severity.INFORMATION,
        synthesis: SynthesisMode | str = SynthesisMode.EACH,
    ) -> None:
        if isinstance(max_length, bool) or not isinstance(max_length, int) or max_length <= 0:
            msg = f"Rule '{rule_id}' max_length must be a positive integer, got {max_length!r}"
            raise ValueError(msg)
        if message is None:
            message = "Line is {length} characters long (limit {limit})"
        super().__init__(rule_id, message=message, severity=severity, synthesis=synthesis)
        self._max_length = max_length

    @property
    def max_length(self) -> int:
        """Longest accepted line, in characters."""
        return self._max_length

    def scan(self, document: TextDocument) -> Iterator[PatternMatch]:
        for line_number, text in document.lines():
            length = len(text)
            if length <= self._max_length:
                continue
            start, _ = document.index.line_span(line_number)
            yield self.match_at(
                document,
                start + self._max_length,
                start + length,
                metadata={"length": str(length), "limit": str(self._max_length)},
            )


class CallableRule(PatternRule):
    """Rule delegating its scan to a function.

    The function receives the TextDocument and returns matches; it is
    responsible for attributing them to this rule's id (``match_at`` is the
    convenient way to do so).
    """

    __slots__ = ("_func",)

    def __init__(
        self,
        rule_id: str,
        func: ScanFunction,
        *,
        message: str | None = None,
        severity: Severity | int | str = Severity.WARNING,
        synthesis: SynthesisMode | str = SynthesisMode.EACH,
    ) -> None:
        if not callable(func):
            msg = f"Rule '{rule_id}' scan function must be callable, got {type(func).__name__}"
            raise TypeError(msg)
        super().__init__(rule_id, message=message, severity=severity, synthesis=synthesis)
        self._func = func

    def scan(self, document: TextDocument) -> Iterable[PatternMatch]:
        return self._func(document)


def pattern_rule(
    rule_id: str | None = None,
    *,
    message: str | None = None,
    severity: Severity | int | str = Severity.WARNING,
    synthesis: SynthesisMode | str = SynthesisMode.EACH,
) -> Callable[[ScanFunction], CallableRule]:
    """Decorator turning a scan function into a CallableRule.

    The rule id defaults to the function name with underscores replaced by
    hyphens.

    Example:
        >>> @pattern_rule(severity="hint")
        ... def trailing_space(document):
        ...     for line_number, text in document.lines():
        ...         ...
        >>> trailing_space.rule_id
        'trailing-space'
    """

    def decorator(func: ScanFunction) -> CallableRule:
        name = rule_id if rule_id is not None else func.__name__.replace("_", "-")
        return CallableRule(name, func, message=message, severity=severity, synthesis=synthesis)

    return decorator


class RuleSet:
    """Ordered registry of pattern rules.

    Declaration order is the order rules run in and the order their
    failures are reported in.

    Supports dict-like introspection:
        - __iter__: Iterate over rules in declaration order
        - __len__: Count registered rules
        - __contains__: Check a rule id or rule instance (supports 'in')

    Example:
        >>> rules = RuleSet([RegexRule("todo", r"TODO")])
        >>> "todo" in rules
        True
        >>> len(rules)
        1
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[PatternRule] = ()) -> None:
        self._rules: dict[str, PatternRule] = {}
        self.extend(rules)

    def add(self, rule: PatternRule) -> None:
        """Append a rule.

        Raises:
            TypeError: If rule is not a PatternRule
            ValueError: If a rule with the same id is registered
        """
        if not isinstance(rule, PatternRule):
            msg = f"Expected PatternRule, got {type(rule).__name__}"
            raise TypeError(msg)
        if rule.rule_id in self._rules:
            msg = f"Duplicate rule id '{rule.rule_id}'"
            raise ValueError(msg)
        self._rules[rule.rule_id] = rule

    def extend(self, rules: Iterable[PatternRule]) -> None:
        """Append several rules in order."""
        for rule in rules:
            self.add(rule)

    def remove(self, rule_id: str) -> PatternRule:
        """Unregister and return a rule.

        Raises:
            KeyError: If no rule has that id
        """
        return self._rules.pop(rule_id)

    def get(self, rule_id: str) -> PatternRule | None:
        """Rule by id, or None."""
        return self._rules.get(rule_id)

    @property
    def rule_ids(self) -> tuple[str, ...]:
        """Ids in declaration order."""
        return tuple(self._rules)

    def copy(self) -> RuleSet:
        """Shallow copy; rules are shared, registration is not."""
        new_set = RuleSet()
        new_set._rules = self._rules.copy()
        return new_set

    def __iter__(self) -> Iterator[PatternRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, PatternRule):
            return self._rules.get(item.rule_id) is item
        return item in self._rules

    def __repr__(self) -> str:
        return f"RuleSet(rules={len(self._rules)})"
