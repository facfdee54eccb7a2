"""Analysis pipeline: rules, matches, synthesis and the engine running them.

Python 3.13+.
"""

from .config import EngineConfig
from .engine import AnalysisEngine, AnalysisReport, MatchPass, SynthesisPass
from .insight import AnalysisInsight
from .loading import RuleSetLoader, rule_from_mapping, rules_from_mapping
from .match import PatternMatch
from .rules import (
    CallableRule,
    KeywordRule,
    LineLengthRule,
    PatternRule,
    RegexRule,
    RuleSet,
    TextDocument,
    pattern_rule,
)
from .synthesis import DroppedMatch, RuleSynthesis, render_message

__all__ = [
    "AnalysisEngine",
    "AnalysisInsight",
    "AnalysisReport",
    "CallableRule",
    "DroppedMatch",
    "EngineConfig",
    "KeywordRule",
    "LineLengthRule",
    "MatchPass",
    "PatternMatch",
    "PatternRule",
    "RegexRule",
    "RuleSet",
    "RuleSetLoader",
    "RuleSynthesis",
    "SynthesisPass",
    "TextDocument",
    "pattern_rule",
    "render_message",
    "rule_from_mapping",
    "rules_from_mapping",
]
