"""Hypothesis strategies for insightengine property-based testing.

Strategies are organized by domain:

- analysis: positions, locations, matches, insights and document texts

Usage:
    from tests.strategies import pattern_matches, well_formed_insights
    from tests.strategies.analysis import RULE_IDS
"""

from .analysis import (
    RULE_IDS,
    document_texts,
    locations,
    messages,
    pattern_matches,
    positions,
    well_formed_insights,
)

__all__ = [
    "RULE_IDS",
    "document_texts",
    "locations",
    "messages",
    "pattern_matches",
    "positions",
    "well_formed_insights",
]
