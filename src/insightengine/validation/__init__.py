"""Insight validation.

Python 3.13+.
"""

from .insights import InsightValidator, validate_insights

__all__ = [
    "InsightValidator",
    "validate_insights",
]
