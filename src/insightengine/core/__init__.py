"""Core value types shared by every insightengine layer.

Python 3.13+.
"""

from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
