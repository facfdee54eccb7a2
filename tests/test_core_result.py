"""Tests for core/result.py: Ok/Err tagged values.

Python 3.13+.
"""

from __future__ import annotations

import dataclasses

import pytest
from hypothesis import given
from hypothesis import strategies as st

from insightengine.core import Err, Ok, is_err, is_ok


class TestOk:
    """Ok carries a value."""

    def test_unwrap_returns_value(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_ok_flag(self) -> None:
        assert Ok(None).ok is True

    def test_frozen(self) -> None:
        result = Ok("x")
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.value = "y"  # type: ignore[misc]

    def test_positional_pattern(self) -> None:
        match Ok([1, 2]):
            case Ok(value):
                assert value == [1, 2]
            case _:
                pytest.fail("Ok did not match")


class TestErr:
    """Err carries an error and refuses to unwrap."""

    def test_ok_flag(self) -> None:
        assert Err("boom").ok is False

    def test_unwrap_raises_with_error_text(self) -> None:
        with pytest.raises(ValueError, match="boom"):
            Err("boom").unwrap()

    def test_keyword_pattern(self) -> None:
        match Err("bad"):
            case Ok():
                pytest.fail("Err matched Ok")
            case Err(error=error):
                assert error == "bad"


class TestGuards:
    """is_ok / is_err."""

    @given(st.integers())
    def test_guards_are_exclusive(self, value: int) -> None:
        for result in (Ok(value), Err(value)):
            assert is_ok(result) != is_err(result)

    def test_equality_by_value(self) -> None:
        assert Ok(1) == Ok(1)
        assert Ok(1) != Err(1)
