"""Tagged success/failure values.

Every fallible operation in insightengine returns ``Ok(value)`` or
``Err(error)`` instead of raising across a component boundary. Both are
frozen dataclasses, so callers branch with structural pattern matching:

    match engine.analyze(uri, text):
        case Ok(report):
            ...
        case Err(error):
            ...

Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass
from typing import Never, TypeIs

__all__ = [
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome carrying a value."""

    value: T

    @property
    def ok(self) -> bool:
        """Always True; mirrors Err.ok for branch-free checks."""
        return True

    def unwrap(self) -> T:
        """Return the carried value."""
        return self.value


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying an error value."""

    error: E

    @property
    def ok(self) -> bool:
        """Always False."""
        return False

    def unwrap(self) -> Never:
        """Raise, because there is no value.

        Raises:
            ValueError: Always; the message is the carried error's string form
        """
        msg = f"unwrap() called on Err: {self.error}"
        raise ValueError(msg)


type Result[T, E] = Ok[T] | Err[E]


def is_ok[T, E](result: Result[T, E]) -> TypeIs[Ok[T]]:
    """Type guard: result is an Ok."""
    return isinstance(result, Ok)


def is_err[T, E](result: Result[T, E]) -> TypeIs[Err[E]]:
    """Type guard: result is an Err."""
    return isinstance(result, Err)
