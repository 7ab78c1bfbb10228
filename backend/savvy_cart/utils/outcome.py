"""
Explicit result variant for external calls.

Every wrapper around the aggregator API or the LLM returns either
Ok(value) or Failed(reason) instead of raising, so callers branch on the
outcome and the fallback path is visible in the code.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful call carrying its value."""
    value: T

    @property
    def ok(self) -> bool:
        return True

    def value_or(self, default: T) -> T:
        return self.value


@dataclass(frozen=True)
class Failed:
    """Failed call with a human-readable reason and the original error, if any."""
    reason: str
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return False

    def value_or(self, default):
        return default


Outcome = Union[Ok[T], Failed]
