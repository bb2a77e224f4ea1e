"""Result: typed success/failure outcome returned by manager mutations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pulsestore.errors import PulsestoreError


@dataclass(frozen=True, slots=True)
class Result:
    """Outcome of one manager mutation.

    A successful result carries no error. A failed result carries the typed
    error that aborted the mutation; the in-memory collection is left as it
    was before the call.
    """

    error: PulsestoreError | None = None

    @classmethod
    def success(cls) -> Result:
        """Build a successful result."""
        return cls()

    @classmethod
    def failure(cls, error: PulsestoreError) -> Result:
        """Build a failed result carrying ``error``."""
        return cls(error=error)

    @property
    def ok(self) -> bool:
        """Return whether the mutation succeeded."""
        return self.error is None

    def __bool__(self) -> bool:
        """Truthiness follows ``ok``."""
        return self.error is None

    @property
    def message(self) -> str | None:
        """Return the user-facing failure message, or ``None`` on success."""
        return None if self.error is None else str(self.error)

    def unwrap(self) -> None:
        """Raise the carried error, if any."""
        if self.error is not None:
            raise self.error
