"""Rate limiter interfaces.

The record service depends on this abstraction (not the concrete
implementation) so the storage of limiter state can be swapped later.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of an allowed consume operation.

    Attributes:
        limit: Max operations per window.
        remaining: Remaining operations in the current window.
        reset_at: UNIX epoch seconds (rounded up) when the current window resets.
    """

    limit: int
    remaining: int
    reset_at: int


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for a given key.

        Args:
            key: Client identity (e.g., IP address).
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult describing the remaining budget.

        Raises:
            RateLimitAppError: If the key has no budget left in this window.
        """
        raise NotImplementedError
