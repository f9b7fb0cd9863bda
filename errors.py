# Directory: errors.py
"""
Error types raised by the assignment engine.
"""
from typing import Iterable, List, Optional


class SantaError(Exception):
    """Base class for every failure of a solve call."""


class ConfigurationError(SantaError):
    """The roster or constraints are inconsistent; raised before any search."""

    def __init__(self, conflicts: Iterable[str]):
        self.conflicts: List[str] = list(conflicts)
        summary = "; ".join(self.conflicts) if self.conflicts else "invalid configuration"
        super().__init__(f"Invalid configuration: {summary}")


class InfeasibleError(SantaError):
    """
    No assignment satisfies every constraint.

    Attributes:
        category: "matching" when some people cannot be matched at all,
            "two-cycle" when only the no-exchange rule blocks every solution
        people: Over-constrained people, when they can be named
        reasons: Human-readable description of the rules involved
    """

    def __init__(
        self,
        category: str,
        people: Optional[Iterable[str]] = None,
        reasons: Optional[Iterable[str]] = None,
    ):
        self.category = category
        self.people: List[str] = list(people or [])
        self.reasons: List[str] = list(reasons or [])

        message = f"No secret santa solution exists ({category})"
        if self.people:
            message += f"; over-constrained: {', '.join(self.people)}"
        if self.reasons:
            message += f"; {'; '.join(self.reasons)}"
        super().__init__(message)


class SearchLimitError(SantaError):
    """The search gave up after `limit` steps without proving infeasibility."""

    def __init__(self, steps: int, limit: int):
        self.steps = steps
        self.limit = limit
        super().__init__(
            f"Search stopped after {steps} steps (limit {limit}) without finding a "
            f"solution; retry with a larger limit or fewer exclusions."
        )
