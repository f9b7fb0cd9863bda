# Directory: assignment/backtracking.py
"""
Randomized backtracking search for a secret santa draw.
"""
import random
from typing import Dict, List, Optional, Sequence, Set, Tuple

from assignment.interfaces import AssignmentModel
from errors import InfeasibleError, SearchLimitError
from models import ConstraintSet, NormalizedConstraints, Roster, Solution
from utils.logger import logger
from utils.validators import (
    check_feasibility,
    is_allowed,
    validate_constraints,
)


def _options(
    giver: str,
    assignment: Dict[str, str],
    used: Set[str],
    constraints: NormalizedConstraints,
) -> List[str]:
    return [
        r
        for r in constraints.names
        if r not in used and is_allowed(giver, r, assignment, constraints)
    ]


def _can_complete(
    remaining: Sequence[str],
    assignment: Dict[str, str],
    used: Set[str],
    constraints: NormalizedConstraints,
) -> bool:
    """Forward check: every open giver and every open receiver still has a partner."""
    open_receivers = [r for r in constraints.names if r not in used]
    reachable: Set[str] = set()

    for giver in remaining:
        options = [r for r in open_receivers if is_allowed(giver, r, assignment, constraints)]
        if not options:
            return False
        reachable.update(options)

    return len(reachable) == len(open_receivers)


def search_assignment(
    constraints: NormalizedConstraints,
    rng: random.Random,
    max_steps: Optional[int] = None,
    most_constrained_first: bool = True,
) -> Tuple[Optional[Dict[str, str]], int]:
    """
    Search for a draw satisfying every constraint.

    Forced pairs are fixed first. The remaining givers are shuffled and walked
    with an explicit stack; each level keeps the shuffled receivers it has not
    tried yet, so backtracking resumes exactly where that level left off.

    Args:
        constraints: Validated constraints
        rng: Random source used for giver order and candidate order
        max_steps: Maximum number of candidates to try (None for no limit)
        most_constrained_first: Visit givers with fewer options first,
            breaking ties by the shuffled order

    Returns:
        Tuple of the giver -> receiver mapping (None when the search space is
        exhausted, which proves there is no solution) and the steps used

    Raises:
        SearchLimitError: If `max_steps` is exceeded
    """
    assignment: Dict[str, str] = dict(constraints.forced)
    used: Set[str] = set(assignment.values())

    givers = [name for name in constraints.names if name not in assignment]
    rng.shuffle(givers)
    if most_constrained_first:
        givers.sort(key=lambda g: len(constraints.candidates(g)))

    pending: List[Optional[List[str]]] = [None] * len(givers)
    steps = 0
    depth = 0

    if not _can_complete(givers, assignment, used, constraints):
        return None, steps

    while depth < len(givers):
        giver = givers[depth]

        # Undo the previous choice at this level, if any
        previous = assignment.pop(giver, None)
        if previous is not None:
            used.discard(previous)

        if pending[depth] is None:
            options = _options(giver, assignment, used, constraints)
            rng.shuffle(options)
            pending[depth] = options

        options = pending[depth]
        advanced = False
        while options:
            receiver = options.pop()
            steps += 1
            if max_steps is not None and steps > max_steps:
                logger.warning(f"Search limit of {max_steps} steps reached.")
                raise SearchLimitError(steps - 1, max_steps)

            assignment[giver] = receiver
            used.add(receiver)
            if _can_complete(givers[depth + 1:], assignment, used, constraints):
                advanced = True
                break

            del assignment[giver]
            used.discard(receiver)

        if advanced:
            depth += 1
            continue

        pending[depth] = None
        if depth == 0:
            logger.debug(f"Search space exhausted after {steps} steps.")
            return None, steps
        depth -= 1

    return assignment, steps


class BacktrackingAssigner(AssignmentModel):
    """
    Backtracking secret santa assignment model.

    Each solve seeds its own random source, so the same seed always yields the
    same draw while different seeds spread the draws over all valid solutions.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        max_steps: Optional[int] = 100_000,
        most_constrained_first: bool = True,
    ):
        """
        Initialize the assigner.

        Args:
            seed: Random seed for reproducible draws (None for a fresh draw each time)
            max_steps: Search bound; None searches until solved or exhausted
            most_constrained_first: Visit the most constrained givers first
        """
        self.seed = seed
        self.max_steps = max_steps
        self.most_constrained_first = most_constrained_first

    def assign(self, roster: Roster, constraints: ConstraintSet) -> Solution:
        normalized = validate_constraints(roster, constraints)
        return self.solve(normalized, roster)

    def solve(
        self,
        constraints: NormalizedConstraints,
        roster: Roster,
        seed: Optional[int] = None,
    ) -> Solution:
        """
        Find a draw for already validated constraints.

        Args:
            constraints: Output of validate_constraints
            roster: People taking part, used to attach Person records
            seed: Overrides the assigner's seed for this call

        Returns:
            Solution: A valid draw

        Raises:
            InfeasibleError: If no draw exists
            SearchLimitError: If the search bound is exceeded
        """
        seed = self.seed if seed is None else seed
        rng = random.Random(seed)

        check_feasibility(constraints)

        assignments, steps = search_assignment(
            constraints,
            rng,
            max_steps=self.max_steps,
            most_constrained_first=self.most_constrained_first,
        )

        if assignments is None:
            # A perfect matching exists, so only the exchange rule is in the way
            logger.warning(
                f"No draw avoids two-person exchanges for {len(constraints.names)} people."
            )
            raise InfeasibleError(
                "two-cycle",
                reasons=[
                    "every assignment left by the other rules has two people "
                    "drawing each other"
                ],
            )

        solution = Solution(
            assignments={name: assignments[name] for name in constraints.names},
            people=roster.by_name(),
            seed=seed,
            steps=steps,
        )
        logger.info(f"Found a draw for {len(solution)} people in {steps} steps.")
        logger.debug(f"Draw: {solution}")
        return solution
