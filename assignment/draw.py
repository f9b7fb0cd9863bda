# Directory: assignment/draw.py
"""
Draw one secret santa solution out of several independent ones.
"""
import logging
import random
from dataclasses import dataclass, field, replace
from typing import List, Optional

from assignment.backtracking import BacktrackingAssigner
from assignment.history import select_history_window
from config import AppConfig
from errors import SantaError
from models import ConstraintSet, Roster, Solution
from utils.logger import logger, setup_logger
from utils.validators import check_references, validate_constraints

PREVIOUS_DRAW = "previous draw"


@dataclass
class DrawResult:
    """
    The chosen draw and the independent draws it was picked from.

    `alternatives` is the number of independent draws found, which can be
    fewer than requested when the constraints run out of room. `seed` is the
    configured base seed (None when unseeded). `candidates` holds every found
    draw, the chosen one included.
    """

    solution: Solution
    alternatives: int
    seed: Optional[int] = None
    candidates: List[Solution] = field(default_factory=list, repr=False)


def draw_solution(
    roster: Roster,
    constraints: ConstraintSet,
    config: Optional[AppConfig] = None,
) -> DrawResult:
    """
    Find up to `config.num_solutions` draws sharing no pair, then pick one.

    Every found draw has all of its pairs forbidden before the next solve, so
    the candidates are pairwise independent. Picking among them at random keeps
    the organizer blind to the result even when the search itself is biased.

    Args:
        roster: People taking part in this run
        constraints: Constraints with the full history; the window from
            `config.history` is applied here
        config: Application configuration (defaults when None)

    Returns:
        DrawResult: The chosen draw and how many independent draws were found

    Raises:
        SantaError: If not even one draw could be found
    """
    config = config or AppConfig()
    setup_logger(level=getattr(logging, config.log_level.upper()))
    base_seed = config.search.seed
    seed_source = random.Random(base_seed)

    # Names are checked against the full history, not only the window
    check_references(roster, constraints)
    history = select_history_window(
        constraints.history,
        lookback_years=config.history.lookback_years,
        current_year=config.history.current_year,
    )
    normalized = validate_constraints(roster, replace(constraints, history=history))

    assigner = BacktrackingAssigner(
        max_steps=config.search.max_steps,
        most_constrained_first=config.search.most_constrained_first,
    )

    solutions: List[Solution] = []
    for i in range(max(1, config.num_solutions)):
        seed = (base_seed + i) if base_seed is not None else seed_source.randrange(1 << 30)
        try:
            solution = assigner.solve(normalized, roster, seed=seed)
        except SantaError as e:
            if not solutions:
                raise
            logger.debug(f"Stopped after {len(solutions)} independent draws: {e}")
            break
        solutions.append(solution)
        normalized = normalized.with_forbidden(solution.pairs, PREVIOUS_DRAW)

    logger.info(f"Found {len(solutions)} independent solutions. Choosing one.")
    chosen = seed_source.choice(solutions)
    return DrawResult(
        solution=chosen,
        alternatives=len(solutions),
        seed=base_seed,
        candidates=solutions,
    )
