import itertools
import logging

import pytest

from assignment.draw import draw_solution
from config import AppConfig, HistoryConfig, SearchConfig
from conftest import assert_valid_draw, make_pairs, make_roster
from errors import ConfigurationError, InfeasibleError
from models import ConstraintSet, HistoryRecord, load_input
from utils.generators import sample_input
from utils.logger import setup_logger


def _config(seed=11, num_solutions=3, lookback_years=2, current_year=None) -> AppConfig:
    return AppConfig(
        search=SearchConfig(seed=seed),
        history=HistoryConfig(lookback_years=lookback_years, current_year=current_year),
        num_solutions=num_solutions,
    )


def test_draw_candidates_share_no_pair() -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee", "Eve", "Fay"])
    constraints = ConstraintSet(blacklist_sets=[["Ann", "Bob"]])

    result = draw_solution(roster, constraints, _config())

    assert 1 <= result.alternatives <= 3
    assert len(result.candidates) == result.alternatives
    assert result.solution in result.candidates
    for first, second in itertools.combinations(result.candidates, 2):
        assert not set(first.pairs) & set(second.pairs)
    for candidate in result.candidates:
        assert_valid_draw(candidate, roster, constraints)


def test_draw_is_reproducible_with_seed() -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee", "Eve", "Fay", "Gus"])

    first = draw_solution(roster, ConstraintSet(), _config(seed=3, num_solutions=4))
    second = draw_solution(roster, ConstraintSet(), _config(seed=3, num_solutions=4))

    assert first.solution.assignments == second.solution.assignments
    assert first.alternatives == second.alternatives


def test_draw_keeps_whitelisted_pairs_in_every_candidate() -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee", "Eve", "Fay"])
    constraints = ConstraintSet(whitelist=make_pairs([("Ann", "Dee")]))

    result = draw_solution(roster, constraints, _config(num_solutions=5))

    for candidate in result.candidates:
        assert candidate.assignments["Ann"] == "Dee"


def test_draw_applies_history_window() -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee"])
    constraints = ConstraintSet(
        history=[
            HistoryRecord(2020, True, make_pairs([("Ann", "Bob"), ("Ann", "Cid"), ("Ann", "Dee")])),
        ]
    )

    result = draw_solution(
        roster, constraints, _config(num_solutions=1, lookback_years=2, current_year=2025)
    )
    assert_valid_draw(result.solution, roster, ConstraintSet())

    with pytest.raises(InfeasibleError):
        draw_solution(roster, constraints, _config(num_solutions=1, lookback_years=None))


def test_draw_raises_when_nothing_is_found() -> None:
    with pytest.raises(InfeasibleError):
        draw_solution(make_roster(["Ann", "Bob"]), ConstraintSet(), _config())

    roster, constraints = load_input(sample_input())
    with pytest.raises(ConfigurationError):
        draw_solution(roster, constraints, _config())


def test_draw_with_default_config(three_people) -> None:
    result = draw_solution(three_people, ConstraintSet())

    # Only the two 3-cycles exist and they share no pair
    assert result.alternatives == 2


def test_draw_rejects_unknown_name_in_non_excluding_record() -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee"])
    constraints = ConstraintSet(
        history=[HistoryRecord(2024, False, make_pairs([("Ghost", "Ann")]))]
    )

    with pytest.raises(ConfigurationError, match="Ghost"):
        draw_solution(roster, constraints, AppConfig(search=SearchConfig(seed=1), num_solutions=2))


def test_draw_rejects_unknown_name_outside_history_window() -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee"])
    constraints = ConstraintSet(
        history=[HistoryRecord(2015, True, make_pairs([("Ann", "Ghost")]))]
    )

    with pytest.raises(ConfigurationError, match="history 2015"):
        draw_solution(
            roster, constraints, _config(num_solutions=2, lookback_years=2, current_year=2025)
        )


def test_draw_applies_configured_log_level() -> None:
    config = _config(num_solutions=1)
    config.log_level = "DEBUG"

    try:
        draw_solution(make_roster(["Ann", "Bob", "Cid"]), ConstraintSet(), config)
        santa_logger = logging.getLogger("santa")
        assert santa_logger.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in santa_logger.handlers)
    finally:
        setup_logger(level=logging.INFO)
