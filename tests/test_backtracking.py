import random

import pytest

from assignment.backtracking import BacktrackingAssigner, search_assignment
from conftest import assert_valid_draw, make_pairs, make_roster
from errors import ConfigurationError, InfeasibleError, SearchLimitError
from models import ConstraintSet, HistoryRecord, load_input
from utils.generators import DataGenerator, sample_input
from utils.validators import validate_constraints, validate_solution


def test_sample_input_fails_before_search() -> None:
    roster, constraints = load_input(sample_input())
    with pytest.raises(ConfigurationError):
        BacktrackingAssigner(seed=1).assign(roster, constraints)


def test_three_people_with_household_has_no_draw(sample_history) -> None:
    # Every exchange-free draw of three people is a 3-cycle touching John and Sean.
    roster = make_roster(["John", "Sean", "Shane"])
    constraints = ConstraintSet(
        blacklist_sets=[["John", "Sean"]],
        history=[r for r in sample_history if not r.exclude_pairs],
    )

    with pytest.raises(InfeasibleError) as excinfo:
        BacktrackingAssigner(seed=3).assign(roster, constraints)
    assert excinfo.value.category == "matching"


def test_household_draw_with_a_fourth_person(sample_history) -> None:
    roster = make_roster(["John", "Sean", "Shane", "Mary"])
    constraints = ConstraintSet(
        blacklist_sets=[["John", "Sean"]],
        history=[r for r in sample_history if not r.exclude_pairs],
    )
    normalized = validate_constraints(roster, constraints)

    for seed in range(10):
        solution = BacktrackingAssigner(seed=seed).assign(roster, constraints)
        assert_valid_draw(solution, roster, constraints)
        assert validate_solution(solution, roster, normalized)


def test_three_people_without_rules_form_a_cycle(three_people) -> None:
    solution = BacktrackingAssigner(seed=0).assign(three_people, ConstraintSet())

    assert_valid_draw(solution, three_people, ConstraintSet())
    assert len(set(solution.assignments.values())) == 3


def test_two_people_can_only_exchange() -> None:
    roster = make_roster(["Ann", "Bob"])

    with pytest.raises(InfeasibleError) as excinfo:
        BacktrackingAssigner(seed=0, max_steps=None).assign(roster, ConstraintSet())

    assert excinfo.value.category == "two-cycle"


def test_history_excluding_every_receiver_names_the_person() -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee", "Eve"])
    constraints = ConstraintSet(
        history=[
            HistoryRecord(2023, True, make_pairs([("Bob", "Ann"), ("Bob", "Cid")])),
            HistoryRecord(2024, True, make_pairs([("Bob", "Dee"), ("Bob", "Eve")])),
        ]
    )

    with pytest.raises(InfeasibleError) as excinfo:
        BacktrackingAssigner(seed=0).assign(roster, constraints)

    assert excinfo.value.people == ["Bob"]
    assert "history 2023" in str(excinfo.value)
    assert "history 2024" in str(excinfo.value)


def test_same_seed_gives_same_draw() -> None:
    roster, constraints = DataGenerator(seed=5).generate_scenario(
        8, num_households=2, num_years=1
    )

    first = BacktrackingAssigner(seed=99).assign(roster, constraints)
    second = BacktrackingAssigner(seed=99).assign(roster, constraints)

    assert first.assignments == second.assignments
    assert first.seed == 99


def test_different_seeds_reach_different_draws() -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee", "Eve", "Fay"])

    draws = {
        tuple(sorted(BacktrackingAssigner(seed=s).assign(roster, ConstraintSet()).assignments.items()))
        for s in range(20)
    }
    assert len(draws) > 1


@pytest.mark.parametrize("seed", range(5))
def test_generated_scenarios_respect_every_rule(seed) -> None:
    generator = DataGenerator(seed=seed)
    roster, constraints = generator.generate_scenario(
        10, num_households=2, num_years=2, num_blacklisted=3
    )
    normalized = validate_constraints(roster, constraints)

    solution = BacktrackingAssigner(seed=seed).assign(roster, constraints)

    assert_valid_draw(solution, roster, constraints)
    assert validate_solution(solution, roster, normalized)


@pytest.mark.parametrize("most_constrained_first", [True, False])
def test_whitelisted_pairs_are_always_drawn(most_constrained_first) -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee", "Eve"])
    constraints = ConstraintSet(
        whitelist=make_pairs([("Ann", "Cid"), ("Dee", "Bob")]),
        blacklist=make_pairs([("Cid", "Eve")]),
    )

    for seed in range(10):
        solution = BacktrackingAssigner(
            seed=seed, most_constrained_first=most_constrained_first
        ).assign(roster, constraints)
        assert_valid_draw(solution, roster, constraints)


def test_search_limit_is_distinct_from_infeasibility() -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee", "Eve"])

    with pytest.raises(SearchLimitError) as excinfo:
        BacktrackingAssigner(seed=0, max_steps=1).assign(roster, ConstraintSet())

    assert excinfo.value.limit == 1
    assert excinfo.value.steps == 1


def test_search_assignment_uses_given_random_source() -> None:
    roster = make_roster(["Ann", "Bob", "Cid", "Dee", "Eve", "Fay"])
    normalized = validate_constraints(
        roster, ConstraintSet(whitelist=make_pairs([("Fay", "Ann")]))
    )

    first, steps = search_assignment(normalized, random.Random(7))
    second, _ = search_assignment(normalized, random.Random(7))

    assert first == second
    assert first["Fay"] == "Ann"
    assert steps >= len(roster) - 1


def test_search_assignment_reports_exhaustion() -> None:
    normalized = validate_constraints(make_roster(["Ann", "Bob"]), ConstraintSet())
    assignment, _ = search_assignment(normalized, random.Random(0))
    assert assignment is None


def test_solution_hands_people_to_the_notifier(three_people) -> None:
    solution = BacktrackingAssigner(seed=4).assign(three_people, ConstraintSet())

    deliveries = solution.deliveries()
    assert [g.name for g, _ in deliveries] == ["John", "Sean", "Shane"]
    for giver, receiver in deliveries:
        assert giver.email == f"{giver.name.lower()}@email.com"
        assert solution.receiver_of(giver.name) == receiver

    record = solution.to_history(2025)
    assert record.year == 2025
    assert record.exclude_pairs
    assert record.pairs == solution.pairs
