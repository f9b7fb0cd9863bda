"""Fixtures and helpers for engine tests."""
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import pytest

from models import ConstraintSet, HistoryRecord, Pair, Person, Roster, Solution


def make_roster(names: Iterable[str]) -> Roster:
    return Roster(people=[Person(name=n, email=f"{n.lower()}@email.com") for n in names])


def make_pairs(edges: Sequence[Tuple[str, str]]) -> List[Pair]:
    return [Pair(g, r) for g, r in edges]


def make_solution(assignments: dict, seed: int | None = None) -> Solution:
    roster = make_roster(assignments.keys())
    return Solution(assignments=dict(assignments), people=roster.by_name(), seed=seed)


def assert_valid_draw(solution: Solution, roster: Roster, constraints: ConstraintSet) -> None:
    """Check every rule of a draw directly, independent of the validator."""
    names = set(roster.names())
    assignments = solution.assignments

    assert set(assignments) == names
    assert sorted(assignments.values()) == sorted(names)
    for giver, receiver in assignments.items():
        assert giver != receiver
        assert assignments[receiver] != giver

    for pair in constraints.whitelist:
        assert assignments[pair.giver] == pair.receiver
    for pair in constraints.blacklist:
        assert assignments[pair.giver] != pair.receiver
    for members in constraints.blacklist_sets:
        for giver in members:
            assert assignments[giver] not in set(members) - {giver}
    for record in constraints.history:
        if record.exclude_pairs:
            for pair in record.pairs:
                assert assignments[pair.giver] != pair.receiver


@pytest.fixture
def three_people() -> Roster:
    return make_roster(["John", "Sean", "Shane"])


@pytest.fixture
def sample_history() -> List[HistoryRecord]:
    return [
        HistoryRecord(
            year=2023,
            exclude_pairs=True,
            pairs=make_pairs([("John", "Shane"), ("Sean", "John"), ("Shane", "Sean")]),
        ),
        HistoryRecord(
            year=2024,
            exclude_pairs=False,
            pairs=make_pairs([("John", "Shane"), ("Shane", "Sean"), ("Sean", "John")]),
        ),
    ]
