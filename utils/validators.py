# Directory: utils/validators.py
"""
Validation utilities for rosters, constraints and finished draws.
"""
from collections import Counter
from typing import Dict, List, Mapping, Set

import networkx as nx
from networkx.algorithms import bipartite

from errors import ConfigurationError, InfeasibleError
from models import ConstraintSet, NormalizedConstraints, Pair, Roster, Solution
from utils.logger import logger

SELF = "self"
BLACKLIST = "blacklist"
HOUSEHOLD = "household"


def history_reason(year: int) -> str:
    return f"history {year}"


def _unknown_names(
    pairs: List[Pair], known: Set[str], label: str
) -> List[str]:
    conflicts = []
    for pair in pairs:
        for role, name in (("giver", pair.giver), ("receiver", pair.receiver)):
            if name not in known:
                conflicts.append(
                    f"{role.capitalize()} named '{name}' present in {label} "
                    f"but not found in people set"
                )
    return conflicts


def _reference_conflicts(roster: Roster, constraints: ConstraintSet) -> List[str]:
    conflicts: List[str] = []
    names = roster.names()

    if not names:
        conflicts.append("roster is empty")

    duplicates = sorted(n for n, count in Counter(names).items() if count > 1)
    for name in duplicates:
        conflicts.append(f"person '{name}' appears more than once in people set")

    known = set(names)
    conflicts += _unknown_names(constraints.whitelist, known, "whitelist")
    conflicts += _unknown_names(constraints.blacklist, known, "blacklist")
    for record in constraints.history:
        conflicts += _unknown_names(record.pairs, known, f"history {record.year}")

    for members in constraints.blacklist_sets:
        for name in members:
            if name not in known:
                conflicts.append(
                    f"Member named '{name}' present in blacklist set but not found "
                    f"in people set"
                )
        if len(set(members)) < 2:
            conflicts.append(f"blacklist set {list(members)} needs at least two people")

    return conflicts


def check_references(roster: Roster, constraints: ConstraintSet) -> None:
    """
    Check that the roster is usable and every referenced name is in it.

    History is checked in full, whether or not a record excludes its pairs
    and whatever window is applied later.

    Raises:
        ConfigurationError: If a name is unknown, duplicated or a set is too small
    """
    conflicts = _reference_conflicts(roster, constraints)
    if conflicts:
        for conflict in conflicts:
            logger.error(conflict)
        raise ConfigurationError(conflicts)


def validate_constraints(
    roster: Roster, constraints: ConstraintSet
) -> NormalizedConstraints:
    """
    Check a roster and its constraints and reduce them to forced/forbidden relations.

    Every conflict found is reported in a single ConfigurationError, so the
    organizer can fix the input in one pass. The function has no side effects.

    Args:
        roster: People taking part in this run
        constraints: Whitelist, blacklist, households and history to apply

    Returns:
        NormalizedConstraints: One forced mapping and one forbidden relation

    Raises:
        ConfigurationError: If the input is inconsistent
    """
    conflicts = _reference_conflicts(roster, constraints)
    names = roster.names()

    # Build the forbidden relation with the reason for every edge
    forbidden: Dict[Pair, Set[str]] = {}

    def forbid(pair: Pair, reason: str) -> None:
        forbidden.setdefault(pair, set()).add(reason)

    for name in names:
        forbid(Pair(name, name), SELF)

    for pair in constraints.blacklist:
        forbid(pair, BLACKLIST)

    for members in constraints.blacklist_sets:
        unique = list(dict.fromkeys(members))
        for i, a in enumerate(unique):
            for b in unique[i + 1:]:
                forbid(Pair(a, b), HOUSEHOLD)
                forbid(Pair(b, a), HOUSEHOLD)

    for record in constraints.history:
        if not record.exclude_pairs:
            continue
        for pair in record.pairs:
            forbid(pair, history_reason(record.year))

    # Whitelist consistency
    forced: Dict[str, str] = {}
    forced_receivers: Dict[str, str] = {}
    for pair in constraints.whitelist:
        if pair.is_self_pair():
            conflicts.append(f"whitelist pair {pair.giver} -> {pair.receiver} is a self-pair")
            continue

        reasons = forbidden.get(pair, set()) - {SELF}
        if BLACKLIST in reasons:
            conflicts.append(
                f"pair {pair.giver} -> {pair.receiver} is in both whitelist and blacklist"
            )
        for reason in sorted(reasons - {BLACKLIST}):
            conflicts.append(
                f"whitelist pair {pair.giver} -> {pair.receiver} is forbidden by {reason}"
            )

        if pair.giver in forced and forced[pair.giver] != pair.receiver:
            conflicts.append(f"'{pair.giver}' is whitelisted as giver more than once")
            continue
        if pair.receiver in forced_receivers and forced_receivers[pair.receiver] != pair.giver:
            conflicts.append(f"'{pair.receiver}' is whitelisted as receiver more than once")
            continue
        if forced.get(pair.receiver) == pair.giver:
            conflicts.append(
                f"whitelist pairs {pair.giver} -> {pair.receiver} and "
                f"{pair.receiver} -> {pair.giver} form a two-person exchange"
            )
            continue

        forced[pair.giver] = pair.receiver
        forced_receivers[pair.receiver] = pair.giver

    if conflicts:
        for conflict in conflicts:
            logger.error(conflict)
        raise ConfigurationError(conflicts)

    logger.debug(
        f"Validated {len(names)} people: {len(forced)} forced pairs, "
        f"{len(forbidden)} forbidden pairs."
    )

    return NormalizedConstraints(
        names=tuple(names),
        forced=forced,
        forbidden={pair: frozenset(r) for pair, r in forbidden.items()},
    )


def is_allowed(
    giver: str,
    receiver: str,
    assignment: Mapping[str, str],
    constraints: NormalizedConstraints,
) -> bool:
    """
    Check whether `giver -> receiver` may be added to a partial assignment.

    Receivers already taken are the caller's concern; everything else
    (self-pairs, forbidden edges, forced edges and two-person exchanges) is
    decided here.
    """
    if giver == receiver:
        return False
    if constraints.is_forbidden(giver, receiver):
        return False

    forced_receiver = constraints.forced.get(giver)
    if forced_receiver is not None and forced_receiver != receiver:
        return False
    forced_giver = constraints.forced_giver_of(receiver)
    if forced_giver is not None and forced_giver != giver:
        return False

    # No two-person exchanges
    return assignment.get(receiver) != giver


def _giver_node(name: str):
    return ("giver", name)


def _receiver_node(name: str):
    return ("receiver", name)


def _describe_reasons(constraints: NormalizedConstraints, name: str) -> str:
    reasons: Set[str] = set()
    for other in constraints.names:
        if other != name:
            reasons |= constraints.reasons(name, other)
            reasons |= constraints.reasons(other, name)
    listed = ", ".join(sorted(reasons)) if reasons else "no exclusions"
    return f"{name} is limited by {listed}"


def check_feasibility(constraints: NormalizedConstraints) -> None:
    """
    Prove infeasibility early with a bipartite perfect matching.

    Each giver is joined to every receiver it could get on its own. Without a
    perfect matching no draw can exist, whatever order the search tries.

    Raises:
        InfeasibleError: If no perfect matching exists
    """
    graph = nx.Graph()
    givers = [_giver_node(n) for n in constraints.names]
    graph.add_nodes_from(givers, bipartite=0)
    graph.add_nodes_from((_receiver_node(n) for n in constraints.names), bipartite=1)

    for giver in constraints.names:
        for receiver in constraints.candidates(giver):
            if is_allowed(giver, receiver, {}, constraints):
                graph.add_edge(_giver_node(giver), _receiver_node(receiver))

    no_receiver = [n for n in constraints.names if graph.degree(_giver_node(n)) == 0]
    no_giver = [n for n in constraints.names if graph.degree(_receiver_node(n)) == 0]

    if no_receiver or no_giver:
        people = list(dict.fromkeys(no_receiver + no_giver))
        reasons = [f"{n} has no allowed receiver" for n in no_receiver]
        reasons += [f"{n} has no allowed giver" for n in no_giver]
        reasons += [_describe_reasons(constraints, n) for n in people]
        logger.warning(f"Over-constrained people: {people}")
        raise InfeasibleError("matching", people=people, reasons=reasons)

    matching = bipartite.hopcroft_karp_matching(graph, top_nodes=givers)
    unmatched = [n for n in constraints.names if _giver_node(n) not in matching]

    if unmatched:
        reasons = [
            f"{len(unmatched)} of {len(constraints.names)} people cannot be given a "
            f"distinct receiver"
        ]
        reasons += [_describe_reasons(constraints, n) for n in unmatched]
        logger.warning(f"No perfect matching; unmatched givers: {unmatched}")
        raise InfeasibleError("matching", people=unmatched, reasons=reasons)


def validate_solution(
    solution: Solution,
    roster: Roster,
    constraints: NormalizedConstraints,
) -> bool:
    """
    Validate a finished draw against every rule.

    Checks:
    1. Every person gives exactly once and receives exactly once
    2. No one draws themselves and no two people draw each other
    3. Forced pairs are present and forbidden pairs are absent

    Args:
        solution: The draw to check
        roster: People taking part in this run
        constraints: Normalized constraints the draw must satisfy

    Returns:
        bool: True if the draw is valid, False otherwise
    """
    names = set(roster.names())
    assignments = solution.assignments

    if set(assignments.keys()) != names:
        logger.error(
            f"Givers {sorted(assignments.keys())} do not match people {sorted(names)}."
        )
        return False

    if sorted(assignments.values()) != sorted(names):
        logger.error(f"Receivers {sorted(assignments.values())} are not a permutation.")
        return False

    for giver, receiver in assignments.items():
        if giver == receiver:
            logger.error(f"{giver} is their own secret santa.")
            return False

        if assignments.get(receiver) == giver:
            logger.error(f"{giver} and {receiver} are each other's secret santa.")
            return False

        if constraints.is_forbidden(giver, receiver):
            reasons = ", ".join(sorted(constraints.reasons(giver, receiver)))
            logger.error(f"Pair {giver} -> {receiver} is forbidden by {reasons}.")
            return False

    for giver, receiver in constraints.forced.items():
        if assignments.get(giver) != receiver:
            logger.error(f"Whitelisted pair {giver} -> {receiver} is missing.")
            return False

    return True
