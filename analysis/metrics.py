# Directory: analysis/metrics.py
"""
Metrics for secret santa draws.
"""
import numpy as np
import networkx as nx
from typing import Dict, List
from models import Solution


def solution_cycles(solution: Solution) -> List[List[str]]:
    """Gift-giving cycles of a draw, each starting at its alphabetically first giver."""
    graph = nx.DiGraph()
    graph.add_edges_from(solution.assignments.items())

    cycles = []
    for cycle in nx.simple_cycles(graph):
        start = cycle.index(min(cycle))
        cycles.append(cycle[start:] + cycle[:start])
    return sorted(cycles)


def compute_solution_metrics(solution: Solution) -> Dict[str, float]:
    """
    Compute structural metrics for a draw.

    A single long cycle means gifts could be handed over in one chain; many
    short cycles split the group into separate circles.

    Args:
        solution: The draw to analyse

    Returns:
        Dict of metric names to metric values
    """
    lengths = [len(c) for c in solution_cycles(solution)]

    return {
        "people": float(len(solution)),
        "cycle_count": float(len(lengths)),
        "longest_cycle": float(max(lengths)) if lengths else 0.0,
        "shortest_cycle": float(min(lengths)) if lengths else 0.0,
        "mean_cycle_length": float(np.mean(lengths)) if lengths else 0.0,
        "search_steps": float(solution.steps),
    }


def solution_overlap(first: Solution, second: Solution) -> float:
    """Fraction of givers who got the same receiver in both draws."""
    givers = set(first.assignments) & set(second.assignments)
    if not givers:
        return 0.0
    same = sum(1 for g in givers if first.assignments[g] == second.assignments[g])
    return same / len(givers)
