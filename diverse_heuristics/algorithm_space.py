"""Enumeration of the algorithm space (all heuristic triples for a given count)."""

from typing import List

from diverse_heuristics.models import Algorithm


def effective_heuristic_count(domain_heuristic_count: int, exclude_top_heuristic: bool = True) -> int:
    """Number of heuristics that take part in enumeration.

    With ``exclude_top_heuristic`` the highest-indexed heuristic of the domain
    is left out of every combination.
    """
    if domain_heuristic_count < 0:
        raise ValueError(f"heuristic count must be non-negative, got {domain_heuristic_count}")
    if exclude_top_heuristic:
        return max(domain_heuristic_count - 1, 0)
    return domain_heuristic_count


def enumerate_algorithms(heuristic_count: int) -> List[Algorithm]:
    """Return every triple over ``[0, heuristic_count)`` in lexicographic order.

    Args:
        heuristic_count: H, number of heuristics to combine.

    Returns:
        List of H**3 algorithms; ``algorithms[k].index == k``.
    """
    if heuristic_count < 0:
        raise ValueError(f"heuristic count must be non-negative, got {heuristic_count}")
    algorithms: List[Algorithm] = []
    for i in range(heuristic_count):
        for j in range(heuristic_count):
            for k in range(heuristic_count):
                algorithms.append(Algorithm(index=len(algorithms), heuristics=(i, j, k)))
    return algorithms
