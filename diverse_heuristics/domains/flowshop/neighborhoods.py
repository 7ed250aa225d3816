"""Permutation moves used as flow shop low-level heuristics.

All functions return a new permutation and leave the input untouched.
"""

import random
from typing import List, Tuple

from diverse_heuristics.domains.flowshop.makespan import apply_swaps, best_insertion, compute_deltas


def swap_jobs(pi: List[int], i: int, j: int) -> List[int]:
    """Return a new permutation with elements at positions i and j swapped."""
    neighbor = pi.copy()
    neighbor[i], neighbor[j] = neighbor[j], neighbor[i]
    return neighbor


def insert_job(pi: List[int], source: int, target: int) -> List[int]:
    """Remove the job at ``source`` and reinsert it at ``target``."""
    neighbor = pi.copy()
    job = neighbor.pop(source)
    neighbor.insert(target, job)
    return neighbor


def best_adjacent_swap(pi: List[int], processing_times: List[List[int]]) -> Tuple[List[int], int]:
    """Apply the adjacent swap with the lowest Cmax delta if it improves.

    Returns:
        (new_pi, delta); delta is 0 and the permutation unchanged when no swap improves.
    """
    deltas = compute_deltas(pi, processing_times)
    if not deltas:
        return pi.copy(), 0
    j = min(range(len(deltas)), key=lambda idx: deltas[idx])
    if deltas[j] >= 0:
        return pi.copy(), 0
    return swap_jobs(pi, j, j + 1), deltas[j]


def non_overlapping_swaps(pi: List[int], processing_times: List[List[int]]) -> List[int]:
    """Composite move of several non-overlapping adjacent swaps chosen by DP.

    The set minimises the sum of independent swap deltas. If no set has a
    negative sum, the single swap with the smallest delta is applied instead.
    """
    deltas = compute_deltas(pi, processing_times)
    if not deltas:
        return pi.copy()

    L = len(deltas)
    # dp[pos] = best total delta using swaps at positions >= pos
    dp = [0] * (L + 2)
    take = [False] * L
    for pos in range(L - 1, -1, -1):
        take_val = deltas[pos] + dp[pos + 2]
        if take_val < dp[pos + 1]:
            dp[pos] = take_val
            take[pos] = True
        else:
            dp[pos] = dp[pos + 1]

    chosen: List[int] = []
    pos = 0
    while pos < L:
        if take[pos]:
            chosen.append(pos)
            pos += 2
        else:
            pos += 1

    if not chosen:
        chosen = [min(range(L), key=lambda idx: deltas[idx])]
    return apply_swaps(pi, chosen)


def ruin_and_recreate(
    pi: List[int],
    processing_times: List[List[int]],
    removed: int,
    rng: random.Random,
) -> List[int]:
    """Remove ``removed`` random jobs and reinsert each at its best position (NEH step)."""
    if len(pi) < 2 or removed < 1:
        return pi.copy()
    removed = min(removed, len(pi) - 1)
    positions = set(rng.sample(range(len(pi)), removed))
    kept = [job for idx, job in enumerate(pi) if idx not in positions]
    dropped = [pi[idx] for idx in sorted(positions)]
    rng.shuffle(dropped)
    for job in dropped:
        position, _ = best_insertion(kept, job, processing_times)
        kept.insert(position, job)
    return kept
