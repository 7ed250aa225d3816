"""Permutation flow shop domain (minimise makespan)."""

from __future__ import annotations

from typing import List, Sequence

from diverse_heuristics.domains.base import Operator, ProblemDomain
from diverse_heuristics.domains.flowshop.instances import INSTANCE_SPECS, generate_taillard_instance
from diverse_heuristics.domains.flowshop.makespan import c_max
from diverse_heuristics.domains.flowshop.neighborhoods import (
    best_adjacent_swap,
    insert_job,
    non_overlapping_swaps,
    ruin_and_recreate,
    swap_jobs,
)


class FlowShop(ProblemDomain):
    """Solutions are job permutations; objective is Cmax."""

    name = "FlowShop"

    def __init__(self, seed: int):
        super().__init__(seed)
        self.processing_times: List[List[int]] = []

    @property
    def number_of_instances(self) -> int:
        return len(INSTANCE_SPECS)

    @property
    def jobs(self) -> int:
        return len(self.processing_times[0]) if self.processing_times else 0

    def _load(self, index: int) -> None:
        n, m, instance_seed = INSTANCE_SPECS[index]
        self.processing_times = generate_taillard_instance(n, m, instance_seed)

    def _initial_solution(self) -> List[int]:
        pi = list(range(self.jobs))
        self.rng.shuffle(pi)
        return pi

    def _evaluate(self, solution: List[int]) -> float:
        return c_max(solution, self.processing_times)

    def _copy(self, solution: List[int]) -> List[int]:
        return solution.copy()

    def _operators(self) -> Sequence[Operator]:
        return (
            self._random_swap,
            self._random_insertion,
            self._best_adjacent_swap,
            self._multi_adjacent_swap,
            self._ruin_and_recreate,
        )

    # --- low-level heuristics ---
    def _random_swap(self, pi: List[int]) -> List[int]:
        if len(pi) < 2:
            return pi
        i, j = self.rng.sample(range(len(pi)), 2)
        return swap_jobs(pi, i, j)

    def _random_insertion(self, pi: List[int]) -> List[int]:
        if len(pi) < 2:
            return pi
        source, target = self.rng.sample(range(len(pi)), 2)
        return insert_job(pi, source, target)

    def _best_adjacent_swap(self, pi: List[int]) -> List[int]:
        new_pi, _ = best_adjacent_swap(pi, self.processing_times)
        return new_pi

    def _multi_adjacent_swap(self, pi: List[int]) -> List[int]:
        return non_overlapping_swaps(pi, self.processing_times)

    def _ruin_and_recreate(self, pi: List[int]) -> List[int]:
        return ruin_and_recreate(pi, self.processing_times, max(2, len(pi) // 10), self.rng)
