"""One-dimensional bin packing domain.

Solution: list of bins, each a list of item ids. Objective (lower is better):
``1 - mean((fill / capacity) ** 2)`` over non-empty bins, which rewards
fewer, fuller bins rather than just counting them.
"""

from __future__ import annotations

import random
from typing import List, Sequence, Tuple

from diverse_heuristics.domains.base import Operator, ProblemDomain

Bins = List[List[int]]

# (items, capacity, min size, max size, generator seed)
INSTANCE_SPECS: Tuple[Tuple[int, int, int, int, int], ...] = (
    (60, 150, 20, 100, 1201),
    (120, 150, 20, 100, 1202),
    (250, 150, 20, 100, 1203),
    (120, 1000, 100, 500, 1204),
    (200, 1000, 150, 700, 1205),
)


def generate_items(count: int, low: int, high: int, seed: int) -> List[int]:
    rng = random.Random(seed)
    return [rng.randint(low, high) for _ in range(count)]


class BinPacking(ProblemDomain):
    name = "BinPacking"

    def __init__(self, seed: int):
        super().__init__(seed)
        self.sizes: List[int] = []
        self.capacity = 0

    @property
    def number_of_instances(self) -> int:
        return len(INSTANCE_SPECS)

    def _load(self, index: int) -> None:
        count, capacity, low, high, instance_seed = INSTANCE_SPECS[index]
        self.sizes = generate_items(count, low, high, instance_seed)
        self.capacity = capacity

    def _initial_solution(self) -> Bins:
        order = list(range(len(self.sizes)))
        self.rng.shuffle(order)
        bins: Bins = []
        for item in order:
            self._first_fit(bins, item)
        return bins

    def _evaluate(self, solution: Bins) -> float:
        used = [b for b in solution if b]
        if not used:
            return 1.0
        ratio_sum = sum((self.fill(b) / self.capacity) ** 2 for b in used)
        return 1.0 - ratio_sum / len(used)

    def _copy(self, solution: Bins) -> Bins:
        return [list(b) for b in solution]

    def _operators(self) -> Sequence[Operator]:
        return (
            self._swap_items,
            self._move_from_emptiest,
            self._split_bin,
            self._repack_lightest,
            self._best_fit_merge,
        )

    # --- helpers ---
    def fill(self, bin_items: List[int]) -> int:
        return sum(self.sizes[item] for item in bin_items)

    def _first_fit(self, bins: Bins, item: int) -> None:
        size = self.sizes[item]
        for b in bins:
            if self.fill(b) + size <= self.capacity:
                b.append(item)
                return
        bins.append([item])

    def _best_fit(self, bins: Bins, item: int) -> None:
        size = self.sizes[item]
        best = None
        best_gap = None
        for b in bins:
            gap = self.capacity - self.fill(b) - size
            if gap >= 0 and (best_gap is None or gap < best_gap):
                best, best_gap = b, gap
        if best is None:
            bins.append([item])
        else:
            best.append(item)

    @staticmethod
    def _compact(bins: Bins) -> Bins:
        return [b for b in bins if b]

    # --- low-level heuristics ---
    def _swap_items(self, bins: Bins) -> Bins:
        if len(bins) < 2:
            return bins
        a, b = self.rng.sample(range(len(bins)), 2)
        i = self.rng.randrange(len(bins[a]))
        j = self.rng.randrange(len(bins[b]))
        item_a, item_b = bins[a][i], bins[b][j]
        diff = self.sizes[item_a] - self.sizes[item_b]
        if self.fill(bins[b]) + diff <= self.capacity and self.fill(bins[a]) - diff <= self.capacity:
            bins[a][i], bins[b][j] = item_b, item_a
        return bins

    def _move_from_emptiest(self, bins: Bins) -> Bins:
        if len(bins) < 2:
            return bins
        source = min(range(len(bins)), key=lambda idx: self.fill(bins[idx]))
        item = bins[source].pop(self.rng.randrange(len(bins[source])))
        targets = [idx for idx in range(len(bins)) if idx != source]
        self.rng.shuffle(targets)
        for idx in targets:
            if self.fill(bins[idx]) + self.sizes[item] <= self.capacity:
                bins[idx].append(item)
                return self._compact(bins)
        bins[source].append(item)
        return bins

    def _split_bin(self, bins: Bins) -> Bins:
        candidates = [idx for idx, b in enumerate(bins) if len(b) > 1]
        if not candidates:
            return bins
        idx = self.rng.choice(candidates)
        half = len(bins[idx]) // 2
        bins.append(bins[idx][half:])
        bins[idx] = bins[idx][:half]
        return bins

    def _repack_lightest(self, bins: Bins) -> Bins:
        if len(bins) < 2:
            return bins
        k = max(2, len(bins) // 10)
        order = sorted(range(len(bins)), key=lambda idx: self.fill(bins[idx]))
        removed = set(order[:k])
        items = [item for idx in removed for item in bins[idx]]
        kept = [b for idx, b in enumerate(bins) if idx not in removed]
        for item in sorted(items, key=lambda it: self.sizes[it], reverse=True):
            self._best_fit(kept, item)
        return kept

    def _best_fit_merge(self, bins: Bins) -> Bins:
        if len(bins) < 2:
            return bins
        source = min(range(len(bins)), key=lambda idx: self.fill(bins[idx]))
        items = bins[source]
        others = [b for idx, b in enumerate(bins) if idx != source]
        leftover: List[int] = []
        for item in sorted(items, key=lambda it: self.sizes[it], reverse=True):
            fitting = [b for b in others if self.fill(b) + self.sizes[item] <= self.capacity]
            if fitting:
                max(fitting, key=self.fill).append(item)
            else:
                leftover.append(item)
        if leftover:
            others.append(leftover)
        return others
