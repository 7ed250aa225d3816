"""Personnel scheduling (nurse rostering) domain.

Solution: ``roster[e][d]`` is the shift of employee ``e`` on day ``d``
(0 = off, 1 = early, 2 = late, 3 = night). The objective is a weighted sum
of soft-constraint violations; 0 means every constraint is met.
"""

from __future__ import annotations

import random
from typing import List, Sequence, Tuple

from diverse_heuristics.domains.base import Operator, ProblemDomain

Roster = List[List[int]]

OFF, EARLY, LATE, NIGHT = 0, 1, 2, 3
SHIFTS = (EARLY, LATE, NIGHT)

UNDER_COVER_WEIGHT = 10
OVER_COVER_WEIGHT = 3
FORBIDDEN_SEQUENCE_WEIGHT = 20
CONSECUTIVE_WEIGHT = 5
WORKLOAD_WEIGHT = 2
MAX_CONSECUTIVE_DAYS = 5

# (employees, days, generator seed)
INSTANCE_SPECS: Tuple[Tuple[int, int, int], ...] = (
    (8, 14, 3101),
    (12, 14, 3102),
    (12, 28, 3103),
    (16, 28, 3104),
    (20, 28, 3105),
)


def generate_demand(employees: int, days: int, seed: int) -> List[List[int]]:
    """demand[d][s] for s in 0..3 (index 0 unused); weekends need fewer staff."""
    rng = random.Random(seed)
    per_shift = max(1, employees // 5)
    demand = []
    for d in range(days):
        weekend = d % 7 in (5, 6)
        row = [0]
        for _ in SHIFTS:
            low = 1 if weekend else per_shift
            row.append(rng.randint(low, per_shift + (0 if weekend else 1)))
        demand.append(row)
    return demand


def forbidden(today: int, tomorrow: int) -> bool:
    """Too little rest between two consecutive shifts."""
    if today == LATE and tomorrow == EARLY:
        return True
    return today == NIGHT and tomorrow in (EARLY, LATE)


def working_streaks(row: List[int]) -> List[Tuple[int, int]]:
    """(start, length) of every run of working days."""
    streaks: List[Tuple[int, int]] = []
    start = None
    for d, shift in enumerate(row + [OFF]):
        if shift != OFF and start is None:
            start = d
        elif shift == OFF and start is not None:
            streaks.append((start, d - start))
            start = None
    return streaks


class PersonnelScheduling(ProblemDomain):
    name = "PersonnelScheduling"

    def __init__(self, seed: int):
        super().__init__(seed)
        self.employees = 0
        self.days = 0
        self.demand: List[List[int]] = []
        self.target_days = 0

    @property
    def number_of_instances(self) -> int:
        return len(INSTANCE_SPECS)

    def _load(self, index: int) -> None:
        employees, days, instance_seed = INSTANCE_SPECS[index]
        self.employees = employees
        self.days = days
        self.demand = generate_demand(employees, days, instance_seed)
        self.target_days = round(days * 5 / 7)

    def _initial_solution(self) -> Roster:
        return [
            [self.rng.choice((OFF, OFF) + SHIFTS) for _ in range(self.days)]
            for _ in range(self.employees)
        ]

    def _evaluate(self, solution: Roster) -> float:
        penalty = 0
        for d in range(self.days):
            cover = [0, 0, 0, 0]
            for e in range(self.employees):
                cover[solution[e][d]] += 1
            for s in SHIFTS:
                gap = self.demand[d][s] - cover[s]
                penalty += UNDER_COVER_WEIGHT * gap if gap > 0 else OVER_COVER_WEIGHT * -gap
        for row in solution:
            for d in range(self.days - 1):
                if forbidden(row[d], row[d + 1]):
                    penalty += FORBIDDEN_SEQUENCE_WEIGHT
            for _, length in working_streaks(row):
                if length > MAX_CONSECUTIVE_DAYS:
                    penalty += CONSECUTIVE_WEIGHT * (length - MAX_CONSECUTIVE_DAYS)
            worked = sum(1 for shift in row if shift != OFF)
            penalty += WORKLOAD_WEIGHT * abs(worked - self.target_days)
        return penalty

    def _copy(self, solution: Roster) -> Roster:
        return [list(row) for row in solution]

    def _operators(self) -> Sequence[Operator]:
        return (
            self._random_reassign,
            self._swap_employees,
            self._repair_coverage,
            self._swap_days,
            self._break_streak,
        )

    # --- low-level heuristics ---
    def _random_reassign(self, roster: Roster) -> Roster:
        e = self.rng.randrange(self.employees)
        d = self.rng.randrange(self.days)
        roster[e][d] = self.rng.choice((OFF,) + SHIFTS)
        return roster

    def _swap_employees(self, roster: Roster) -> Roster:
        if self.employees < 2:
            return roster
        d = self.rng.randrange(self.days)
        a, b = self.rng.sample(range(self.employees), 2)
        roster[a][d], roster[b][d] = roster[b][d], roster[a][d]
        return roster

    def _repair_coverage(self, roster: Roster) -> Roster:
        worst = None
        worst_gap = 0
        for d in range(self.days):
            for s in SHIFTS:
                gap = self.demand[d][s] - sum(1 for e in range(self.employees) if roster[e][d] == s)
                if gap != 0 and abs(gap) > abs(worst_gap):
                    worst, worst_gap = (d, s), gap
        if worst is None:
            return roster
        d, s = worst
        if worst_gap > 0:
            idle = [e for e in range(self.employees) if roster[e][d] == OFF]
            if idle:
                roster[self.rng.choice(idle)][d] = s
        else:
            assigned = [e for e in range(self.employees) if roster[e][d] == s]
            roster[self.rng.choice(assigned)][d] = OFF
        return roster

    def _swap_days(self, roster: Roster) -> Roster:
        if self.days < 2:
            return roster
        e = self.rng.randrange(self.employees)
        a, b = self.rng.sample(range(self.days), 2)
        roster[e][a], roster[e][b] = roster[e][b], roster[e][a]
        return roster

    def _break_streak(self, roster: Roster) -> Roster:
        longest = None
        for e, row in enumerate(roster):
            for start, length in working_streaks(row):
                if longest is None or length > longest[2]:
                    longest = (e, start, length)
        if longest is None:
            return roster
        e, start, length = longest
        roster[e][start + length // 2] = OFF
        return roster
