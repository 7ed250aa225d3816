"""Boolean satisfiability domain (MAX-SAT objective on random 3-SAT).

Clauses are tuples of non-zero ints in DIMACS convention: ``v`` means
variable ``v - 1`` is true, ``-v`` means it is false. The objective is the
number of unsatisfied clauses.
"""

from __future__ import annotations

import random
from typing import Dict, List, Sequence, Tuple

from diverse_heuristics.domains.base import Operator, ProblemDomain

Clause = Tuple[int, ...]
Assignment = List[bool]

# (variables, clauses, generator seed); clause/variable ratio near the 4.26 phase transition
INSTANCE_SPECS: Tuple[Tuple[int, int, int], ...] = (
    (50, 213, 2101),
    (75, 320, 2102),
    (100, 426, 2103),
    (125, 533, 2104),
    (150, 639, 2105),
)

WALK_NOISE = 0.5


def generate_3sat(variables: int, clauses: int, seed: int) -> List[Clause]:
    rng = random.Random(seed)
    formula: List[Clause] = []
    for _ in range(clauses):
        chosen = rng.sample(range(1, variables + 1), 3)
        formula.append(tuple(v if rng.random() < 0.5 else -v for v in chosen))
    return formula


def literal_true(literal: int, assignment: Assignment) -> bool:
    value = assignment[abs(literal) - 1]
    return value if literal > 0 else not value


class SAT(ProblemDomain):
    name = "SAT"

    def __init__(self, seed: int):
        super().__init__(seed)
        self.variables = 0
        self.clauses: List[Clause] = []
        self._occurrences: Dict[int, List[int]] = {}

    @property
    def number_of_instances(self) -> int:
        return len(INSTANCE_SPECS)

    def _load(self, index: int) -> None:
        variables, clauses, instance_seed = INSTANCE_SPECS[index]
        self.variables = variables
        self.clauses = generate_3sat(variables, clauses, instance_seed)
        self._occurrences = {v: [] for v in range(variables)}
        for c_idx, clause in enumerate(self.clauses):
            for literal in clause:
                self._occurrences[abs(literal) - 1].append(c_idx)

    def _initial_solution(self) -> Assignment:
        return [self.rng.random() < 0.5 for _ in range(self.variables)]

    def _evaluate(self, solution: Assignment) -> float:
        return len(self.unsatisfied(solution))

    def _copy(self, solution: Assignment) -> Assignment:
        return list(solution)

    def _operators(self) -> Sequence[Operator]:
        return (
            self._random_flip,
            self._gsat_flip,
            self._walksat_flip,
            self._multi_flip,
            self._flip_broken_clause,
        )

    # --- helpers ---
    def unsatisfied(self, assignment: Assignment) -> List[int]:
        return [
            idx
            for idx, clause in enumerate(self.clauses)
            if not any(literal_true(lit, assignment) for lit in clause)
        ]

    def _true_counts(self, assignment: Assignment) -> List[int]:
        return [sum(literal_true(lit, assignment) for lit in clause) for clause in self.clauses]

    def _break_make(self, var: int, assignment: Assignment, counts: List[int]) -> Tuple[int, int]:
        """Clauses broken / made by flipping ``var``."""
        broken = made = 0
        for c_idx in self._occurrences[var]:
            for lit in self.clauses[c_idx]:
                if abs(lit) - 1 != var:
                    continue
                if literal_true(lit, assignment):
                    if counts[c_idx] == 1:
                        broken += 1
                elif counts[c_idx] == 0:
                    made += 1
        return broken, made

    # --- low-level heuristics ---
    def _random_flip(self, assignment: Assignment) -> Assignment:
        var = self.rng.randrange(self.variables)
        assignment[var] = not assignment[var]
        return assignment

    def _gsat_flip(self, assignment: Assignment) -> Assignment:
        counts = self._true_counts(assignment)
        best_gain = None
        best_vars: List[int] = []
        for var in range(self.variables):
            broken, made = self._break_make(var, assignment, counts)
            gain = made - broken
            if best_gain is None or gain > best_gain:
                best_gain, best_vars = gain, [var]
            elif gain == best_gain:
                best_vars.append(var)
        var = self.rng.choice(best_vars)
        assignment[var] = not assignment[var]
        return assignment

    def _walksat_flip(self, assignment: Assignment) -> Assignment:
        broken_clauses = self.unsatisfied(assignment)
        if not broken_clauses:
            return assignment
        clause = self.clauses[self.rng.choice(broken_clauses)]
        candidates = [abs(lit) - 1 for lit in clause]
        if self.rng.random() < WALK_NOISE:
            var = self.rng.choice(candidates)
        else:
            counts = self._true_counts(assignment)
            var = min(candidates, key=lambda v: self._break_make(v, assignment, counts)[0])
        assignment[var] = not assignment[var]
        return assignment

    def _multi_flip(self, assignment: Assignment) -> Assignment:
        k = max(2, self.variables // 20)
        for var in self.rng.sample(range(self.variables), k):
            assignment[var] = not assignment[var]
        return assignment

    def _flip_broken_clause(self, assignment: Assignment) -> Assignment:
        broken_clauses = self.unsatisfied(assignment)
        if not broken_clauses:
            return assignment
        for lit in self.clauses[self.rng.choice(broken_clauses)]:
            var = abs(lit) - 1
            assignment[var] = not assignment[var]
        return assignment
