"""Core data structures for heuristic-combination experiments.

This module defines:
    Algorithm           -- immutable triple of low-level heuristic ids with its catalog index.
    Ensemble            -- ordered, append-only collection of algorithms with an integer id.
    AlgorithmFitnessRow -- one row per abandoned algorithm in a fitness sweep.
    RunResultRow        -- one row per orchestrated hyper-heuristic run.
"""

from __future__ import annotations

from dataclasses import astuple, dataclass
from typing import Iterator, List, Tuple

HeuristicId = int

# Solution memory layout shared by every search engine.
BEST_SLOT = 0
WORKING_SLOT = 1
CANDIDATE_SLOT = 2
MEMORY_SIZE = 3

ALGORITHM_LENGTH = 3


@dataclass(frozen=True)
class Algorithm:
    """Fixed-length ordered composition of low-level heuristics.

    Attributes:
        index: Position in the enumeration order of the algorithm space (identity).
        heuristics: Heuristic ids applied in this order, wrapping after the last.
    """

    index: int
    heuristics: Tuple[HeuristicId, ...]

    def __len__(self) -> int:
        return len(self.heuristics)

    def __iter__(self) -> Iterator[HeuristicId]:
        return iter(self.heuristics)

    def label(self) -> str:
        return "-".join(str(h) for h in self.heuristics)


class Ensemble:
    """Named collection of algorithms evaluated together in one batch.

    Order of appended algorithms is the execution order within a run.
    """

    def __init__(self, ensemble_id: int, name: str | None = None):
        self.id = ensemble_id
        self.name = name or f"ensemble{ensemble_id}"
        self._algorithms: List[Algorithm] = []

    def append_algorithm(self, algorithm: Algorithm) -> None:
        self._algorithms.append(algorithm)

    @property
    def algorithms(self) -> Tuple[Algorithm, ...]:
        return tuple(self._algorithms)

    def __len__(self) -> int:
        return len(self._algorithms)

    def __iter__(self) -> Iterator[Algorithm]:
        return iter(self._algorithms)

    def algorithm_label(self) -> str:
        """Space separated catalog indices, e.g. ``"3 17 40"``."""
        return " ".join(str(a.index) for a in self._algorithms)

    def heuristic_label(self) -> str:
        """Space separated heuristic triples, e.g. ``"0-1-2 3-3-1"``."""
        return " ".join(a.label() for a in self._algorithms)

    def __repr__(self) -> str:
        return f"Ensemble(id={self.id}, name={self.name!r}, algorithms=[{self.algorithm_label()}])"


@dataclass(frozen=True)
class AlgorithmFitnessRow:
    starting_fitness: float
    algorithm_index: int
    fitness: float
    iterations: int

    HEADER = ("starting fitness", "algorithm number", "fitness", "number of iterations")

    def as_row(self) -> tuple:
        return astuple(self)


@dataclass(frozen=True)
class RunResultRow:
    iteration: int
    problem_instance: int
    problem_seed: int
    algorithm_seed: int
    starting_fitness: float
    ensemble_number: int
    fitness: float
    runs: int
    label: str

    @staticmethod
    def header(label_column: str) -> tuple:
        """Column names; the last one is ``heuristics`` or ``algorithms``."""
        return (
            "iteration",
            "problem instance",
            "problem seed",
            "algorithm seed",
            "starting fitness",
            "ensemble number",
            "fitness",
            "number of runs",
            label_column,
        )

    def as_row(self) -> tuple:
        return astuple(self)
