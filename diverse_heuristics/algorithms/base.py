"""Common structures for the search engines."""

import math
from dataclasses import dataclass
from enum import Enum

DEFAULT_PATIENCE = 3


class SearchStatus(Enum):
    RUNNING = "running"
    ABANDONED = "abandoned"


@dataclass
class SearchState:
    """Per-attempt mutable state; created when an algorithm starts, dropped when abandoned."""

    current_best: float = math.inf
    no_improvement: int = 0
    applications: int = 0
    iterations: int = 0

    def record(self, candidate_value: float) -> bool:
        """Accept or reject a candidate. Returns True if accepted."""
        self.applications += 1
        delta = self.current_best - candidate_value
        if delta > 0:
            self.current_best = candidate_value
            self.no_improvement = 0
            return True
        self.no_improvement += 1
        return False


@dataclass(frozen=True)
class AttemptResult:
    starting_fitness: float
    current_best: float
    iterations: int
    applications: int
    completed: bool
