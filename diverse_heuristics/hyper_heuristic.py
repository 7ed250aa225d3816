"""Base lifecycle for hyper-heuristics: seed, random source and wall-clock budget."""

from __future__ import annotations

import random
import time
from abc import ABC, abstractmethod
from typing import Any, Callable

from diverse_heuristics.domains.base import ProblemDomain

Clock = Callable[[], float]


class HyperHeuristic(ABC):
    """Time-budgeted search driver bound to one problem domain.

    Subclasses implement :meth:`solve`; :meth:`run` starts the clock and
    delegates. The clock is injectable so budgets can be tested without
    sleeping; it must return seconds.
    """

    def __init__(self, seed: int, clock: Clock = time.perf_counter):
        self.seed = seed
        self.rng = random.Random(seed)
        self._clock = clock
        self._time_limit_ms: int | None = None
        self._start: float | None = None
        self._domain: ProblemDomain | None = None

    def set_time_limit(self, time_limit_ms: int) -> None:
        if time_limit_ms < 0:
            raise ValueError(f"time limit must be non-negative, got {time_limit_ms}")
        self._time_limit_ms = int(time_limit_ms)

    @property
    def time_limit_ms(self) -> int | None:
        return self._time_limit_ms

    def load_problem_domain(self, domain: ProblemDomain) -> None:
        self._domain = domain

    def elapsed_ms(self) -> float:
        if self._start is None:
            return 0.0
        return (self._clock() - self._start) * 1000.0

    def has_time_expired(self) -> bool:
        if self._time_limit_ms is None:
            raise RuntimeError("time limit not set")
        return self.elapsed_ms() >= self._time_limit_ms

    def run(self) -> Any:
        if self._domain is None:
            raise RuntimeError(f"{self} has no problem domain loaded")
        if self._time_limit_ms is None:
            raise RuntimeError(f"{self} has no time limit set")
        self._start = self._clock()
        return self.solve(self._domain)

    @abstractmethod
    def solve(self, domain: ProblemDomain) -> Any:
        """Search the loaded domain until done or out of time."""

    def __str__(self) -> str:
        return type(self).__name__
