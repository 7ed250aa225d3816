"""Plateau-driven iterated local search for a single algorithm attempt."""

from __future__ import annotations

import logging
from typing import Sequence, Tuple

from diverse_heuristics.algorithms.base import (
    DEFAULT_PATIENCE,
    AttemptResult,
    SearchState,
    SearchStatus,
)
from diverse_heuristics.domains.base import ProblemDomain
from diverse_heuristics.errors import SearchStateError
from diverse_heuristics.models import CANDIDATE_SLOT, WORKING_SLOT, Algorithm

logger = logging.getLogger("diverse_heuristics.search")


class SequenceSearch:
    """Runs one algorithm's heuristics in a fixed cycle until it stagnates.

    Every step applies the next heuristic to the working slot, writing the
    candidate slot. A candidate strictly better than the attempt's best is
    copied into the working slot and resets the non-improvement counter;
    anything else increments it. Stagnation is only checked after a full
    pass over the algorithm: a counter of at least ``patience`` abandons the
    attempt.
    """

    def __init__(
        self,
        domain: ProblemDomain,
        algorithm: Algorithm | Sequence[int],
        starting_fitness: float,
        patience: int = DEFAULT_PATIENCE,
        working_slot: int = WORKING_SLOT,
        candidate_slot: int = CANDIDATE_SLOT,
    ):
        heuristics: Tuple[int, ...] = (
            algorithm.heuristics if isinstance(algorithm, Algorithm) else tuple(algorithm)
        )
        if not heuristics:
            raise ValueError("algorithm must contain at least one heuristic")
        if patience < 1:
            raise ValueError(f"patience must be positive, got {patience}")
        self.domain = domain
        self.heuristics = heuristics
        self.starting_fitness = starting_fitness
        self.patience = patience
        self.working_slot = working_slot
        self.candidate_slot = candidate_slot
        self.state = SearchState()
        self.status = SearchStatus.RUNNING
        self._position = 0

    @property
    def running(self) -> bool:
        return self.status is SearchStatus.RUNNING

    @property
    def at_iteration_boundary(self) -> bool:
        return self._position == 0

    def step(self) -> bool:
        """Apply the next heuristic. Returns whether the attempt is still RUNNING."""
        if not self.running:
            return False
        heuristic = self.heuristics[self._position]
        value = self.domain.apply_heuristic(heuristic, self.working_slot, self.candidate_slot)
        if self.state.record(value):
            self.domain.copy_solution(self.candidate_slot, self.working_slot)

        self._position += 1
        if self._position == len(self.heuristics):
            self._position = 0
            self.state.iterations += 1
            if self.state.no_improvement >= self.patience:
                self.status = SearchStatus.ABANDONED
                logger.debug(
                    "abandoned %s after %d iterations best=%s",
                    "-".join(map(str, self.heuristics)),
                    self.state.iterations,
                    self.state.current_best,
                )
        return self.running

    def run_iteration(self) -> bool:
        """Finish the current pass over the algorithm. Returns whether still RUNNING."""
        while True:
            still_running = self.step()
            if self.at_iteration_boundary or not still_running:
                return still_running

    def result(self, allow_running: bool = False) -> AttemptResult:
        """Outcome of the attempt; a RUNNING attempt only with ``allow_running``."""
        if self.running and not allow_running:
            raise SearchStateError("attempt is still running")
        return AttemptResult(
            starting_fitness=self.starting_fitness,
            current_best=self.state.current_best,
            iterations=self.state.iterations,
            applications=self.state.applications,
            completed=not self.running,
        )
