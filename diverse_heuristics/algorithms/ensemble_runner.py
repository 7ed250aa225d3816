"""Hyper-heuristic driver used for every orchestrated run."""

from __future__ import annotations

import logging
import time

from diverse_heuristics.algorithms.base import DEFAULT_PATIENCE
from diverse_heuristics.algorithms.sequence_search import SequenceSearch
from diverse_heuristics.config import EnsemblePolicy, TestMode
from diverse_heuristics.domains.base import ProblemDomain
from diverse_heuristics.experiments.writer import ResultWriter
from diverse_heuristics.hyper_heuristic import Clock, HyperHeuristic
from diverse_heuristics.models import (
    BEST_SLOT,
    MEMORY_SIZE,
    WORKING_SLOT,
    Ensemble,
    RunResultRow,
)

logger = logging.getLogger("diverse_heuristics.ensemble")


class EnsembleHyperHeuristic(HyperHeuristic):
    """Runs an ensemble's algorithms in order until the time limit, then writes one row.

    Each algorithm gets a plateau-driven attempt; when it is abandoned the
    next algorithm (wrapping around) continues from the current working
    solution. The reported fitness is the best value the domain produced.
    """

    def __init__(
        self,
        ensemble: Ensemble,
        algorithm_seed: int,
        problem_seed: int,
        instance_index: int,
        repetition: int,
        mode: TestMode,
        policy: EnsemblePolicy,
        writer: ResultWriter,
        patience: int = DEFAULT_PATIENCE,
        clock: Clock = time.perf_counter,
    ):
        super().__init__(algorithm_seed, clock=clock)
        if len(ensemble) == 0:
            raise ValueError(f"ensemble {ensemble.id} has no algorithms")
        self.ensemble = ensemble
        self.algorithm_seed = algorithm_seed
        self.problem_seed = problem_seed
        self.instance_index = instance_index
        self.repetition = repetition
        self.mode = mode
        self.policy = policy
        self.writer = writer
        self.patience = patience

    def label(self) -> str:
        if self.mode is TestMode.ALGORITHM:
            return self.ensemble.heuristic_label()
        return self.ensemble.algorithm_label()

    def solve(self, domain: ProblemDomain) -> RunResultRow:
        algorithms = self.ensemble.algorithms
        domain.set_memory_size(MEMORY_SIZE)
        domain.initialise_solution(BEST_SLOT)
        domain.copy_solution(BEST_SLOT, WORKING_SLOT)
        starting_fitness = domain.best_solution_value

        position = 0
        runs = 0
        search = SequenceSearch(domain, algorithms[position], starting_fitness, patience=self.patience)
        while not self.has_time_expired():
            if not search.run_iteration():
                runs += 1
                position = (position + 1) % len(algorithms)
                search = SequenceSearch(
                    domain, algorithms[position], starting_fitness, patience=self.patience
                )

        row = RunResultRow(
            iteration=self.repetition,
            problem_instance=self.instance_index,
            problem_seed=self.problem_seed,
            algorithm_seed=self.algorithm_seed,
            starting_fitness=starting_fitness,
            ensemble_number=self.ensemble.id,
            fitness=domain.best_solution_value,
            runs=runs,
            label=self.label(),
        )
        logger.info(
            "[%s/%s] instance=%d rep=%d seeds=(%d,%d) start=%s best=%s runs=%d",
            self.mode.value,
            self.policy.value,
            self.instance_index,
            self.repetition,
            self.problem_seed,
            self.algorithm_seed,
            starting_fitness,
            row.fitness,
            runs,
        )
        self.writer.write_row(row.as_row())
        return row

    def __str__(self) -> str:
        return f"ExecuteHyperHeuristic({self.ensemble.name})"
