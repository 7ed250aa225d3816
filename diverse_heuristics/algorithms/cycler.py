"""Algorithm fitness sweep: every algorithm of the space, one after another, in one session."""

from __future__ import annotations

import logging
import time
from typing import List

from diverse_heuristics.algorithm_space import effective_heuristic_count, enumerate_algorithms
from diverse_heuristics.algorithms.base import DEFAULT_PATIENCE
from diverse_heuristics.algorithms.sequence_search import SequenceSearch
from diverse_heuristics.domains.base import ProblemDomain
from diverse_heuristics.experiments.writer import ResultWriter
from diverse_heuristics.hyper_heuristic import Clock, HyperHeuristic
from diverse_heuristics.models import (
    BEST_SLOT,
    MEMORY_SIZE,
    WORKING_SLOT,
    AlgorithmFitnessRow,
)

logger = logging.getLogger("diverse_heuristics.cycler")


class AlgorithmCycler(HyperHeuristic):
    """Measures how far each algorithm gets from the same starting solution.

    Every attempt starts from the best-known slot, runs until it stagnates and
    leaves one row behind. When the whole space has been visited, the rows are
    written (header first) and :meth:`run` returns True. If the budget runs
    out first, completed rows are still written, the in-flight attempt is
    dropped unless ``persist_partial`` is set, and :meth:`run` returns False.
    """

    def __init__(
        self,
        seed: int,
        writer: ResultWriter,
        exclude_top_heuristic: bool = True,
        patience: int = DEFAULT_PATIENCE,
        persist_partial: bool = False,
        clock: Clock = time.perf_counter,
    ):
        super().__init__(seed, clock=clock)
        self.writer = writer
        self.exclude_top_heuristic = exclude_top_heuristic
        self.patience = patience
        self.persist_partial = persist_partial
        self.rows: List[AlgorithmFitnessRow] = []

    def solve(self, domain: ProblemDomain) -> bool:
        self.rows = []
        heuristic_count = effective_heuristic_count(domain.heuristic_count, self.exclude_top_heuristic)
        algorithms = enumerate_algorithms(heuristic_count)

        domain.set_memory_size(MEMORY_SIZE)
        domain.initialise_solution(BEST_SLOT)
        domain.copy_solution(BEST_SLOT, WORKING_SLOT)
        starting_fitness = domain.best_solution_value
        logger.info(
            "%s: sweeping %d algorithms on %s, starting fitness %s",
            self,
            len(algorithms),
            domain,
            starting_fitness,
        )

        for algorithm in algorithms:
            search = SequenceSearch(domain, algorithm, starting_fitness, patience=self.patience)
            while search.running:
                if self.has_time_expired():
                    if self.persist_partial:
                        self._record(algorithm.index, search, partial=True)
                    logger.info(
                        "%s: time limit reached during algorithm %d (%d rows kept)",
                        self,
                        algorithm.index,
                        len(self.rows),
                    )
                    self._flush()
                    return False
                search.run_iteration()
            self._record(algorithm.index, search)
            domain.copy_solution(BEST_SLOT, WORKING_SLOT)

        self._flush()
        logger.info("%s: sweep finished in %.0f ms", self, self.elapsed_ms())
        return True

    def _record(self, index: int, search: SequenceSearch, partial: bool = False) -> None:
        outcome = search.result(allow_running=partial)
        self.rows.append(
            AlgorithmFitnessRow(
                starting_fitness=outcome.starting_fitness,
                algorithm_index=index,
                fitness=outcome.current_best,
                iterations=outcome.iterations,
            )
        )

    def _flush(self) -> None:
        self.writer.write_header(AlgorithmFitnessRow.HEADER)
        self.writer.write_rows(row.as_row() for row in self.rows)

    def __str__(self) -> str:
        return "AlgorithmFitness"
