from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional

from diverse_heuristics.algorithms import AlgorithmCycler, EnsembleHyperHeuristic
from diverse_heuristics.config import EnsemblePolicy, RunConfig, Settings, TestMode
from diverse_heuristics.domains import DomainFactory, build_problem_domain
from diverse_heuristics.domains.base import ProblemDomain
from diverse_heuristics.errors import ConfigError, ResultWriteError
from diverse_heuristics.experiments.writer import ResultWriter, create_data_location
from diverse_heuristics.factories import AlgorithmFactory, EnsembleFactory
from diverse_heuristics.hyper_heuristic import Clock
from diverse_heuristics.models import Ensemble, RunResultRow

logger = logging.getLogger("diverse_heuristics.runner")

Regenerate = Callable[[Ensemble], Ensemble]


class ExperimentRunner:
    """Runs one batch described by a ``RunConfig``.

    For every instance of the domain the problem and algorithm seeds restart
    from their configured bases and advance by one per repetition. Each
    repetition gets a fresh domain and a fresh hyper-heuristic, so a batch is
    reproducible from its seeds alone.
    """

    def __init__(
        self,
        config: RunConfig,
        settings: Settings | None = None,
        domain_factory: DomainFactory = build_problem_domain,
        clock: Clock = time.perf_counter,
    ):
        self.config = config
        self.settings = settings or Settings()
        self.domain_factory = domain_factory
        self.clock = clock
        self.skipped_runs = 0
        self._dispatch = {
            TestMode.ENSEMBLE: self.collect_ensemble_data,
            TestMode.ALGORITHM: self.collect_algorithm_data,
            TestMode.FITNESS: self.collect_fitness_data,
        }

    def run(self) -> List[Path]:
        """Execute the batch; returns the result files written."""
        cfg = self.config
        logger.info(
            "[Experiment] %s %s %s (time limit %d ms per run)",
            cfg.problem_type.flag,
            cfg.mode.value,
            cfg.category,
            self.settings.experiment.time_limit_ms,
        )
        return self._dispatch[cfg.mode]()

    # --- batches ---
    def collect_ensemble_data(self) -> List[Path]:
        cfg = self.config
        probe = self._probe_domain()
        factory = EnsembleFactory(self._catalog(probe), self.settings.ensembles)
        regenerate: Optional[Regenerate] = None

        if cfg.policy is EnsemblePolicy.ELITE:
            ensemble = factory.generate_elite_ensemble(cfg.problem_type, ensemble_id=cfg.ensemble_id)
        elif cfg.policy is EnsemblePolicy.RANDOM:
            # ensemble k is the (k + 1)-th draw, as for default ensembles
            for _ in range(cfg.ensemble_id + 1):
                ensemble = factory.generate_random_ensemble()

            def regenerate(previous: Ensemble) -> Ensemble:
                return factory.generate_random_ensemble(size=len(previous), ensemble_id=previous.id)

        else:
            # ids count from 0, so ensemble k is the (k + 1)-th default ensemble
            for _ in range(cfg.ensemble_id + 1):
                ensemble = factory.generate_default_ensemble()

        path = create_data_location(
            self.settings.experiment.data_dir, cfg.category, cfg.problem_type.value, cfg.ensemble_id
        )
        writer = self._open_writer(path)
        self._evaluate(ensemble, writer, self.settings.experiment.repetitions, probe.number_of_instances, regenerate)
        return [path]

    def collect_algorithm_data(self) -> List[Path]:
        """Every catalog entry in [start, end) as its own one-algorithm ensemble.

        The single-session sweep over the whole space is the -f mode.
        """
        cfg = self.config
        probe = self._probe_domain()
        catalog = self._catalog(probe)
        start = 0 if cfg.start is None else cfg.start
        end = len(catalog) if cfg.end is None else cfg.end
        if end > len(catalog) or start > end:
            raise ConfigError(f"range [{start}, {end}) outside catalog of size {len(catalog)}")

        path = create_data_location(
            self.settings.experiment.data_dir, cfg.category, cfg.problem_type.value, cfg.iterations
        )
        writer = self._open_writer(path)
        logger.info("[Experiment] testing algorithms %d..%d of %d", start, end - 1, len(catalog))
        for index in range(start, end):
            ensemble = Ensemble(index, name=f"algorithm{index}")
            ensemble.append_algorithm(catalog.get(index))
            self._evaluate(ensemble, writer, cfg.iterations, probe.number_of_instances)
        return [path]

    def collect_fitness_data(self) -> List[Path]:
        cfg = self.config
        exp = self.settings.experiment
        search = self.settings.search
        instances = self._probe_domain().number_of_instances
        paths: List[Path] = []
        for instance in range(instances):
            try:
                path = create_data_location(exp.data_dir, cfg.category, cfg.problem_type.value, instance)
            except ResultWriteError as e:
                self.skipped_runs += 1
                logger.warning("instance %d: no result file, skipping (%s)", instance, e)
                continue
            domain = self.domain_factory(cfg.problem_type, exp.problem_seed)
            domain.load_instance(instance)
            cycler = AlgorithmCycler(
                exp.algorithm_seed,
                ResultWriter(path),
                exclude_top_heuristic=search.exclude_top_heuristic,
                patience=search.patience,
                persist_partial=search.persist_partial_on_timeout,
                clock=self.clock,
            )
            cycler.set_time_limit(exp.time_limit_ms)
            cycler.load_problem_domain(domain)
            try:
                completed = cycler.run()
            except ResultWriteError as e:
                self.skipped_runs += 1
                logger.warning("instance %d: results not saved, skipping (%s)", instance, e)
                continue
            logger.info(
                "[Experiment] instance %d: %d algorithm rows%s -> %s",
                instance,
                len(cycler.rows),
                "" if completed else " (time limit reached)",
                path,
            )
            paths.append(path)
        return paths

    # --- helpers ---
    def _probe_domain(self) -> ProblemDomain:
        return self.domain_factory(self.config.problem_type, self.settings.experiment.problem_seed)

    def _catalog(self, domain: ProblemDomain) -> AlgorithmFactory:
        return AlgorithmFactory.from_domain(domain, self.settings.search.exclude_top_heuristic)

    def _open_writer(self, path: Path) -> ResultWriter:
        writer = ResultWriter(path)
        writer.write_header(RunResultRow.header(self.config.mode.label_column))
        logger.info("[Experiment] writing results to %s", path)
        return writer

    def _evaluate(
        self,
        ensemble: Ensemble,
        writer: ResultWriter,
        repetitions: int,
        instances: int,
        regenerate: Optional[Regenerate] = None,
    ) -> None:
        cfg = self.config
        exp = self.settings.experiment
        for instance in range(instances):
            problem_seed = exp.problem_seed
            algorithm_seed = exp.algorithm_seed
            for repetition in range(repetitions):
                domain = self.domain_factory(cfg.problem_type, problem_seed)
                domain.load_instance(instance)
                hyper_heuristic = EnsembleHyperHeuristic(
                    ensemble,
                    algorithm_seed,
                    problem_seed,
                    instance,
                    repetition,
                    cfg.mode,
                    cfg.policy,
                    writer,
                    patience=self.settings.search.patience,
                    clock=self.clock,
                )
                hyper_heuristic.set_time_limit(exp.time_limit_ms)
                hyper_heuristic.load_problem_domain(domain)
                try:
                    hyper_heuristic.run()
                except ResultWriteError as e:
                    self.skipped_runs += 1
                    logger.warning(
                        "ensemble %d instance %d repetition %d: result not saved, skipping (%s)",
                        ensemble.id,
                        instance,
                        repetition,
                        e,
                    )
                problem_seed += 1
                algorithm_seed += 1
                if regenerate is not None:
                    ensemble = regenerate(ensemble)
