"""Catalog and ensemble construction policies."""

from __future__ import annotations

import logging
import random
from typing import List, Sequence

from diverse_heuristics.algorithm_space import effective_heuristic_count, enumerate_algorithms
from diverse_heuristics.config import EnsembleSettings
from diverse_heuristics.domains import ProblemType
from diverse_heuristics.domains.base import ProblemDomain
from diverse_heuristics.errors import ConfigError
from diverse_heuristics.models import Algorithm, Ensemble

logger = logging.getLogger("diverse_heuristics.factories")


class AlgorithmFactory:
    """The algorithm catalog for one heuristic count."""

    def __init__(self, heuristic_count: int, exclude_top_heuristic: bool = True):
        self.heuristic_count = effective_heuristic_count(heuristic_count, exclude_top_heuristic)
        self._algorithms = enumerate_algorithms(self.heuristic_count)

    @classmethod
    def from_domain(cls, domain: ProblemDomain, exclude_top_heuristic: bool = True) -> "AlgorithmFactory":
        return cls(domain.heuristic_count, exclude_top_heuristic)

    def get_all_algorithms(self) -> List[Algorithm]:
        return list(self._algorithms)

    def get(self, index: int) -> Algorithm:
        if not 0 <= index < len(self._algorithms):
            raise IndexError(f"algorithm {index} outside catalog of size {len(self._algorithms)}")
        return self._algorithms[index]

    def find(self, heuristics: Sequence[int]) -> Algorithm:
        """Catalog entry for a heuristic triple."""
        h = self.heuristic_count
        triple = tuple(heuristics)
        if len(triple) != 3 or any(not 0 <= x < h for x in triple):
            raise ValueError(f"{triple} is not a triple over [0, {h})")
        i, j, k = triple
        return self._algorithms[(i * h + j) * h + k]

    def __len__(self) -> int:
        return len(self._algorithms)


class EnsembleFactory:
    """Builds ensembles from a catalog.

    Ids come from an internal counter unless the caller asks for a specific
    one. Default and random ensembles draw from a private ``random.Random``,
    so a factory with the same seed repeats the same sequence of ensembles.
    """

    def __init__(self, algorithm_factory: AlgorithmFactory, settings: EnsembleSettings, seed: int | None = None):
        self.algorithm_factory = algorithm_factory
        self.settings = settings
        self.rng = random.Random(settings.factory_seed if seed is None else seed)
        self._next_id = 0

    def _take_id(self, ensemble_id: int | None) -> int:
        if ensemble_id is not None:
            return ensemble_id
        ensemble_id = self._next_id
        self._next_id += 1
        return ensemble_id

    def _sample(self, size: int) -> List[Algorithm]:
        catalog = self.algorithm_factory.get_all_algorithms()
        if size > len(catalog):
            raise ValueError(f"cannot draw {size} distinct algorithms from a catalog of {len(catalog)}")
        return self.rng.sample(catalog, size)

    def _build(self, ensemble_id: int, name: str, algorithms: Sequence[Algorithm]) -> Ensemble:
        ensemble = Ensemble(ensemble_id, name=name)
        for algorithm in algorithms:
            ensemble.append_algorithm(algorithm)
        logger.debug("built %r", ensemble)
        return ensemble

    def generate_default_ensemble(self, ensemble_id: int | None = None) -> Ensemble:
        ensemble_id = self._take_id(ensemble_id)
        size = min(self.settings.default_size, len(self.algorithm_factory))
        return self._build(ensemble_id, f"default{ensemble_id}", self._sample(size))

    def generate_elite_ensemble(self, problem_type: ProblemType, ensemble_id: int | None = None) -> Ensemble:
        algorithms = []
        for triple in self.settings.elite_for(problem_type):
            try:
                algorithms.append(self.algorithm_factory.find(triple))
            except ValueError as e:
                raise ConfigError(f"elite ensemble for '{problem_type.value}': {e}") from e
        ensemble_id = self._take_id(ensemble_id)
        return self._build(ensemble_id, f"elite{problem_type.value}{ensemble_id}", algorithms)

    def generate_random_ensemble(self, size: int | None = None, ensemble_id: int | None = None) -> Ensemble:
        """Ensemble of ``size`` distinct algorithms drawn uniformly from the catalog.

        Without ``size`` the count is drawn from the configured
        ``[random_min_size, random_max_size]`` range, capped at the catalog size.
        """
        if size is None:
            size = self.rng.randint(self.settings.random_min_size, self.settings.random_max_size)
            size = min(size, len(self.algorithm_factory))
        elif size < 1:
            raise ValueError(f"ensemble size must be positive, got {size}")
        algorithms = self._sample(size)
        ensemble_id = self._take_id(ensemble_id)
        return self._build(ensemble_id, f"random{ensemble_id}", algorithms)
