"""Heuristic-combination benchmark for HyFlex-style problem domains.

Exports the core data structures and the algorithm space enumerator.
"""

from diverse_heuristics.algorithm_space import effective_heuristic_count, enumerate_algorithms  # noqa: F401
from diverse_heuristics.models import Algorithm, AlgorithmFitnessRow, Ensemble, RunResultRow  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "Algorithm",
    "AlgorithmFitnessRow",
    "Ensemble",
    "RunResultRow",
    "effective_heuristic_count",
    "enumerate_algorithms",
]
