from diverse_heuristics.algorithms.base import DEFAULT_PATIENCE, AttemptResult, SearchState, SearchStatus
from diverse_heuristics.algorithms.cycler import AlgorithmCycler
from diverse_heuristics.algorithms.ensemble_runner import EnsembleHyperHeuristic
from diverse_heuristics.algorithms.sequence_search import SequenceSearch

__all__ = [
    "DEFAULT_PATIENCE",
    "AlgorithmCycler",
    "AttemptResult",
    "EnsembleHyperHeuristic",
    "SearchState",
    "SearchStatus",
    "SequenceSearch",
]
