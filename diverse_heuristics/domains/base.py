"""Problem domain contract consumed by the search engines.

A domain owns a small array of solution slots ("memory"). Heuristics always
read one slot and write another; the engine never sees a solution object,
only slot indices and objective values (lower is better).
"""

from __future__ import annotations

import math
import random
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Sequence, Tuple

Operator = Callable[[Any], Any]


class ProblemDomain(ABC):
    """Base class for a combinatorial problem with numbered low-level heuristics.

    Subclasses provide instance loading, solution construction, evaluation,
    copying and the ordered operator list. Operators receive a private copy
    of the source solution and return the modified solution.
    """

    name = "problem"

    def __init__(self, seed: int):
        self.seed = seed
        self.rng = random.Random(seed)
        self._memory: List[Any] = [None, None]
        self._values: List[float] = [math.inf, math.inf]
        self._best_value = math.inf
        self._instance_index: int | None = None

    # --- subclass hooks ---
    @property
    @abstractmethod
    def number_of_instances(self) -> int:
        """How many built-in instances ``load_instance`` accepts."""

    @abstractmethod
    def _load(self, index: int) -> None: ...

    @abstractmethod
    def _initial_solution(self) -> Any: ...

    @abstractmethod
    def _evaluate(self, solution: Any) -> float: ...

    @abstractmethod
    def _copy(self, solution: Any) -> Any: ...

    @abstractmethod
    def _operators(self) -> Sequence[Operator]: ...

    # --- public contract ---
    @property
    def heuristic_count(self) -> int:
        return len(self._operators())

    @property
    def heuristic_names(self) -> Tuple[str, ...]:
        return tuple(op.__name__.lstrip("_") for op in self._operators())

    @property
    def instance_index(self) -> int | None:
        return self._instance_index

    @property
    def best_solution_value(self) -> float:
        """Best objective value produced since the instance was loaded."""
        return self._best_value

    def load_instance(self, index: int) -> None:
        if not 0 <= index < self.number_of_instances:
            raise IndexError(f"instance index {index} out of range for {self.name}")
        self._load(index)
        self._instance_index = index
        self._memory = [None] * len(self._memory)
        self._values = [math.inf] * len(self._values)
        self._best_value = math.inf

    def set_memory_size(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"memory size must be positive, got {size}")
        current = len(self._memory)
        if size > current:
            self._memory.extend([None] * (size - current))
            self._values.extend([math.inf] * (size - current))
        else:
            del self._memory[size:]
            del self._values[size:]

    def initialise_solution(self, slot: int) -> None:
        self._require_instance()
        self._check_slot(slot)
        solution = self._initial_solution()
        self._store(slot, solution, self._evaluate(solution))

    def copy_solution(self, source: int, target: int) -> None:
        solution = self._solution(source)
        self._check_slot(target)
        self._memory[target] = self._copy(solution)
        self._values[target] = self._values[source]

    def apply_heuristic(self, heuristic: int, source: int, target: int) -> float:
        """Apply heuristic ``heuristic`` to slot ``source`` and store the result in ``target``.

        Returns:
            Objective value of the new solution in ``target``.
        """
        operators = self._operators()
        if not 0 <= heuristic < len(operators):
            raise IndexError(f"heuristic {heuristic} out of range for {self.name}")
        working = self._copy(self._solution(source))
        self._check_slot(target)
        result = operators[heuristic](working)
        value = self._evaluate(result)
        self._store(target, result, value)
        return value

    def get_function_value(self, slot: int) -> float:
        self._solution(slot)
        return self._values[slot]

    def solution(self, slot: int) -> Any:
        """Copy of the solution held in ``slot`` (for inspection and tests)."""
        return self._copy(self._solution(slot))

    # --- helpers ---
    def _store(self, slot: int, solution: Any, value: float) -> None:
        self._memory[slot] = solution
        self._values[slot] = value
        if value < self._best_value:
            self._best_value = value

    def _solution(self, slot: int) -> Any:
        self._check_slot(slot)
        solution = self._memory[slot]
        if solution is None:
            raise RuntimeError(f"slot {slot} of {self.name} is not initialised")
        return solution

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < len(self._memory):
            raise IndexError(f"slot {slot} out of range (memory size {len(self._memory)})")

    def _require_instance(self) -> None:
        if self._instance_index is None:
            raise RuntimeError(f"{self.name}: load_instance must be called first")

    def __str__(self) -> str:
        return f"{self.name} (seed={self.seed}, heuristics={self.heuristic_count})"
