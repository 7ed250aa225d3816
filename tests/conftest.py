"""Pytest configuration, shared fakes & custom summary hook.

Also ensures the project root is on sys.path for imports.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, List

import pytest

# Ensure project root is on sys.path so 'import diverse_heuristics.*' works
_root = Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from diverse_heuristics.domains.base import ProblemDomain  # noqa: E402


class ScriptedDomain(ProblemDomain):
    """Domain whose heuristics return a scripted sequence of objective values.

    A solution is just its objective value. Once the script runs out every
    application returns ``default``.
    """

    name = "scripted"

    def __init__(
        self,
        seed: int = 0,
        script: Iterable[float] = (),
        heuristics: int = 3,
        initial: float = 100.0,
        default: float = 100.0,
        instances: int = 1,
    ):
        super().__init__(seed)
        self.script: List[float] = list(script)
        self.initial = initial
        self.default = default
        self.instances = instances
        self.applied: List[int] = []
        self.loaded: List[int] = []
        self._ops = tuple(self._make_operator(h) for h in range(heuristics))

    def _make_operator(self, heuristic: int):
        def scripted(solution: float) -> float:
            self.applied.append(heuristic)
            if self.script:
                return self.script.pop(0)
            return self.default

        return scripted

    @property
    def number_of_instances(self) -> int:
        return self.instances

    def _load(self, index: int) -> None:
        self.loaded.append(index)

    def _initial_solution(self) -> float:
        return self.initial

    def _evaluate(self, solution: float) -> float:
        return solution

    def _copy(self, solution: float) -> float:
        return solution

    def _operators(self):
        return self._ops


class FakeClock:
    """Deterministic clock in seconds; each reading advances it by ``step``.

    Whole-second steps keep elapsed milliseconds exact.
    """

    def __init__(self, step: float = 1.0):
        self.now = 0.0
        self.step = step
        self.calls = 0

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        self.calls += 1
        return value


@pytest.fixture
def scripted_domain():
    """Factory for a loaded ``ScriptedDomain``."""

    def make(**kwargs) -> ScriptedDomain:
        domain = ScriptedDomain(**kwargs)
        domain.load_instance(0)
        return domain

    return make


@pytest.fixture
def domain_class():
    return ScriptedDomain


@pytest.fixture
def fake_clock():
    return FakeClock


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter,
    exitstatus: int,
    config: pytest.Config,
) -> None:  # noqa: D401
    """Append a compact custom summary at the end of test session."""
    stats = terminalreporter.stats
    collected = terminalreporter._numcollected  # type: ignore[attr-defined]
    passed = len(stats.get("passed", []))
    failed = len(stats.get("failed", []))
    errors = len(stats.get("error", []))
    skipped = len(stats.get("skipped", []))

    terminalreporter.section("Custom summary", sep="=")
    terminalreporter.write_line(
        f"Collected: {collected} | Passed: {passed} | Failed: {failed} | "
        f"Errors: {errors} | Skipped: {skipped}"
    )
    if failed:
        terminalreporter.write_line("Failed tests:")
        for rep in stats["failed"]:
            terminalreporter.write_line(f"  - {rep.nodeid}")
