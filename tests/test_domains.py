import math

import pytest

from diverse_heuristics.domains import (
    BinPacking,
    PersonnelScheduling,
    ProblemType,
    SAT,
    build_problem_domain,
)
from diverse_heuristics.domains.personnel import OFF, SHIFTS
from diverse_heuristics.models import BEST_SLOT, CANDIDATE_SLOT, MEMORY_SIZE, WORKING_SLOT


def _prepared(problem_type: ProblemType, seed: int = 1000, instance: int = 0):
    domain = build_problem_domain(problem_type, seed)
    domain.load_instance(instance)
    domain.set_memory_size(MEMORY_SIZE)
    domain.initialise_solution(BEST_SLOT)
    domain.copy_solution(BEST_SLOT, WORKING_SLOT)
    return domain


def test_problem_type_tokens() -> None:
    assert [p.value for p in ProblemType] == ["bin", "sat", "flo", "per"]
    assert ProblemType.FLOW_SHOP.flag == "--flo"
    assert ProblemType.from_token("--per") is ProblemType.PERSONNEL_SCHEDULING
    assert ProblemType.from_token("SAT") is ProblemType.SAT
    with pytest.raises(ValueError):
        ProblemType.from_token("--tsp")


@pytest.mark.parametrize("problem_type", list(ProblemType))
def test_domain_contract(problem_type) -> None:
    domain = _prepared(problem_type)
    assert domain.heuristic_count == 5
    assert len(domain.heuristic_names) == 5
    assert domain.number_of_instances == 5
    start = domain.get_function_value(BEST_SLOT)
    assert domain.best_solution_value == start
    for h in range(domain.heuristic_count):
        value = domain.apply_heuristic(h, WORKING_SLOT, CANDIDATE_SLOT)
        assert math.isfinite(value)
        assert value >= 0
        assert domain.get_function_value(CANDIDATE_SLOT) == value
    # source slot untouched by applications
    assert domain.get_function_value(WORKING_SLOT) == start
    assert domain.best_solution_value <= start


@pytest.mark.parametrize("problem_type", list(ProblemType))
def test_same_seed_same_trajectory(problem_type) -> None:
    values = []
    for _ in range(2):
        domain = _prepared(problem_type, seed=42, instance=1)
        trace = [domain.get_function_value(BEST_SLOT)]
        for h in (0, 1, 2, 3, 4, 0, 3):
            trace.append(domain.apply_heuristic(h, WORKING_SLOT, CANDIDATE_SLOT))
            domain.copy_solution(CANDIDATE_SLOT, WORKING_SLOT)
        values.append(trace)
    assert values[0] == values[1]


def test_domain_misuse_errors() -> None:
    domain = build_problem_domain(ProblemType.SAT, 1)
    with pytest.raises(IndexError):
        domain.load_instance(5)
    with pytest.raises(RuntimeError):
        domain.initialise_solution(0)
    domain.load_instance(0)
    domain.set_memory_size(MEMORY_SIZE)
    with pytest.raises(RuntimeError):
        domain.apply_heuristic(0, WORKING_SLOT, CANDIDATE_SLOT)
    domain.initialise_solution(WORKING_SLOT)
    with pytest.raises(IndexError):
        domain.apply_heuristic(5, WORKING_SLOT, CANDIDATE_SLOT)
    with pytest.raises(IndexError):
        domain.copy_solution(WORKING_SLOT, 3)
    with pytest.raises(ValueError):
        domain.set_memory_size(0)


def test_load_instance_resets_best_value() -> None:
    domain = _prepared(ProblemType.BIN_PACKING)
    assert math.isfinite(domain.best_solution_value)
    domain.load_instance(1)
    assert domain.best_solution_value == math.inf
    assert domain.instance_index == 1


def test_bin_packing_keeps_every_item_within_capacity() -> None:
    domain = _prepared(ProblemType.BIN_PACKING)
    assert isinstance(domain, BinPacking)
    for h in range(domain.heuristic_count):
        domain.apply_heuristic(h, WORKING_SLOT, CANDIDATE_SLOT)
        bins = domain.solution(CANDIDATE_SLOT)
        assert sorted(item for b in bins for item in b) == list(range(len(domain.sizes)))
        assert all(domain.fill(b) <= domain.capacity for b in bins)
        assert 0.0 <= domain.get_function_value(CANDIDATE_SLOT) <= 1.0


def test_sat_objective_counts_unsatisfied_clauses() -> None:
    domain = _prepared(ProblemType.SAT)
    assert isinstance(domain, SAT)
    assignment = domain.solution(BEST_SLOT)
    assert len(assignment) == domain.variables
    assert domain.get_function_value(BEST_SLOT) == len(domain.unsatisfied(assignment))
    assert domain.unsatisfied([True] * domain.variables) == [
        idx for idx, clause in enumerate(domain.clauses) if all(lit < 0 for lit in clause)
    ]


def test_personnel_roster_shape() -> None:
    domain = _prepared(ProblemType.PERSONNEL_SCHEDULING)
    assert isinstance(domain, PersonnelScheduling)
    for h in range(domain.heuristic_count):
        domain.apply_heuristic(h, WORKING_SLOT, CANDIDATE_SLOT)
        roster = domain.solution(CANDIDATE_SLOT)
        assert len(roster) == domain.employees
        assert all(len(row) == domain.days for row in roster)
        assert all(shift in (OFF,) + SHIFTS for row in roster for shift in row)
