import csv

import pytest

from diverse_heuristics.algorithms.cycler import AlgorithmCycler
from diverse_heuristics.domains import ProblemType, build_problem_domain
from diverse_heuristics.experiments.writer import ResultWriter
from diverse_heuristics.models import AlgorithmFitnessRow


def _read(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def _cycler(path, clock, time_limit_ms=10**9, **kwargs):
    cycler = AlgorithmCycler(1000, ResultWriter(path), clock=clock, **kwargs)
    cycler.set_time_limit(time_limit_ms)
    return cycler


def test_single_algorithm_space_writes_header_and_one_row(tmp_path, scripted_domain, fake_clock) -> None:
    path = tmp_path / "fitness.csv"
    domain = scripted_domain(heuristics=2, default=50.0)
    cycler = _cycler(path, fake_clock())
    cycler.load_problem_domain(domain)

    assert cycler.run() is True
    assert cycler.rows == [AlgorithmFitnessRow(100.0, 0, 50.0, 2)]
    rows = _read(path)
    assert rows[0] == list(AlgorithmFitnessRow.HEADER)
    assert rows[1] == ["100.0", "0", "50.0", "2"]
    assert len(rows) == 2


def test_full_sweep_records_every_algorithm_in_order(tmp_path, scripted_domain, fake_clock) -> None:
    domain = scripted_domain(heuristics=2, default=50.0)
    cycler = _cycler(tmp_path / "fitness.csv", fake_clock(), exclude_top_heuristic=False)
    cycler.load_problem_domain(domain)

    assert cycler.run() is True
    assert [row.algorithm_index for row in cycler.rows] == list(range(8))
    assert all(row.starting_fitness == 100.0 for row in cycler.rows)
    assert len(domain.applied) == 8 * 6


def test_working_slot_reset_between_algorithms(tmp_path, scripted_domain, fake_clock) -> None:
    domain = scripted_domain(heuristics=2, script=[40, 90, 90, 90, 90, 90], default=95.0)
    cycler = _cycler(tmp_path / "fitness.csv", fake_clock(), exclude_top_heuristic=False)
    cycler.load_problem_domain(domain)
    cycler.run()

    # the best-known slot still holds the initial solution
    assert domain.get_function_value(0) == 100.0
    assert domain.get_function_value(1) == 100.0
    assert domain.best_solution_value == 40
    assert cycler.rows[0].fitness == 40
    assert cycler.rows[1].fitness == 95.0


def test_zero_budget_flushes_header_only(tmp_path, scripted_domain, fake_clock) -> None:
    path = tmp_path / "fitness.csv"
    cycler = _cycler(path, fake_clock(), time_limit_ms=0)
    cycler.load_problem_domain(scripted_domain(heuristics=2))

    assert cycler.run() is False
    assert cycler.rows == []
    assert _read(path) == [list(AlgorithmFitnessRow.HEADER)]


@pytest.mark.parametrize("persist_partial, expected_rows", [(False, 1), (True, 2)])
def test_timeout_discards_or_keeps_in_flight_attempt(
    tmp_path, scripted_domain, fake_clock, persist_partial, expected_rows
) -> None:
    # one clock reading per pass, one second apart: algorithm 0 takes readings 1-2,
    # the budget runs out at reading 4, before algorithm 1's second pass
    path = tmp_path / "fitness.csv"
    cycler = _cycler(
        path,
        fake_clock(),
        time_limit_ms=4000,
        exclude_top_heuristic=False,
        persist_partial=persist_partial,
    )
    cycler.load_problem_domain(scripted_domain(heuristics=2, default=50.0))

    assert cycler.run() is False
    assert len(cycler.rows) == expected_rows
    assert len(_read(path)) == expected_rows + 1
    if persist_partial:
        assert cycler.rows[-1].algorithm_index == 1
        assert cycler.rows[-1].iterations == 1


def test_smaller_budget_never_completes_more_attempts(tmp_path, scripted_domain, fake_clock) -> None:
    completed = []
    for limit in range(0, 20000, 1000):
        path = tmp_path / f"fitness{limit}.csv"
        cycler = _cycler(path, fake_clock(), time_limit_ms=limit, exclude_top_heuristic=False)
        cycler.load_problem_domain(scripted_domain(heuristics=2, default=50.0))
        cycler.run()
        completed.append(len(cycler.rows))
    assert completed == sorted(completed)
    assert completed[0] == 0
    assert completed[-1] == 8


def test_same_seeds_give_identical_rows(tmp_path, fake_clock) -> None:
    outputs = []
    for run in range(2):
        domain = build_problem_domain(ProblemType.FLOW_SHOP, 1000)
        domain.load_instance(0)
        path = tmp_path / f"fitness{run}.csv"
        cycler = _cycler(path, fake_clock(), time_limit_ms=60_000)
        cycler.load_problem_domain(domain)
        cycler.run()
        outputs.append(path.read_bytes())
    assert outputs[0] == outputs[1]
    assert len(outputs[0].splitlines()) > 1


def test_run_requires_domain_and_time_limit(tmp_path, scripted_domain) -> None:
    cycler = AlgorithmCycler(1, ResultWriter(tmp_path / "x.csv"))
    with pytest.raises(RuntimeError):
        cycler.run()
    cycler.load_problem_domain(scripted_domain())
    with pytest.raises(RuntimeError):
        cycler.run()
    with pytest.raises(ValueError):
        cycler.set_time_limit(-1)
