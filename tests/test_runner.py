import csv

import pytest

from diverse_heuristics.config import (
    EnsemblePolicy,
    EnsembleSettings,
    ExperimentSettings,
    RunConfig,
    Settings,
    TestMode,
)
from diverse_heuristics.domains import ProblemType, build_problem_domain
from diverse_heuristics.errors import ConfigError, ResultWriteError
from diverse_heuristics.experiments.runner import ExperimentRunner
from diverse_heuristics.experiments.writer import ResultWriter
from diverse_heuristics.factories import AlgorithmFactory, EnsembleFactory


def _read(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def _settings(tmp_path, repetitions=2, time_limit_ms=3000, **ensembles):
    return Settings(
        experiment=ExperimentSettings(
            repetitions=repetitions, time_limit_ms=time_limit_ms, data_dir=str(tmp_path / "Data")
        ),
        ensembles=EnsembleSettings(**ensembles),
    )


@pytest.fixture
def recorded_domains(domain_class):
    """Domain factory building two-instance scripted domains and recording their seeds."""
    created = []

    def factory(problem_type, seed):
        domain = domain_class(seed=seed, heuristics=3, default=50.0, instances=2)
        created.append(domain)
        return domain

    factory.created = created
    return factory


def _runner(config, settings, domains, fake_clock):
    return ExperimentRunner(config, settings, domain_factory=domains, clock=fake_clock())


def test_default_ensemble_batch(tmp_path, recorded_domains, fake_clock) -> None:
    settings = _settings(tmp_path)
    config = RunConfig(ProblemType.BIN_PACKING, TestMode.ENSEMBLE, ensemble_id=2)
    (path,) = _runner(config, settings, recorded_domains, fake_clock).run()

    assert path.parent.name == "Ensembles"
    assert path.name.startswith("binEnsemble2Data")
    rows = _read(path)
    assert rows[0][-1] == "algorithms"
    body = rows[1:]
    # repetition, instance, problem seed, algorithm seed
    assert [row[:4] for row in body] == [
        ["0", "0", "1000", "1000"],
        ["1", "0", "1001", "1001"],
        ["0", "1", "1000", "1000"],
        ["1", "1", "1001", "1001"],
    ]

    expected = EnsembleFactory(AlgorithmFactory(3), settings.ensembles)
    for _ in range(3):
        third = expected.generate_default_ensemble()
    assert {row[5] for row in body} == {"2"}
    assert {row[8] for row in body} == {third.algorithm_label()}


def test_seeds_restart_for_every_instance(tmp_path, recorded_domains, fake_clock) -> None:
    config = RunConfig(ProblemType.SAT, TestMode.ENSEMBLE, ensemble_id=0)
    _runner(config, _settings(tmp_path, repetitions=3), recorded_domains, fake_clock).run()

    # first domain is the probe used to size the catalog
    runs = recorded_domains.created[1:]
    assert [(d.loaded[-1], d.seed) for d in runs] == [
        (0, 1000),
        (0, 1001),
        (0, 1002),
        (1, 1000),
        (1, 1001),
        (1, 1002),
    ]


def test_random_policy_regenerates_same_id_and_size(tmp_path, recorded_domains, fake_clock) -> None:
    config = RunConfig(ProblemType.FLOW_SHOP, TestMode.ENSEMBLE, ensemble_id=5, policy=EnsemblePolicy.RANDOM)
    (path,) = _runner(config, _settings(tmp_path, repetitions=4), recorded_domains, fake_clock).run()

    assert path.parent.name == "RandomEnsembles"
    assert path.name.startswith("floRandomEnsemble5Data")
    body = _read(path)[1:]
    assert len(body) == 8
    assert {row[5] for row in body} == {"5"}
    assert len({len(row[8].split()) for row in body}) == 1


def test_random_ensemble_depends_on_id(tmp_path, domain_class, fake_clock) -> None:
    def domains(problem_type, seed):
        return domain_class(seed=seed, heuristics=5, default=50.0)

    settings = _settings(tmp_path, repetitions=1)
    expected = EnsembleFactory(AlgorithmFactory(5), settings.ensembles)
    draws = [expected.generate_random_ensemble() for _ in range(6)]

    labels = {}
    for ensemble_id in (0, 5):
        config = RunConfig(ProblemType.SAT, TestMode.ENSEMBLE, ensemble_id=ensemble_id, policy=EnsemblePolicy.RANDOM)
        (path,) = _runner(config, settings, domains, fake_clock).run()
        (row,) = _read(path)[1:]
        assert row[5] == str(ensemble_id)
        labels[ensemble_id] = row[8]

    assert labels[0] == draws[0].algorithm_label()
    assert labels[5] == draws[5].algorithm_label()
    assert labels[0] != labels[5]


def test_elite_policy_uses_configured_triples(tmp_path, recorded_domains, fake_clock) -> None:
    settings = _settings(tmp_path, repetitions=1, elite={"per": ((0, 1, 1), (1, 0, 0))})
    config = RunConfig(ProblemType.PERSONNEL_SCHEDULING, TestMode.ENSEMBLE, ensemble_id=1, policy=EnsemblePolicy.ELITE)
    (path,) = _runner(config, settings, recorded_domains, fake_clock).run()

    assert path.name.startswith("perEliteEnsemble1Data")
    body = _read(path)[1:]
    assert {row[8] for row in body} == {"3 4"}


def test_algorithm_range_tests_exactly_requested_entries(tmp_path, recorded_domains, fake_clock) -> None:
    config = RunConfig(ProblemType.FLOW_SHOP, TestMode.ALGORITHM, iterations=1, start=2, end=4)
    (path,) = _runner(config, _settings(tmp_path), recorded_domains, fake_clock).run()

    assert path.parent.name == "Algorithms"
    assert path.name.startswith("floAlgorithm1Data")
    rows = _read(path)
    assert rows[0][-1] == "heuristics"
    assert [(row[5], row[8]) for row in rows[1:]] == [
        ("2", "0-1-0"),
        ("2", "0-1-0"),
        ("3", "0-1-1"),
        ("3", "0-1-1"),
    ]


def test_algorithm_range_beyond_catalog_rejected(tmp_path, recorded_domains, fake_clock) -> None:
    config = RunConfig(ProblemType.FLOW_SHOP, TestMode.ALGORITHM, iterations=1, start=2, end=9)
    with pytest.raises(ConfigError):
        _runner(config, _settings(tmp_path), recorded_domains, fake_clock).run()


def test_fitness_mode_writes_one_file_per_instance(tmp_path, recorded_domains, fake_clock) -> None:
    config = RunConfig(ProblemType.SAT, TestMode.FITNESS)
    paths = _runner(config, _settings(tmp_path, time_limit_ms=10**9), recorded_domains, fake_clock).run()

    assert [p.name[: len("satAlgorithmFitness0Data")] for p in paths] == [
        "satAlgorithmFitness0Data",
        "satAlgorithmFitness1Data",
    ]
    for path in paths:
        rows = _read(path)
        assert rows[0] == ["starting fitness", "algorithm number", "fitness", "number of iterations"]
        assert [row[1] for row in rows[1:]] == [str(i) for i in range(8)]


def test_write_failure_skips_run_and_continues(tmp_path, recorded_domains, fake_clock, monkeypatch) -> None:
    real_write_row = ResultWriter.write_row
    calls = []

    def flaky(self, row):
        calls.append(row)
        if len(calls) == 2:
            raise ResultWriteError("disk full")
        real_write_row(self, row)

    monkeypatch.setattr(ResultWriter, "write_row", flaky)
    config = RunConfig(ProblemType.BIN_PACKING, TestMode.ENSEMBLE, ensemble_id=0)
    runner = _runner(config, _settings(tmp_path), recorded_domains, fake_clock)
    (path,) = runner.run()

    assert runner.skipped_runs == 1
    assert len(calls) == 4
    assert len(_read(path)) == 1 + 3


def test_header_failure_aborts_batch(tmp_path, recorded_domains, fake_clock, monkeypatch) -> None:
    def broken(self, header):
        raise ResultWriteError("read-only")

    monkeypatch.setattr(ResultWriter, "write_header", broken)
    config = RunConfig(ProblemType.BIN_PACKING, TestMode.ENSEMBLE, ensemble_id=0)
    runner = _runner(config, _settings(tmp_path), recorded_domains, fake_clock)
    with pytest.raises(ResultWriteError):
        runner.run()
    assert len(recorded_domains.created) == 1


def test_identical_seeds_give_identical_tables(tmp_path, fake_clock) -> None:
    tables = []
    for run in range(2):
        settings = _settings(tmp_path / str(run), repetitions=1, time_limit_ms=5000)
        config = RunConfig(ProblemType.FLOW_SHOP, TestMode.ALGORITHM, iterations=1, start=10, end=12)
        (path,) = ExperimentRunner(config, settings, domain_factory=build_problem_domain, clock=fake_clock()).run()
        tables.append(path.read_bytes())
    assert tables[0] == tables[1]


def test_unusable_data_dir_skips_fitness_instances(tmp_path, recorded_domains, fake_clock) -> None:
    blocker = tmp_path / "Data"
    blocker.write_text("not a directory")
    config = RunConfig(ProblemType.SAT, TestMode.FITNESS)
    runner = _runner(config, _settings(tmp_path, time_limit_ms=10**9), recorded_domains, fake_clock)

    assert runner.run() == []
    assert runner.skipped_runs == 2
    # only the probe domain was built
    assert len(recorded_domains.created) == 1
