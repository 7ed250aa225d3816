"""Run configuration: YAML settings file plus the per-invocation ``RunConfig``.

The YAML file is optional; every key falls back to a built-in default, and
command line values override whatever the file says.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml

from diverse_heuristics.domains import ProblemType
from diverse_heuristics.errors import ConfigError

DEFAULT_CONFIG_FILE = "config.yaml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

Triple = Tuple[int, int, int]


class TestMode(Enum):
    """Kind of batch; value is the CLI flag."""

    __test__ = False  # not a pytest class

    ENSEMBLE = "-e"
    ALGORITHM = "-a"
    FITNESS = "-f"

    @property
    def label_column(self) -> str:
        return "heuristics" if self is TestMode.ALGORITHM else "algorithms"


class EnsemblePolicy(Enum):
    DEFAULT = "default"
    ELITE = "elite"
    RANDOM = "random"


def category(mode: TestMode, policy: EnsemblePolicy = EnsemblePolicy.DEFAULT) -> str:
    """Output category, used for both the data sub-directory and the file name."""
    if mode is TestMode.ALGORITHM:
        return "Algorithm"
    if mode is TestMode.FITNESS:
        return "AlgorithmFitness"
    return {
        EnsemblePolicy.DEFAULT: "Ensemble",
        EnsemblePolicy.ELITE: "EliteEnsemble",
        EnsemblePolicy.RANDOM: "RandomEnsemble",
    }[policy]


def load_config(config_file: str | Path = DEFAULT_CONFIG_FILE, required: bool = False) -> dict:
    """Load configuration from YAML file.

    A missing file yields an empty dict unless ``required`` is set.
    """
    path = Path(config_file)
    if not path.is_file():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        logging.getLogger("diverse_heuristics.config").debug("%s not found, using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as file:
        try:
            config = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed YAML in {path}: {e}") from e
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"{path}: top level must be a mapping, got {type(config).__name__}")
    return config


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"'{name}' must be a mapping")
    return value


def _int(section: Mapping[str, Any], key: str, default: int, minimum: int = 0) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{key}' must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"'{key}' must be >= {minimum}, got {value}")
    return value


def _bool(section: Mapping[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


def _log_level(value: Any) -> str:
    level = str(value).upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
    return level


@dataclass(frozen=True)
class ExperimentSettings:
    repetitions: int = 50
    time_limit_ms: int = 900_000
    problem_seed: int = 1000
    algorithm_seed: int = 1000
    data_dir: str = "Data"


@dataclass(frozen=True)
class SearchSettings:
    patience: int = 3
    exclude_top_heuristic: bool = True
    persist_partial_on_timeout: bool = False


@dataclass(frozen=True)
class EnsembleSettings:
    factory_seed: int = 0
    default_size: int = 4
    random_min_size: int = 2
    random_max_size: int = 6
    elite: Dict[str, Tuple[Triple, ...]] = field(default_factory=dict)

    def elite_for(self, problem_type: ProblemType) -> Tuple[Triple, ...]:
        triples = self.elite.get(problem_type.value)
        if not triples:
            raise ConfigError(f"No elite ensemble configured for '{problem_type.value}'")
        return triples


def _elite_lists(raw: Any) -> Dict[str, Tuple[Triple, ...]]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigError("'ensembles.elite' must map problem tokens to lists of triples")
    elite: Dict[str, Tuple[Triple, ...]] = {}
    for token, triples in raw.items():
        try:
            problem_type = ProblemType.from_token(str(token))
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if not isinstance(triples, list):
            raise ConfigError(f"elite list for '{token}' must be a list")
        parsed = []
        for triple in triples:
            if (
                not isinstance(triple, (list, tuple))
                or len(triple) != 3
                or any(isinstance(h, bool) or not isinstance(h, int) or h < 0 for h in triple)
            ):
                raise ConfigError(f"elite entry {triple!r} for '{token}' is not a heuristic triple")
            parsed.append(tuple(triple))
        elite[problem_type.value] = tuple(parsed)
    return elite


@dataclass(frozen=True)
class Settings:
    experiment: ExperimentSettings = field(default_factory=ExperimentSettings)
    search: SearchSettings = field(default_factory=SearchSettings)
    ensembles: EnsembleSettings = field(default_factory=EnsembleSettings)
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Settings":
        exp = _section(raw, "experiment")
        search = _section(raw, "search")
        ens = _section(raw, "ensembles")
        log = _section(raw, "logging")

        defaults = cls()
        experiment = ExperimentSettings(
            repetitions=_int(exp, "repetitions", defaults.experiment.repetitions, minimum=1),
            time_limit_ms=_int(exp, "time_limit_ms", defaults.experiment.time_limit_ms),
            problem_seed=_int(exp, "problem_seed", defaults.experiment.problem_seed),
            algorithm_seed=_int(exp, "algorithm_seed", defaults.experiment.algorithm_seed),
            data_dir=str(exp.get("data_dir", defaults.experiment.data_dir)),
        )
        search_settings = SearchSettings(
            patience=_int(search, "patience", defaults.search.patience, minimum=1),
            exclude_top_heuristic=_bool(
                search, "exclude_top_heuristic", defaults.search.exclude_top_heuristic
            ),
            persist_partial_on_timeout=_bool(
                search, "persist_partial_on_timeout", defaults.search.persist_partial_on_timeout
            ),
        )
        ensembles = EnsembleSettings(
            factory_seed=_int(ens, "factory_seed", defaults.ensembles.factory_seed),
            default_size=_int(ens, "default_size", defaults.ensembles.default_size, minimum=1),
            random_min_size=_int(ens, "random_min_size", defaults.ensembles.random_min_size, minimum=1),
            random_max_size=_int(ens, "random_max_size", defaults.ensembles.random_max_size, minimum=1),
            elite=_elite_lists(ens.get("elite")),
        )
        if ensembles.random_min_size > ensembles.random_max_size:
            raise ConfigError(
                f"random_min_size ({ensembles.random_min_size}) exceeds "
                f"random_max_size ({ensembles.random_max_size})"
            )
        return cls(
            experiment=experiment,
            search=search_settings,
            ensembles=ensembles,
            log_level=_log_level(log.get("level", defaults.log_level)),
        )

    @classmethod
    def load(cls, config_file: str | Path = DEFAULT_CONFIG_FILE, required: bool = False) -> "Settings":
        return cls.from_dict(load_config(config_file, required=required))

    def with_overrides(
        self,
        time_limit_ms: int | None = None,
        data_dir: str | None = None,
        log_level: str | None = None,
    ) -> "Settings":
        """Copy with command line values applied on top of the file values."""
        experiment = self.experiment
        if time_limit_ms is not None:
            if time_limit_ms < 0:
                raise ConfigError(f"time limit must be non-negative, got {time_limit_ms}")
            experiment = replace(experiment, time_limit_ms=time_limit_ms)
        if data_dir is not None:
            experiment = replace(experiment, data_dir=data_dir)
        return replace(
            self,
            experiment=experiment,
            log_level=_log_level(log_level) if log_level is not None else self.log_level,
        )


@dataclass(frozen=True)
class RunConfig:
    """What one invocation should do; built from the command line.

    ``ensemble_id`` only applies to ``-e``; ``iterations``, ``start`` and
    ``end`` only to ``-a``. ``start``/``end`` bound a half-open catalog range.
    """

    problem_type: ProblemType
    mode: TestMode
    ensemble_id: int | None = None
    policy: EnsemblePolicy = EnsemblePolicy.DEFAULT
    iterations: int | None = None
    start: int | None = None
    end: int | None = None

    def __post_init__(self):
        if self.mode is TestMode.ENSEMBLE and (self.ensemble_id is None or self.ensemble_id < 0):
            raise ConfigError("-e requires a non-negative ensemble id")
        if self.mode is TestMode.ALGORITHM and (self.iterations is None or self.iterations < 1):
            raise ConfigError("-a requires a positive number of iterations")
        if self.mode is not TestMode.ENSEMBLE and self.policy is not EnsemblePolicy.DEFAULT:
            raise ConfigError("--elite/--random only apply to -e")
        if self.mode is not TestMode.ALGORITHM and (self.start is not None or self.end is not None):
            raise ConfigError("--start/--end only apply to -a")
        for name in ("start", "end"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ConfigError(f"--{name} must be non-negative, got {value}")
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ConfigError(f"--start ({self.start}) must not exceed --end ({self.end})")

    @property
    def category(self) -> str:
        return category(self.mode, self.policy)
