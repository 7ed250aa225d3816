"""Command line entry point.

Usage:
    diverse-heuristics --flo -e 3 --elite
    diverse-heuristics --sat -a 10 --start 2 --end 4
    diverse-heuristics --bin -f --time-limit-ms 60000
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from diverse_heuristics.config import (
    DEFAULT_CONFIG_FILE,
    LOG_LEVELS,
    EnsemblePolicy,
    RunConfig,
    Settings,
    TestMode,
)
from diverse_heuristics.domains import ProblemType
from diverse_heuristics.errors import ConfigError, ResultWriteError
from diverse_heuristics.experiments.runner import ExperimentRunner

logger = logging.getLogger("diverse_heuristics")


class ArgumentParser(argparse.ArgumentParser):
    """Prints usage and exits with status 1 on any argument error."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _non_negative(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {value}")
    return value


def _positive(text: str) -> int:
    value = _non_negative(text)
    if value < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return value


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="diverse-heuristics",
        description="Benchmark heuristic triples and ensembles of them on HyFlex-style problem domains.",
    )
    problem = parser.add_mutually_exclusive_group(required=True)
    for problem_type in ProblemType:
        problem.add_argument(
            problem_type.flag,
            dest="problem",
            action="store_const",
            const=problem_type,
            help=f"{problem_type.name.replace('_', ' ').lower()} domain",
        )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("-e", dest="ensemble_id", type=_non_negative, metavar="ID", help="evaluate ensemble ID")
    mode.add_argument(
        "-a",
        dest="iterations",
        type=_positive,
        metavar="ITERATIONS",
        help="evaluate every algorithm as its own ensemble, ITERATIONS repetitions each",
    )
    mode.add_argument(
        "-f", dest="fitness", action="store_true", help="sweep all algorithms once per instance (fitness mode)"
    )

    policy = parser.add_mutually_exclusive_group()
    policy.add_argument(
        "--elite", dest="policy", action="store_const", const=EnsemblePolicy.ELITE, help="curated ensemble (-e)"
    )
    policy.add_argument(
        "--random", dest="policy", action="store_const", const=EnsemblePolicy.RANDOM, help="random ensemble (-e)"
    )
    parser.set_defaults(policy=EnsemblePolicy.DEFAULT)

    parser.add_argument("--start", type=_non_negative, help="first catalog index to test (-a)")
    parser.add_argument("--end", type=_non_negative, help="catalog index to stop before (-a)")
    parser.add_argument("--config", help=f"YAML settings file (default: {DEFAULT_CONFIG_FILE} if present)")
    parser.add_argument("--time-limit-ms", type=_non_negative, help="wall-clock budget per run")
    parser.add_argument("--data-dir", help="root directory for result files")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS)
    return parser


def _run_config(args: argparse.Namespace) -> RunConfig:
    if args.ensemble_id is not None:
        mode = TestMode.ENSEMBLE
    elif args.iterations is not None:
        mode = TestMode.ALGORITHM
    else:
        mode = TestMode.FITNESS
    return RunConfig(
        problem_type=args.problem,
        mode=mode,
        ensemble_id=args.ensemble_id,
        policy=args.policy,
        iterations=args.iterations,
        start=args.start,
        end=args.end,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = Settings.load(
            args.config or DEFAULT_CONFIG_FILE, required=args.config is not None
        ).with_overrides(
            time_limit_ms=args.time_limit_ms,
            data_dir=args.data_dir,
            log_level=args.log_level,
        )
        config = _run_config(args)
    except ConfigError as e:
        parser.error(str(e))

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        paths = ExperimentRunner(config, settings).run()
    except ConfigError as e:
        parser.error(str(e))
    except ResultWriteError as e:
        logger.error("Batch aborted: %s", e)
        return 1
    for path in paths:
        logger.info("Saved %s", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
