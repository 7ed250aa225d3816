"""Problem domains and the single construction point used by the orchestrator."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Type

from diverse_heuristics.domains.base import ProblemDomain
from diverse_heuristics.domains.bin_packing import BinPacking
from diverse_heuristics.domains.flowshop import FlowShop
from diverse_heuristics.domains.personnel import PersonnelScheduling
from diverse_heuristics.domains.sat import SAT


class ProblemType(Enum):
    """Closed set of supported domains; value is the CLI/file-name token."""

    BIN_PACKING = "bin"
    SAT = "sat"
    FLOW_SHOP = "flo"
    PERSONNEL_SCHEDULING = "per"

    @property
    def flag(self) -> str:
        return f"--{self.value}"

    @classmethod
    def from_token(cls, token: str) -> "ProblemType":
        key = token.lstrip("-").lower()
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown problem type: {token}")


DOMAIN_CLASSES: Dict[ProblemType, Type[ProblemDomain]] = {
    ProblemType.BIN_PACKING: BinPacking,
    ProblemType.SAT: SAT,
    ProblemType.FLOW_SHOP: FlowShop,
    ProblemType.PERSONNEL_SCHEDULING: PersonnelScheduling,
}

DomainFactory = Callable[[ProblemType, int], ProblemDomain]


def build_problem_domain(problem_type: ProblemType, seed: int) -> ProblemDomain:
    """Create a fresh, unloaded domain of the given type seeded with ``seed``."""
    return DOMAIN_CLASSES[problem_type](seed)


__all__ = [
    "BinPacking",
    "DomainFactory",
    "FlowShop",
    "PersonnelScheduling",
    "ProblemDomain",
    "ProblemType",
    "SAT",
    "build_problem_domain",
]
