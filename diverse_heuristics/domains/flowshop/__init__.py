"""Permutation flow shop domain.

Structure:
- makespan.py: Cmax, Head/Tail matrices, adjacent-swap deltas, best insertion
- neighborhoods.py: permutation moves (swap, insert, DP multi-swap, ruin & recreate)
- instances.py: Taillard-like instance generator and the built-in instance list
- domain.py: the FlowShop problem domain
"""

from diverse_heuristics.domains.flowshop.domain import FlowShop

__all__ = ["FlowShop"]
