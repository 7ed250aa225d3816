import random
from typing import List, Tuple

# (jobs, machines, generator seed); seeds borrowed from Taillard's first instance of each class
INSTANCE_SPECS: Tuple[Tuple[int, int, int], ...] = (
    (20, 5, 873654221),
    (20, 10, 587595453),
    (20, 20, 479340445),
    (50, 5, 1328042058),
    (50, 10, 1958948863),
)


def generate_taillard_instance(n: int, m: int, seed: int = 0) -> List[List[int]]:
    """Generate a Taillard benchmark-like flow shop instance (m x n, times in 1..99)."""
    rng = random.Random(seed)
    processing_times = [
        [rng.randint(1, 99) for _ in range(n)] for _ in range(m)  # n jobs  # m machines
    ]
    return processing_times
