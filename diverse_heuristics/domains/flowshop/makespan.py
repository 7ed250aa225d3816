"""Makespan evaluation and Head/Tail matrices for the permutation flow shop.

processing_times is always an m x n matrix (machines x jobs); a permutation
``pi`` lists job ids in processing order.
"""

from typing import List, Tuple


def c_max(pi: List[int], processing_times: List[List[int]]) -> int:
    """Completion time of the last job on the last machine."""
    m = len(processing_times)
    n = len(pi)
    if n == 0:
        return 0

    # single row of completion times, updated machine by machine
    C = [0] * n
    for i in range(m):
        row = processing_times[i]
        previous = 0
        for j in range(n):
            # job j starts after job j-1 on this machine and after itself on machine i-1
            previous = max(previous, C[j]) + row[pi[j]]
            C[j] = previous
    return C[n - 1]


def compute_head(pi: List[int], processing_times: List[List[int]]) -> List[List[int]]:
    """Head[i][j] = completion time of the job at position j on machine i.

    Complexity: O(m·n)
    """
    m = len(processing_times)
    n = len(pi)

    Head = [[0] * n for _ in range(m)]
    Head[0][0] = processing_times[0][pi[0]]

    for j in range(1, n):
        Head[0][j] = Head[0][j - 1] + processing_times[0][pi[j]]

    for i in range(1, m):
        Head[i][0] = Head[i - 1][0] + processing_times[i][pi[0]]

    for i in range(1, m):
        for j in range(1, n):
            Head[i][j] = max(Head[i - 1][j], Head[i][j - 1]) + processing_times[i][pi[j]]

    return Head


def compute_tail(pi: List[int], processing_times: List[List[int]]) -> List[List[int]]:
    """Tail[i][j] = time needed from position j on machine i to finish all remaining work.

    Complexity: O(m·n)
    """
    m = len(processing_times)
    n = len(pi)

    Tail = [[0] * n for _ in range(m)]
    Tail[m - 1][n - 1] = processing_times[m - 1][pi[n - 1]]

    for i in range(m - 2, -1, -1):
        Tail[i][n - 1] = Tail[i + 1][n - 1] + processing_times[i][pi[n - 1]]

    for j in range(n - 2, -1, -1):
        Tail[m - 1][j] = Tail[m - 1][j + 1] + processing_times[m - 1][pi[j]]

    for j in range(n - 2, -1, -1):
        for i in range(m - 2, -1, -1):
            Tail[i][j] = max(Tail[i + 1][j], Tail[i][j + 1]) + processing_times[i][pi[j]]

    return Tail


def compute_deltas(pi: List[int], processing_times: List[List[int]]) -> List[int]:
    """Cmax change for every adjacent swap (j, j+1), using Head+Tail in O(m·n).

    Returns:
        deltas[j] = Cmax(pi with j, j+1 swapped) - Cmax(pi)
    """
    n = len(pi)
    if n < 2:
        return []

    m = len(processing_times)
    Head = compute_head(pi, processing_times)
    Tail = compute_tail(pi, processing_times)

    base_cmax = Head[m - 1][n - 1]
    deltas: List[int] = []

    for j in range(n - 1):
        job_a = pi[j]  # moves to j+1
        job_b = pi[j + 1]  # moves to j

        C_j = [0] * m
        C_j1 = [0] * m
        for i in range(m):
            left = Head[i][j - 1] if j > 0 else 0
            top = C_j[i - 1] if i > 0 else 0
            C_j[i] = max(top, left) + processing_times[i][job_b]

            top_j1 = C_j1[i - 1] if i > 0 else 0
            C_j1[i] = max(top_j1, C_j[i]) + processing_times[i][job_a]

        if j + 2 < n:
            new_cmax = max(C_j1[i] + Tail[i][j + 2] for i in range(m))
        else:
            new_cmax = C_j1[m - 1]

        deltas.append(new_cmax - base_cmax)

    return deltas


def best_insertion(
    pi: List[int],
    job: int,
    processing_times: List[List[int]],
) -> Tuple[int, int]:
    """Best position for inserting ``job`` into partial sequence ``pi``.

    Taillard's acceleration: heads of the sequence, tails of the sequence and
    the completion of the inserted job give Cmax for all n+1 positions in O(m·n).

    Returns:
        (position, cmax) with the lowest position winning ties.
    """
    m = len(processing_times)
    k = len(pi)

    # e[i][p]: head of position p; padded so e[i][-1] reads column 0 as zero
    e = [[0] * (k + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        row = processing_times[i - 1]
        for p in range(1, k + 1):
            e[i][p] = max(e[i - 1][p], e[i][p - 1]) + row[pi[p - 1]]

    # q[i][p]: tail starting at position p; q[m][*] and q[*][k] are zero
    q = [[0] * (k + 1) for _ in range(m + 1)]
    for i in range(m - 1, -1, -1):
        row = processing_times[i]
        for p in range(k - 1, -1, -1):
            q[i][p] = max(q[i + 1][p], q[i][p + 1]) + row[pi[p]]

    best_position = 0
    best_cmax = None
    for p in range(k + 1):
        f_prev = 0
        cmax = 0
        for i in range(m):
            f = max(f_prev, e[i + 1][p]) + processing_times[i][job]
            cmax = max(cmax, f + q[i][p])
            f_prev = f
        if best_cmax is None or cmax < best_cmax:
            best_cmax = cmax
            best_position = p
    return best_position, int(best_cmax or 0)


def apply_swaps(pi: List[int], indices: List[int]) -> List[int]:
    """Apply adjacent swaps (i, i+1) in ascending index order."""
    new_pi = pi.copy()
    for idx in sorted(indices):
        new_pi[idx], new_pi[idx + 1] = new_pi[idx + 1], new_pi[idx]
    return new_pi
