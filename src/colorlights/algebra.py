from __future__ import annotations

import itertools
import logging
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

GF3_DTYPE = np.int64

_GF3_INV = {1: 1, 2: 2}


class SearchBudgetError(RuntimeError):
    """Raised when the free-variable enumeration exceeds the allowed budget."""

    pass


def gf3_add(a, b):
    return (a + b) % 3


def gf3_sub(a, b):
    # Python and numpy `%` both map negatives into [0, 3).
    return (a - b) % 3


def gf3_mul(a, b):
    return (a * b) % 3


def gf3_inv(a: int) -> int:
    """Multiplicative inverse in GF(3). Only 1 and 2 are invertible."""
    a = int(a) % 3
    if a == 0:
        raise ZeroDivisionError("0 has no multiplicative inverse in GF(3)")
    return _GF3_INV[a]


def build_A(n_lights: int, buttons: Sequence[Iterable[int]]) -> np.ndarray:
    """Return the L×B incidence matrix A over GF(3).
    Column j has a 1 for every (0-based) cell controlled by button j.
    """
    A = np.zeros((n_lights, len(buttons)), dtype=GF3_DTYPE)
    for j, cells in enumerate(buttons):
        for cell in cells:
            A[cell, j] = 1
    return A


def _eliminate(M: np.ndarray, target: int, source: int, col: int) -> None:
    """Clear M[target, col] by subtracting a multiple of row `source`."""
    factor = gf3_mul(int(M[target, col]), gf3_inv(M[source, col]))
    M[target, :] = gf3_sub(M[target, :], factor * M[source, :])


def gf3_rref_augmented(
    A: np.ndarray, b: np.ndarray
) -> Tuple[np.ndarray, list[int]]:
    """Return RREF of augmented matrix [A|b] over GF(3) and list of pivot columns.

    Every pivot row is scaled so its pivot entry is 1.
    """
    A = (np.asarray(A) % 3).astype(GF3_DTYPE)
    b = (np.asarray(b) % 3).astype(GF3_DTYPE).reshape(-1, 1)
    m, n = A.shape
    M = np.concatenate([A, b], axis=1)  # shape (m, n+1)

    rank = 0
    pivcols: list[int] = []
    for col in range(n):
        if rank == m:
            break
        # first nonzero entry at or below the current row
        pivot = None
        for r in range(rank, m):
            if M[r, col]:
                pivot = r
                break
        if pivot is None:
            continue
        if pivot != rank:
            M[[rank, pivot]] = M[[pivot, rank]]
        M[rank, :] = gf3_mul(M[rank, :], gf3_inv(M[rank, col]))
        for r in range(rank + 1, m):
            if M[r, col]:
                _eliminate(M, r, rank, col)
        pivcols.append(col)
        rank += 1

    # back substitution, bottom pivot row first
    for row in range(rank - 1, -1, -1):
        col = pivcols[row]
        for r in range(row):
            if M[r, col]:
                _eliminate(M, r, row, col)
    return M, pivcols


def gf3_solve_with_nullspace(
    A: np.ndarray, b: np.ndarray
) -> Tuple[Optional[np.ndarray], List[np.ndarray], bool]:
    """Solve A x = b over GF(3), and return a nullspace basis of A.

    Returns:
        x0: one particular solution (length n) or None if inconsistent
        basis: list of nullspace basis vectors v (length n) with A v = 0,
            one per free column
        solvable: bool
    """
    m, n = np.shape(A)
    R, _ = gf3_rref_augmented(A, b)

    x0 = np.zeros((n,), dtype=GF3_DTYPE)
    pivot_rows: dict[int, int] = {}  # pivot column -> row
    for row in range(m):
        nonzero = np.flatnonzero(R[row, :n])
        if len(nonzero) == 0:
            if R[row, n]:
                logger.debug("row %d reads 0 = %d, system inconsistent", row, R[row, n])
                return None, [], False
            continue
        pc = int(nonzero[0])
        pivot_rows[pc] = row
        x0[pc] = R[row, n]

    # free variable f: x_f = 1, each pivot variable compensates by -R[row, f]
    frees = [j for j in range(n) if j not in pivot_rows]
    basis: list[np.ndarray] = []
    for f in frees:
        v = np.zeros((n,), dtype=GF3_DTYPE)
        v[f] = 1
        for pc, row in pivot_rows.items():
            v[pc] = gf3_sub(0, int(R[row, f]))
        basis.append(v)

    logger.debug("rank=%d free=%d", len(pivot_rows), len(frees))
    return x0, basis, True


def _base3_counter(k: int) -> Iterator[Tuple[int, ...]]:
    """Yield all k-tuples over {0,1,2}, first coordinate changing fastest."""
    for digits in itertools.product(range(3), repeat=k):
        yield digits[::-1]


def gf3_bounded_min_weight(
    x0: np.ndarray,
    basis: Sequence[np.ndarray],
    caps: Optional[Sequence[int]] = None,
    max_candidates: Optional[int] = None,
) -> Optional[np.ndarray]:
    """Search x0 + span(basis) for the lightest point with x[i] <= min(caps[i], 2).

    Ties go to the first point in base-3 counter order. Returns None when no
    point respects the caps.
    """
    n = len(x0)
    limits = np.full((n,), 2, dtype=GF3_DTYPE)
    if caps is not None:
        limits = np.minimum(np.asarray(caps, dtype=GF3_DTYPE), 2)

    k = len(basis)
    n_candidates = 3**k
    if max_candidates is not None and n_candidates > max_candidates:
        raise SearchBudgetError(
            f"{k} free variables need {n_candidates} candidates, "
            f"budget is {max_candidates}"
        )
    logger.debug("enumerating %d candidates over %d free variables", n_candidates, k)

    best: Optional[np.ndarray] = None
    best_w = -1
    for coeffs in _base3_counter(k):
        cand = x0.copy()
        for y, v in zip(coeffs, basis):
            if y:
                cand = gf3_add(cand, y * v)
        if np.any(cand > limits):
            continue
        w = int(cand.sum())
        if best is None or w < best_w:
            best, best_w = cand, w
    return best


def gf3_min_weight_solution(
    A: np.ndarray,
    b: np.ndarray,
    caps: Optional[Sequence[int]] = None,
    max_candidates: Optional[int] = None,
) -> Tuple[Optional[np.ndarray], bool]:
    """Return the minimum-weight cap-respecting solution to A x = b over GF(3).

    Returns:
        (best, True) on success, (None, True) if the system is solvable but
        no point satisfies the caps, (None, False) if it is inconsistent.
    """
    x0, basis, ok = gf3_solve_with_nullspace(A, b)
    if not ok or x0 is None:
        return None, False
    return gf3_bounded_min_weight(x0, basis, caps, max_candidates), True
