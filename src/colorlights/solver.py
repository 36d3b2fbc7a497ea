from __future__ import annotations

import enum
import logging
from typing import Optional, Sequence

import numpy as np

from .algebra import build_A, gf3_bounded_min_weight, gf3_solve_with_nullspace
from .board import Button, LightsState, Puzzle

logger = logging.getLogger(__name__)


class SolveStatus(enum.Enum):
    SOLVED = "solved"
    # target delta is not in the column space of the incidence matrix
    INCONSISTENT = "inconsistent"
    # linear system solvable, but every residue point breaks some cap
    CAPS_EXHAUSTED = "caps_exhausted"


class SolveResult:
    def __init__(
        self,
        status: SolveStatus,
        presses: Optional[np.ndarray] = None,
        rank: Optional[int] = None,
        n_free: Optional[int] = None,
    ):
        self.status = status
        self.presses = presses
        self.rank = rank
        self.n_free = n_free

    @property
    def ok(self) -> bool:
        return self.status is SolveStatus.SOLVED

    @property
    def total(self) -> Optional[int]:
        if self.presses is None:
            return None
        return int(self.presses.sum())

    def __repr__(self):
        return (
            f"SolveResult(status={self.status.value}, presses="
            f"{None if self.presses is None else self.presses.tolist()})"
        )


def solve(
    lights: LightsState | str,
    buttons: Sequence[Button],
    target,
    max_candidates: Optional[int] = None,
) -> SolveResult:
    """Find the fewest presses that turn every light to `target`.

    Raises SearchBudgetError if the free-variable space is larger than
    `max_candidates`.
    """
    return solve_puzzle(Puzzle(lights, buttons, target), max_candidates)


def solve_puzzle(
    puzzle: Puzzle, max_candidates: Optional[int] = None
) -> SolveResult:
    A = build_A(puzzle.n_lights, [b.cells for b in puzzle.buttons])
    x0, basis, solvable = gf3_solve_with_nullspace(A, puzzle.delta())
    if not solvable or x0 is None:
        logger.info("%r: no combination of presses reaches the target", puzzle)
        return SolveResult(SolveStatus.INCONSISTENT)

    n_free = len(basis)
    rank = puzzle.n_buttons - n_free
    best = gf3_bounded_min_weight(x0, basis, puzzle.caps, max_candidates)
    if best is None:
        logger.info("%r: caps exclude all %d solutions", puzzle, 3**n_free)
        return SolveResult(SolveStatus.CAPS_EXHAUSTED, rank=rank, n_free=n_free)

    result = SolveResult(SolveStatus.SOLVED, best, rank=rank, n_free=n_free)
    logger.info("%r: solved with %d presses", puzzle, result.total)
    return result
