from __future__ import annotations

from typing import Optional

from ..board import LightsState, Puzzle
from ..solver import SolveStatus, solve
from .base import NoPlanError, Strategy


class LinearAlgebraMinWeight(Strategy):
    """Solve the puzzle over GF(3) for a minimum-weight plan upfront."""

    def __init__(self, max_candidates: Optional[int] = None):
        self.max_candidates = max_candidates
        self.plan: list[int] | None = None
        self.status: Optional[SolveStatus] = None
        self.puzzle: Optional[Puzzle] = None

    def reset(self, puzzle: Puzzle, params: dict | None = None) -> None:
        self.puzzle = puzzle
        self.plan = None
        self.status = None
        if params is not None and "max_candidates" in params:
            self.max_candidates = params["max_candidates"]

    def _compute_plan(self, state: LightsState) -> None:
        assert self.puzzle is not None, "Strategy not initialized properly."
        result = solve(
            state,
            self.puzzle.buttons,
            self.puzzle.target,
            max_candidates=self.max_candidates,
        )
        self.status = result.status
        if result.presses is None:
            self.plan = []
            return
        # button i appears presses[i] times, in button order
        self.plan = [
            i for i, count in enumerate(result.presses) for _ in range(int(count))
        ]

    def select_action(self, state: LightsState, t: int, history) -> int:
        if self.plan is None:
            self._compute_plan(state)

        if self.plan is None or len(self.plan) == 0:
            raise NoPlanError(
                "No valid linear algebra solution for this puzzle."
            )
        return int(self.plan.pop(0))
