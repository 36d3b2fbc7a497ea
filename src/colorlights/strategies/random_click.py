from __future__ import annotations

from typing import Optional

import numpy as np

from ..board import LightsState, Puzzle
from .base import NoPlanError, Strategy


class RandomClick(Strategy):
    """Press a random button that still has presses left."""

    def __init__(self, rng: np.random.Generator | None = None):
        self.rng = rng or np.random.default_rng()

        self.puzzle: Optional[Puzzle] = None
        self.used: Optional[np.ndarray] = None

    def reset(self, puzzle: Puzzle, params: dict | None = None):
        self.puzzle = puzzle
        self.used = np.zeros((puzzle.n_buttons,), dtype=np.int64)

        if params is not None:
            rng = params.get("rng", None)
            if isinstance(rng, np.random.Generator):
                self.rng = rng

    def select_action(self, state: LightsState, t: int, history) -> int:
        assert (
            self.puzzle is not None and self.used is not None
        ), "Strategy not initialized properly."

        available = np.flatnonzero(np.asarray(self.puzzle.caps) > self.used)
        if len(available) == 0:
            raise NoPlanError("RandomClick: every button is at its cap.")
        a = int(self.rng.choice(available))
        self.used[a] += 1
        return a
