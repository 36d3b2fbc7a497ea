"""Slow reference solvers used to cross-check the GF(3) solver.

Both explore every reachable press combination, so they are only practical for
a handful of buttons.
"""
from __future__ import annotations

import itertools
from collections import deque
from typing import Optional

import numpy as np

from ..board import Puzzle
from ..simulator import apply_presses


def bfs_min_presses(puzzle: Puzzle) -> Optional[np.ndarray]:
    """Breadth-first search over press vectors, one press per edge.

    Presses beyond 2 per button only repeat a color cycle, so each button is
    limited to min(cap, 2) presses. Returns None if no state reaches the target.
    """
    limits = [min(cap, 2) for cap in puzzle.caps]
    start = (0,) * puzzle.n_buttons
    queue = deque([(puzzle.lights, start)])
    visited = {start}
    while queue:
        lights, presses = queue.popleft()
        if lights.all_equal(puzzle.target):
            return np.array(presses, dtype=np.int64)
        for i, button in enumerate(puzzle.buttons):
            if presses[i] >= limits[i]:
                continue
            nxt = presses[:i] + (presses[i] + 1,) + presses[i + 1 :]
            if nxt in visited:
                continue
            visited.add(nxt)
            queue.append((lights.pressed(button.cells), nxt))
    return None


def brute_force_min_presses(puzzle: Puzzle) -> Optional[np.ndarray]:
    """Try every press vector in {0..min(cap, 2)}^B and keep the lightest valid one."""
    ranges = [range(min(cap, 2) + 1) for cap in puzzle.caps]
    best = None
    best_w = -1
    for presses in itertools.product(*ranges):
        w = sum(presses)
        if best is not None and w >= best_w:
            continue
        final = apply_presses(puzzle.lights, puzzle.buttons, presses)
        if final.all_equal(puzzle.target):
            best, best_w = np.array(presses, dtype=np.int64), w
    return best
