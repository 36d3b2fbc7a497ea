from __future__ import annotations

from typing import Optional

import numpy as np

from .board import Button, LightsState, Puzzle


def sample_puzzle(
    n_lights: int,
    n_buttons: int,
    rng: np.random.Generator,
    max_cells: Optional[int] = None,
    cap_range: tuple[int, int] = (1, 3),
    target: Optional[int] = None,
) -> Puzzle:
    """Draw random light colors, random non-empty buttons and random caps."""
    max_cells = n_lights if max_cells is None else min(max_cells, n_lights)
    lights = LightsState(rng.integers(0, 3, size=n_lights))
    buttons = []
    for _ in range(n_buttons):
        size = int(rng.integers(1, max_cells + 1))
        cells = rng.choice(n_lights, size=size, replace=False)
        cap = int(rng.integers(cap_range[0], cap_range[1] + 1))
        buttons.append(Button(cells.tolist(), cap))
    if target is None:
        target = int(rng.integers(0, 3))
    return Puzzle(lights, buttons, target)


def sample_puzzles(
    n_lights: int,
    n_buttons: int,
    n_samples: int,
    rng: np.random.Generator,
    max_cells: Optional[int] = None,
    cap_range: tuple[int, int] = (1, 3),
) -> list[Puzzle]:
    return [
        sample_puzzle(n_lights, n_buttons, rng, max_cells, cap_range)
        for _ in range(n_samples)
    ]
