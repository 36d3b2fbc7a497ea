from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from .board import Button, LightsState, Puzzle, color_value
from .strategies.base import NoPlanError

logger = logging.getLogger(__name__)


class CapExceededError(RuntimeError):
    """Raised when a policy presses a button that has used up its cap."""

    pass


def apply_presses(
    lights: LightsState | str,
    buttons: Sequence[Button],
    presses: Sequence[int],
) -> LightsState:
    """Replay `presses[i]` presses of every button i. Order does not matter."""
    if isinstance(lights, str):
        lights = LightsState.from_string(lights)
    if len(presses) != len(buttons):
        raise ValueError(
            f"Expected {len(buttons)} press counts, got {len(presses)}."
        )
    state = lights
    for button, count in zip(buttons, presses):
        if count:
            state = state.pressed(button.cells, int(count))
    return state


def validate(
    lights: LightsState | str,
    buttons: Sequence[Button],
    presses: Sequence[int],
    target,
) -> bool:
    """Check that `presses` turns every light to `target`."""
    final = apply_presses(lights, buttons, presses)
    return final.all_equal(color_value(target))


class Simulator:
    """Press one button at a time, as a player would."""

    def __init__(self, puzzle: Puzzle):
        self.puzzle = puzzle
        self.presses = np.zeros((puzzle.n_buttons,), dtype=np.int64)

    def reset(self) -> None:
        self.presses[:] = 0

    def remaining(self, action: int) -> int:
        return self.puzzle.buttons[action].cap - int(self.presses[action])

    def step(self, state: LightsState, action: int) -> LightsState:
        if self.remaining(action) <= 0:
            raise CapExceededError(
                f"Button {action + 1} already pressed "
                f"{self.puzzle.buttons[action].cap} times."
            )
        self.presses[action] += 1
        return state.pressed(self.puzzle.buttons[action].cells)

    def run(self, init: LightsState, policy, T: int):
        """Let `policy` press up to T buttons.

        Returns (final_state, actions, history) where history holds the number
        of off-target lights before the first press and after every press.
        """
        self.reset()
        target = self.puzzle.target
        s = init.copy()
        history = [s.count_off_target(target)]
        actions = []
        for t in range(T):
            if history[-1] == 0:
                break
            try:
                a = policy.select_action(s, t, history)
            except NoPlanError:
                logger.debug("policy gave up at t=%d", t)
                break
            s = self.step(s, a)
            actions.append(a)
            history.append(s.count_off_target(target))
        return s, actions, history
