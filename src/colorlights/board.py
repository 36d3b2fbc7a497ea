from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

COLORS = "RGB"


class PuzzleError(ValueError):
    """Raised when puzzle parameters are malformed."""

    pass


def color_value(color) -> int:
    """Map a color symbol ('R', 'G', 'B') or value (0, 1, 2) to its value."""
    if isinstance(color, str):
        if len(color) != 1 or color.upper() not in COLORS:
            raise PuzzleError(
                f"Invalid color {color!r}. Only R, G, or B allowed."
            )
        return COLORS.index(color.upper())
    value = int(color)
    if value not in (0, 1, 2):
        raise PuzzleError(f"Invalid color value {value}.")
    return value


def color_name(value: int) -> str:
    return COLORS[int(value) % 3]


class LightsState:
    def __init__(self, state: np.ndarray | Sequence[int]):
        self.state = np.asarray(state, dtype=np.int64).reshape(-1) % 3

    @staticmethod
    def from_string(lights: str) -> "LightsState":
        values = []
        for i, c in enumerate(lights):
            if c.upper() not in COLORS:
                raise PuzzleError(
                    f"Invalid light color detected at position {i + 1}. "
                    "Only R, G, or B allowed."
                )
            values.append(COLORS.index(c.upper()))
        return LightsState(values)

    @property
    def n(self) -> int:
        return len(self.state)

    def copy(self) -> "LightsState":
        return LightsState(self.state.copy())

    def pressed(self, cells: Iterable[int], times: int = 1) -> "LightsState":
        """Return the state after stepping every cell in `cells` `times` times."""
        nxt = self.state.copy()
        for cell in cells:
            nxt[cell] = (nxt[cell] + times) % 3
        return LightsState(nxt)

    def count_off_target(self, target: int) -> int:
        return int((self.state != target).sum())

    def all_equal(self, target: int) -> bool:
        return bool(np.all(self.state == target))

    def __eq__(self, other) -> bool:
        if not isinstance(other, LightsState):
            return NotImplemented
        return bool(np.array_equal(self.state, other.state))

    def __hash__(self) -> int:
        return hash(self.state.tobytes())

    def __repr__(self):
        return f"LightsState({str(self)!r})"

    def __str__(self) -> str:
        return "".join(COLORS[v] for v in self.state)


class Button:
    """A button stepping a fixed set of (0-based) cells, pressable up to `cap` times."""

    def __init__(self, cells: Iterable[int], cap: int):
        self.cells = frozenset(int(c) for c in cells)
        self.cap = int(cap)
        if not self.cells:
            raise PuzzleError("A button must control at least one light.")
        if self.cap < 0:
            raise PuzzleError("Maximum presses cannot be negative.")

    def __repr__(self):
        return f"Button(cells={sorted(self.cells)}, cap={self.cap})"


class Puzzle:
    """Initial lights, the buttons acting on them and the target color."""

    def __init__(
        self,
        lights: LightsState | str,
        buttons: Sequence[Button],
        target,
    ):
        if isinstance(lights, str):
            lights = LightsState.from_string(lights)
        self.lights = lights
        self.buttons = list(buttons)
        self.target = color_value(target)
        for i, button in enumerate(self.buttons):
            for cell in button.cells:
                if cell < 0 or cell >= self.lights.n:
                    raise PuzzleError(
                        f"Button {i + 1} controls an invalid light index {cell + 1}."
                    )

    @property
    def n_lights(self) -> int:
        return self.lights.n

    @property
    def n_buttons(self) -> int:
        return len(self.buttons)

    @property
    def caps(self) -> list[int]:
        return [b.cap for b in self.buttons]

    def delta(self) -> np.ndarray:
        """Per-cell number of steps (mod 3) needed to reach the target."""
        return (self.target - self.lights.state) % 3

    def __repr__(self):
        return (
            f"Puzzle(lights={str(self.lights)!r}, buttons={self.n_buttons}, "
            f"target={color_name(self.target)!r})"
        )
