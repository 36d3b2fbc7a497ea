from __future__ import annotations
from typing import Protocol
from ..board import LightsState, Puzzle


class NoPlanError(Exception):
    """Raised by a strategy when no valid plan exists for the given state."""

    pass


class Strategy(Protocol):
    def reset(self, puzzle: Puzzle, params: dict | None = None): ...
    def select_action(self, state: LightsState, t: int, history) -> int: ...
