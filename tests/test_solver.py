"""
Tests for colorlights/solver.py, including randomized cross-checks against the
brute-force oracle.
"""

import numpy as np
import pytest

from colorlights.algebra import SearchBudgetError
from colorlights.board import Button, Puzzle
from colorlights.evaluation.oracle import brute_force_min_presses
from colorlights.sampling import sample_puzzle
from colorlights.simulator import validate
from colorlights.solver import SolveStatus, solve, solve_puzzle


@pytest.mark.parametrize(
    "lights, buttons, target, status, presses",
    [
        # one light, one button
        ("R", [Button([0], 1)], "G", SolveStatus.SOLVED, [1]),
        ("R", [Button([0], 7)], "B", SolveStatus.SOLVED, [2]),
        # one press cycles all three lights at once
        ("RRR", [Button([0, 1, 2], 1)], "G", SolveStatus.SOLVED, [1]),
        # each light needs its own press but caps forbid any
        ("RR", [Button([0], 0), Button([1], 0)], "G", SolveStatus.CAPS_EXHAUSTED, None),
        # light 2 is never pressed and is not already at the target
        ("RG", [Button([0], 5)], "R", SolveStatus.INCONSISTENT, None),
        ("RG", [Button([0], 5)], "B", SolveStatus.INCONSISTENT, None),
        # already solved
        ("GG", [Button([0, 1], 2)], "G", SolveStatus.SOLVED, [0]),
    ],
)
def test_scenarios(lights, buttons, target, status, presses):
    result = solve(lights, buttons, target)
    assert result.status is status
    if presses is None:
        assert result.presses is None
        assert result.total is None
        assert not result.ok
    else:
        assert result.presses.tolist() == presses
        assert result.total == sum(presses)
        assert result.ok


def test_cap_of_one_excludes_residue_two():
    buttons = [Button([0, 1], 2), Button([0], 1)]
    assert solve("GR", buttons, "G").status is SolveStatus.CAPS_EXHAUSTED
    buttons = [Button([0, 1], 2), Button([0], 2)]
    result = solve("GR", buttons, "G")
    assert result.presses.tolist() == [1, 2]
    assert result.rank == 2
    assert result.n_free == 0


def test_minimum_not_at_particular_solution():
    buttons = [Button([0], 2), Button([1], 2), Button([0, 1], 2)]
    result = solve("RR", buttons, "G")
    assert result.presses.tolist() == [0, 0, 1]
    assert result.rank == 2
    assert result.n_free == 1


def test_inconsistent_result_has_no_rank():
    result = solve("RG", [Button([0], 5)], "R")
    assert result.rank is None
    assert result.n_free is None


def test_budget_is_forwarded():
    buttons = [Button([0], 2) for _ in range(4)]
    with pytest.raises(SearchBudgetError):
        solve("R", buttons, "G", max_candidates=10)


def test_large_caps_never_exceed_two():
    result = solve("R", [Button([0], 100)], "B")
    assert result.presses.tolist() == [2]


class TestRandomizedAgainstOracle:
    """Cross-check the GF(3) solver against direct enumeration."""

    @pytest.fixture
    def puzzles(self):
        rng = np.random.default_rng(2024)
        out = []
        for _ in range(300):
            n_lights = int(rng.integers(1, 6))
            n_buttons = int(rng.integers(1, 6))
            out.append(
                sample_puzzle(n_lights, n_buttons, rng, max_cells=3, cap_range=(0, 3))
            )
        return out

    def test_round_trip(self, puzzles):
        for puzzle in puzzles:
            result = solve_puzzle(puzzle)
            if result.ok:
                assert validate(
                    puzzle.lights, puzzle.buttons, result.presses, puzzle.target
                ), puzzle

    def test_caps_respected(self, puzzles):
        for puzzle in puzzles:
            result = solve_puzzle(puzzle)
            if result.ok:
                limits = np.minimum(puzzle.caps, 2)
                assert (result.presses <= limits).all(), puzzle
                assert (result.presses >= 0).all(), puzzle

    def test_minimal_total(self, puzzles):
        for puzzle in puzzles:
            result = solve_puzzle(puzzle)
            brute = brute_force_min_presses(puzzle)
            if brute is None:
                assert not result.ok, puzzle
            else:
                assert result.total == int(brute.sum()), puzzle

    def test_inconsistent_iff_uncapped_unsolvable(self, puzzles):
        for puzzle in puzzles:
            uncapped = Puzzle(
                puzzle.lights,
                [Button(b.cells, 2) for b in puzzle.buttons],
                puzzle.target,
            )
            result = solve_puzzle(puzzle)
            unsolvable = brute_force_min_presses(uncapped) is None
            assert (result.status is SolveStatus.INCONSISTENT) == unsolvable, puzzle
