"""
Unit tests for colorlights/algebra.py: GF(3) arithmetic, RREF, general
solution extraction and the bounded minimum-weight search.
"""

import itertools

import numpy as np
import pytest

from colorlights.algebra import (
    SearchBudgetError,
    build_A,
    gf3_add,
    gf3_bounded_min_weight,
    gf3_inv,
    gf3_min_weight_solution,
    gf3_mul,
    gf3_rref_augmented,
    gf3_solve_with_nullspace,
    gf3_sub,
)


class TestArithmetic:
    def test_add_wraps(self):
        assert gf3_add(2, 2) == 1
        assert gf3_add(1, 2) == 0

    def test_sub_never_negative(self):
        assert gf3_sub(0, 1) == 2
        assert gf3_sub(1, 2) == 2
        assert gf3_sub(np.array([0, 1, 2]), 2).tolist() == [1, 2, 0]

    def test_mul(self):
        assert gf3_mul(2, 2) == 1
        assert gf3_mul(2, 0) == 0

    def test_inverse(self):
        assert gf3_inv(1) == 1
        assert gf3_inv(2) == 2
        for a in (1, 2):
            assert gf3_mul(a, gf3_inv(a)) == 1

    def test_inverse_of_zero_fails_loudly(self):
        with pytest.raises(ZeroDivisionError):
            gf3_inv(0)
        with pytest.raises(ZeroDivisionError):
            gf3_inv(3)


def test_build_A_marks_controlled_cells():
    A = build_A(3, [[0, 2], [1]])
    assert A.tolist() == [[1, 0], [0, 1], [1, 0]]


class TestRref:
    def test_pivot_of_two_is_normalized(self):
        # eliminating row 1 with row 0 leaves a pivot of 2 in column 1
        A = np.array([[1, 1], [1, 0]])
        b = np.array([0, 1])
        M, pivcols = gf3_rref_augmented(A, b)
        assert pivcols == [0, 1]
        assert M.tolist() == [[1, 0, 1], [0, 1, 2]]

    def test_input_not_modified(self):
        A = np.array([[1, 1], [1, 0]])
        b = np.array([0, 1])
        gf3_rref_augmented(A, b)
        assert A.tolist() == [[1, 1], [1, 0]]
        assert b.tolist() == [0, 1]

    def test_skips_column_without_pivot(self):
        A = np.array([[0, 1, 1], [0, 1, 0]])
        _, pivcols = gf3_rref_augmented(A, np.zeros(2))
        assert pivcols == [1, 2]

    def test_random_matrices_are_reduced(self):
        rng = np.random.default_rng(7)
        for _ in range(50):
            m, n = rng.integers(1, 6, size=2)
            A = rng.integers(0, 3, size=(m, n))
            b = rng.integers(0, 3, size=m)
            M, pivcols = gf3_rref_augmented(A, b)
            for row, col in enumerate(pivcols):
                unit = np.zeros(m, dtype=int)
                unit[row] = 1
                assert M[:, col].tolist() == unit.tolist()
            # rows below the rank have an empty coefficient part
            assert not M[len(pivcols):, :n].any()


class TestGeneralSolution:
    def test_inconsistent_system(self):
        A = np.array([[1, 0], [1, 0]])
        x0, basis, ok = gf3_solve_with_nullspace(A, np.array([1, 2]))
        assert (x0, basis, ok) == (None, [], False)

    def test_basis_for_free_column(self):
        A = np.array([[1, 0, 1], [0, 1, 1]])
        x0, basis, ok = gf3_solve_with_nullspace(A, np.array([1, 1]))
        assert ok
        assert x0.tolist() == [1, 1, 0]
        assert len(basis) == 1
        assert basis[0].tolist() == [2, 2, 1]

    def test_random_systems_satisfy_invariants(self):
        rng = np.random.default_rng(11)
        for _ in range(200):
            m, n = rng.integers(1, 5, size=2)
            A = rng.integers(0, 3, size=(m, n))
            b = rng.integers(0, 3, size=m)
            x0, basis, ok = gf3_solve_with_nullspace(A, b)
            brute = [
                x
                for x in itertools.product(range(3), repeat=n)
                if not ((A @ np.array(x) - b) % 3).any()
            ]
            if not ok:
                assert brute == []
                continue
            assert not ((A @ x0 - b) % 3).any()
            for v in basis:
                assert not ((A @ v) % 3).any()
            # the affine space has exactly 3^k points
            assert len(brute) == 3 ** len(basis)


class TestBoundedSearch:
    def test_no_free_variables_returns_x0(self):
        x0 = np.array([1, 2])
        assert gf3_bounded_min_weight(x0, []).tolist() == [1, 2]

    def test_finds_lighter_point_than_x0(self):
        x0 = np.array([1, 1, 0])
        basis = [np.array([2, 2, 1])]
        assert gf3_bounded_min_weight(x0, basis).tolist() == [0, 0, 1]

    def test_caps_move_the_optimum(self):
        x0 = np.array([1, 1, 0])
        basis = [np.array([2, 2, 1])]
        best = gf3_bounded_min_weight(x0, basis, caps=[5, 5, 0])
        assert best.tolist() == [1, 1, 0]

    def test_caps_exclude_everything(self):
        x0 = np.array([1, 0])
        basis = [np.array([2, 1])]
        assert gf3_bounded_min_weight(x0, basis, caps=[0, 0]) is None

    def test_first_minimum_wins_ties(self):
        # [1, 0] and [0, 1] both weigh 1; [1, 0] comes first
        x0 = np.array([1, 0])
        basis = [np.array([2, 1])]
        assert gf3_bounded_min_weight(x0, basis).tolist() == [1, 0]

    def test_budget(self):
        x0 = np.zeros(3, dtype=int)
        basis = [np.eye(3, dtype=int)[i] for i in range(3)]
        with pytest.raises(SearchBudgetError):
            gf3_bounded_min_weight(x0, basis, max_candidates=26)
        assert gf3_bounded_min_weight(x0, basis, max_candidates=27).tolist() == [0, 0, 0]


def test_min_weight_solution_statuses():
    A = np.array([[1, 1]])
    best, ok = gf3_min_weight_solution(A, np.array([1]), caps=[0, 2])
    assert ok and best.tolist() == [0, 1]

    best, ok = gf3_min_weight_solution(A, np.array([1]), caps=[0, 0])
    assert ok and best is None

    best, ok = gf3_min_weight_solution(np.array([[0, 0]]), np.array([1]))
    assert not ok and best is None
