from __future__ import annotations


def success_within_budget(off_target_history, budget_T: int) -> int:
    return int(any(c == 0 for c in off_target_history[: budget_T + 1]))


def presses_used(off_target_history) -> int:
    # one entry before the first press, then one per press
    return len(off_target_history) - 1


def accuracy(user_total: int, optimal_total: int | None, solved: bool) -> int:
    """Score a player's (or strategy's) run against the optimal total, 0-100.

    optimal_total is None when the puzzle has no solution.
    """
    if optimal_total is None:
        return 0
    if not solved:
        # gave up: partial credit for effort, capped well below a solve
        if optimal_total == 0:
            return 0
        return max(0, min(50, round(user_total / optimal_total * 50)))
    if optimal_total == 0:
        return 100 if user_total == 0 else 0
    if user_total <= optimal_total:
        return 100
    return max(0, round(optimal_total / user_total * 100))
