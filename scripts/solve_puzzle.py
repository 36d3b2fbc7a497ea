import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from colorlights.algebra import SearchBudgetError
from colorlights.board import Button, Puzzle, PuzzleError, color_name
from colorlights.config import SOLVER_DEFAULTS, load_puzzle
from colorlights.simulator import validate
from colorlights.solver import SolveStatus, solve_puzzle


def _ask_int(prompt: str) -> int:
    raw = input(prompt).strip()
    try:
        return int(raw)
    except ValueError:
        raise PuzzleError(f"Expected an integer, got {raw!r}.") from None


def prompt_puzzle() -> Puzzle:
    """Ask for the puzzle on stdin, one question at a time."""
    n_lights = _ask_int("Enter number of lights: ")
    n_buttons = _ask_int("Enter number of buttons: ")
    lights = input("Enter initial light colors (R/G/B string): ").strip()
    if len(lights) != n_lights:
        raise PuzzleError(
            "The length of the light string must equal the number of lights."
        )
    target = input("Enter target color (R/G/B): ").strip()
    if target not in ("R", "G", "B"):
        raise PuzzleError("Target color must be R, G, or B.")

    buttons = []
    for i in range(n_buttons):
        k = _ask_int(f"Enter number of lights controlled by button {i + 1}: ")
        if k <= 0:
            raise PuzzleError(f"Button {i + 1} must control at least one light.")
        raw = input(f"Enter {k} light indices controlled by button {i + 1}: ")
        indices = []
        for tok in raw.split()[:k]:
            try:
                indices.append(int(tok))
            except ValueError:
                raise PuzzleError(f"Light index {tok!r} is not an integer.") from None
        if len(indices) != k:
            raise PuzzleError(f"Expected {k} light indices for button {i + 1}.")
        for idx in indices:
            if idx < 1 or idx > n_lights:
                raise PuzzleError(f"Light index {idx} is out of bounds.")
        cap = _ask_int(f"Enter maximum presses for button {i + 1}: ")
        buttons.append(Button([idx - 1 for idx in indices], cap))
    return Puzzle(lights, buttons, target)


def report(puzzle: Puzzle, result) -> None:
    target = color_name(puzzle.target)
    if not result.ok:
        print(f"\nImpossible to turn all lights to {target}")
        if result.status is SolveStatus.INCONSISTENT:
            print("No combination of presses reaches the target color.")
        else:
            print("Every combination that works needs more presses than allowed.")
        return

    print("\nSolution found! Button presses:")
    for i, count in enumerate(result.presses):
        print(f"Button {i + 1}: {int(count)} times")
    print(f"Total button presses: {result.total}")
    valid = validate(puzzle.lights, puzzle.buttons, result.presses, puzzle.target)
    print(f"Solution validation: {'Valid' if valid else 'Invalid'}")


def main():
    ap = argparse.ArgumentParser(
        description="Find the fewest button presses that turn every light to one color."
    )
    ap.add_argument(
        "--config", default=None, help="Puzzle YAML file (prompts if omitted)"
    )
    ap.add_argument(
        "--max-candidates",
        type=int,
        default=None,
        help="Refuse searches larger than this many candidates",
    )
    ap.add_argument("--log-level", default="WARNING")
    args = ap.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.config:
            puzzle, opts = load_puzzle(args.config)
        else:
            puzzle, opts = prompt_puzzle(), dict(SOLVER_DEFAULTS)
    except PuzzleError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.max_candidates is not None:
        opts["max_candidates"] = args.max_candidates

    try:
        result = solve_puzzle(puzzle, max_candidates=opts["max_candidates"])
    except SearchBudgetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    report(puzzle, result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
