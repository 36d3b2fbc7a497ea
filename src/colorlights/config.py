from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .board import Button, Puzzle, PuzzleError

SOLVER_DEFAULTS = {"max_candidates": None}


def read_yaml(path: str | Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    if not isinstance(cfg, dict):
        raise PuzzleError(f"{path}: expected a mapping at the top level")
    return cfg


def _require(section: dict, key: str, where: str) -> Any:
    if key not in section:
        raise PuzzleError(f"{where}: missing required key {key!r}")
    return section[key]


def _is_int(value: Any) -> bool:
    # YAML `true` loads as bool, which is an int subclass
    return isinstance(value, int) and not isinstance(value, bool)


def parse_button(item: Any, index: int) -> Button:
    """Parse one button entry; light indices are 1-based."""
    where = f"button {index + 1}"
    if not isinstance(item, dict):
        raise PuzzleError(f"{where}: expected a mapping with 'lights' and 'cap'")
    lights = _require(item, "lights", where)
    if _is_int(lights):
        lights = [lights]
    if not isinstance(lights, list):
        raise PuzzleError(f"{where}: 'lights' must be a list of light indices")
    for i in lights:
        if not _is_int(i):
            raise PuzzleError(f"{where}: light index {i!r} is not an integer")
    cap = _require(item, "cap", where)
    if not _is_int(cap):
        raise PuzzleError(f"{where}: cap {cap!r} is not an integer")
    cells = [i - 1 for i in lights]
    if not cells:
        raise PuzzleError(f"Button {index + 1} must control at least one light.")
    return Button(cells, cap)


def parse_puzzle(section: dict) -> Puzzle:
    """Build a Puzzle from the `puzzle:` section of a config file."""
    if not isinstance(section, dict):
        raise PuzzleError("puzzle: expected a mapping")
    lights = _require(section, "lights", "puzzle")
    if isinstance(lights, (list, tuple)):
        lights = "".join(str(c) for c in lights)
    target = str(_require(section, "target", "puzzle"))
    buttons = _require(section, "buttons", "puzzle")
    if not isinstance(buttons, list):
        raise PuzzleError("puzzle.buttons: expected a list")

    n_lights = section.get("n_lights")
    if n_lights is not None and int(n_lights) != len(lights):
        raise PuzzleError(
            "The length of the light string must equal the number of lights."
        )
    return Puzzle(
        str(lights),
        [parse_button(item, i) for i, item in enumerate(buttons)],
        target,
    )


def solver_options(cfg: dict) -> dict:
    opts = dict(SOLVER_DEFAULTS)
    opts.update(cfg.get("solver") or {})
    if opts["max_candidates"] is not None:
        opts["max_candidates"] = int(opts["max_candidates"])
    return opts


def load_puzzle(path: str | Path) -> tuple[Puzzle, dict]:
    """Read a puzzle file; returns the puzzle and the solver options."""
    cfg = read_yaml(path)
    return parse_puzzle(_require(cfg, "puzzle", str(path))), solver_options(cfg)


def parse_strategies(cfg_strats):
    """Parse strategy configs from YAML."""
    parsed = []
    for item in cfg_strats:
        if isinstance(item, str):
            parsed.append({"name": item, "params": {}})
        elif isinstance(item, dict) and "name" in item:
            d = dict(item)  # shallow copy
            d.setdefault("params", {})
            parsed.append({"name": d["name"], "params": d["params"] or {}})
        else:
            raise ValueError(f"Invalid strategy spec: {item}")
    return parsed


def load_sweep(path: str | Path) -> dict:
    """Read a sweep file and fill in defaults for optional keys."""
    cfg = _require(read_yaml(path), "experiment", str(path))
    puzzle = _require(cfg, "puzzle", "experiment")
    initial = cfg.get("initial_states") or {}
    cap_lo, cap_hi = puzzle.get("cap_range", [1, 3])
    return {
        "n_lights": int(_require(puzzle, "n_lights", "experiment.puzzle")),
        "n_buttons": int(_require(puzzle, "n_buttons", "experiment.puzzle")),
        "max_cells": puzzle.get("max_cells"),
        "cap_range": (int(cap_lo), int(cap_hi)),
        "strategies": parse_strategies(
            cfg.get("strategies", ["linear_algebra_minweight"])
        ),
        "budget_T": int(cfg.get("budget_T", 50)),
        "n_samples": int(initial.get("n_samples", 100)),
        "seed": int(initial.get("seed", 0)),
        "cross_check": bool(cfg.get("cross_check", False)),
        "output_dir": Path(cfg.get("output_dir", "results/runs")),
        "solver": solver_options(cfg),
    }
