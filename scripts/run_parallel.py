import argparse
import csv
import logging
import multiprocessing as mp
import os
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from colorlights.algebra import SearchBudgetError
from colorlights.config import load_sweep
from colorlights.evaluation.metrics import (
    accuracy,
    presses_used,
    success_within_budget,
)
from colorlights.evaluation.oracle import bfs_min_presses
from colorlights.sampling import sample_puzzles
from colorlights.simulator import Simulator, validate
from colorlights.solver import solve_puzzle
from colorlights.strategies import LinearAlgebraMinWeight, RandomClick

logger = logging.getLogger("run_parallel")

mp.freeze_support()

# solver refused the puzzle because 3^free exceeds solver.max_candidates
BUDGET_EXCEEDED = "budget_exceeded"

FIELDNAMES = [
    "puzzle_id",
    "n_lights",
    "n_buttons",
    "rank",
    "n_free",
    "status",
    "optimal_total",
    "valid",
    "oracle_total",
    "oracle_agrees",
    "solve_ms",
    "strategy",
    "solved",
    "presses_used",
    "accuracy",
]


def make_strategy(name: str, rng: np.random.Generator | None = None, params=None):
    name = name.lower()
    if name == "random_click":
        return RandomClick(rng=rng)
    if name == "linear_algebra_minweight":
        return LinearAlgebraMinWeight(
            max_candidates=(params or {}).get("max_candidates")
        )
    raise ValueError(f"Unknown strategy: {name}")


def _task_seed(base_seed: int, *coords: int) -> int:
    """Generate deterministic seed for each task."""
    ss = np.random.SeedSequence([int(base_seed)] + [int(c) for c in coords])

    return int(
        ss.generate_state(1, dtype=np.uint64)[0] & np.uint64((1 << 63) - 1)
    )


def make_batches(puzzles, strat_specs, batch_size):
    """Create job batches for parallel processing."""
    n = len(puzzles)
    for s_idx, spec in enumerate(strat_specs):
        for lo in range(0, n, batch_size):
            hi = min(lo + batch_size, n)
            yield {
                "strategy_spec": spec,
                "strategy_idx": s_idx,
                "idx_lo": lo,
                "idx_hi": hi,
                "puzzles": puzzles[lo:hi],
            }


def _run_batch(job):
    """Solve, optionally cross-check, and play one batch of puzzles."""
    max_steps = job["budget_T"]
    base_seed = job["base_seed"]
    max_candidates = job["solver"]["max_candidates"]
    strat_name = job["strategy_spec"]["name"]
    strat_params = job["strategy_spec"]["params"] or {}

    rows = []
    for offset, puzzle in enumerate(job["puzzles"]):
        puzzle_id = job["idx_lo"] + offset

        start_time = time.perf_counter()
        try:
            result = solve_puzzle(puzzle, max_candidates=max_candidates)
        except SearchBudgetError as e:
            logger.warning("puzzle %d skipped: %s", puzzle_id, e)
            row = dict.fromkeys(FIELDNAMES, "")
            row.update(
                {
                    "puzzle_id": puzzle_id,
                    "n_lights": puzzle.n_lights,
                    "n_buttons": puzzle.n_buttons,
                    "status": BUDGET_EXCEEDED,
                    "solve_ms": (time.perf_counter() - start_time) * 1000,
                    "strategy": strat_name,
                }
            )
            rows.append(row)
            continue
        solve_ms = (time.perf_counter() - start_time) * 1000
        valid = (
            int(validate(puzzle.lights, puzzle.buttons, result.presses, puzzle.target))
            if result.ok
            else ""
        )

        oracle_total, agree = "", ""
        if job["cross_check"]:
            oracle = bfs_min_presses(puzzle)
            oracle_total = "" if oracle is None else int(oracle.sum())
            agree = int(
                (oracle is None and not result.ok)
                or (oracle is not None and oracle_total == result.total)
            )

        run_rng = np.random.default_rng(
            _task_seed(base_seed, job["strategy_idx"], puzzle_id)
        )
        strat = make_strategy(strat_name, rng=run_rng, params=strat_params)
        strat.reset(
            puzzle,
            params={"rng": run_rng, "max_candidates": max_candidates, **strat_params},
        )
        simulator = Simulator(puzzle)
        _, _, history = simulator.run(puzzle.lights, strat, T=max_steps)
        solved = success_within_budget(history, max_steps)
        used = presses_used(history)

        rows.append(
            {
                "puzzle_id": puzzle_id,
                "n_lights": puzzle.n_lights,
                "n_buttons": puzzle.n_buttons,
                "rank": "" if result.rank is None else result.rank,
                "n_free": "" if result.n_free is None else result.n_free,
                "status": result.status.value,
                "optimal_total": "" if result.total is None else result.total,
                "valid": valid,
                "oracle_total": oracle_total,
                "oracle_agrees": agree,
                "solve_ms": solve_ms,
                "strategy": strat_name,
                "solved": solved,
                "presses_used": used,
                "accuracy": accuracy(used, result.total, bool(solved)),
            }
        )
    return rows


def run_pool(jobs, writer, workers, max_inflight=None, total_jobs=None):
    """Run jobs in parallel and write results as they complete."""
    ctx = mp.get_context("spawn")
    if max_inflight is None:
        max_inflight = workers * 3

    inflight = set()
    done = 0
    total_rows = 0
    start_time = time.time()

    with ProcessPoolExecutor(max_workers=workers, mp_context=ctx) as ex:
        jobs_iter = iter(jobs)
        while len(inflight) < max_inflight:
            try:
                j = next(jobs_iter)
            except StopIteration:
                break
            inflight.add(ex.submit(_run_batch, j))

        while inflight:
            for fut in as_completed(inflight, timeout=None):
                inflight.remove(fut)
                try:
                    rows = fut.result()
                except Exception:
                    logger.exception("Worker failed")
                    raise
                writer.writerows(rows)
                done += 1
                total_rows += len(rows)

                elapsed = time.time() - start_time
                pct = done / total_jobs if total_jobs else 0.0
                print(
                    f"\r[progress] {done}/{total_jobs} batches ({pct:>6.1%}) | "
                    f"{total_rows:>7,} rows | "
                    f"elapsed: {int(elapsed // 60)}m {int(elapsed % 60)}s",
                    end="",
                    flush=True,
                )
                if done == total_jobs:
                    print()
                # Submit next job to keep inflight bounded
                try:
                    j = next(jobs_iter)
                    inflight.add(ex.submit(_run_batch, j))
                except StopIteration:
                    pass
                break  # re-enter as_completed with updated set


def main():
    n_cpus = os.cpu_count() or 1
    default_workers = max(n_cpus - 1, 1)

    ap = argparse.ArgumentParser()
    ap.add_argument(
        "--config",
        default=str(ROOT / "experiments" / "configs" / "sweep_small.yaml"),
    )
    ap.add_argument("--out", default=None, help="Output CSV path")
    ap.add_argument(
        "--workers", type=int, default=default_workers, help="Number of workers"
    )
    ap.add_argument(
        "--batch-size", type=int, default=100, help="Puzzles per batch"
    )
    ap.add_argument("--log-level", default="WARNING")
    args = ap.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_sweep(args.config)
    out_dir = cfg["output_dir"]
    out_dir.mkdir(parents=True, exist_ok=True)
    out_csv = args.out or str(out_dir / "sweep.csv")

    rng = np.random.default_rng(cfg["seed"])
    puzzles = sample_puzzles(
        cfg["n_lights"],
        cfg["n_buttons"],
        cfg["n_samples"],
        rng,
        max_cells=cfg["max_cells"],
        cap_range=cfg["cap_range"],
    )

    num_ranges = (len(puzzles) + args.batch_size - 1) // args.batch_size
    total_jobs = num_ranges * len(cfg["strategies"])

    def job_stream():
        for j in make_batches(puzzles, cfg["strategies"], args.batch_size):
            j.update(
                {
                    "budget_T": cfg["budget_T"],
                    "base_seed": cfg["seed"],
                    "cross_check": cfg["cross_check"],
                    "solver": cfg["solver"],
                }
            )
            yield j

    print(
        f"\nStarting {total_jobs:,} batches ({len(puzzles):,} puzzles) with {args.workers} workers...\n"
    )

    start_time = time.time()
    with open(out_csv, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        run_pool(
            job_stream(),
            writer,
            workers=args.workers,
            max_inflight=args.workers * 3,
            total_jobs=total_jobs,
        )

    elapsed = time.time() - start_time
    print(f"\nDone in {int(elapsed/60)}m {int(elapsed%60)}s")
    print(f"Output: {out_csv}\n")


if __name__ == "__main__":
    main()
