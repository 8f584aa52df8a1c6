"""Command-line interface entry-point.

Usage examples
--------------
Simulate every hole of a design and print the element tables:
    python -m chargesim.cli run --columns cfgs/example_holes.yaml --config cfgs/base.yaml

Batch over a whole blast and save the packed buffer:
    python -m chargesim.cli batch --columns cfgs/example_holes.yaml --out packed.npy --processes 4

Plot the detonation sequence of one hole:
    python -m chargesim.cli plot --columns cfgs/example_holes.yaml --hole 2 --save figs/hole2
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

import numpy as np

from .config import SimulationConfig
from .errors import ChargeSimError
from .logging_config import setup_logging
from .packing import pack_results
from .parallel import run_batch
from .simulator.column import load_columns
from .simulator.engine import HoleStatus, run_once

SUBCOMMANDS = {"run", "batch", "plot"}


def _parse_args(argv: List[str] | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chargesim", description="Charge column detonation simulator")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", type=str, default=None, help="Optional log file")

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # ------------------------------------------------------------------
    # run
    # ------------------------------------------------------------------
    p_run = subparsers.add_parser("run", help="Simulate holes serially and print element tables")
    p_run.add_argument("--columns", required=True, type=Path, help="YAML file with a 'holes' list")
    p_run.add_argument("--config", type=Path, default=None, help="YAML config file")
    p_run.add_argument("--hole", type=int, default=None, help="Only simulate this hole index")

    # ------------------------------------------------------------------
    # batch
    # ------------------------------------------------------------------
    p_batch = subparsers.add_parser("batch", help="Simulate all holes in parallel and save the packed buffer")
    p_batch.add_argument("--columns", required=True, type=Path, help="YAML file with a 'holes' list")
    p_batch.add_argument("--config", type=Path, default=None, help="YAML config file")
    p_batch.add_argument("--processes", type=int, default=None, help="Number of worker processes")
    p_batch.add_argument("--out", required=True, type=Path, help="Output .npy file for the packed buffer")

    # ------------------------------------------------------------------
    # plot
    # ------------------------------------------------------------------
    p_plot = subparsers.add_parser("plot", help="Plot the detonation sequence of one hole")
    p_plot.add_argument("--columns", required=True, type=Path, help="YAML file with a 'holes' list")
    p_plot.add_argument("--config", type=Path, default=None, help="YAML config file")
    p_plot.add_argument("--hole", type=int, default=0, help="Hole index")
    p_plot.add_argument("--save", type=Path, default=None, help="Save figure (png+svg) instead of showing it")
    return parser


def _load(args) -> tuple:
    cfg = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    columns = load_columns(args.columns, default_num_elements=cfg.num_elements)
    return cfg, columns


def _print_result(result) -> None:
    print(f"Hole {result.hole_id}: status={result.status.value}" + (f" ({result.error})" if result.error else ""))
    if not result.status.has_data:
        return
    print(f"{'index':>6}{'depth_m':>10}{'det_ms':>10}{'Em':>12}")
    for e in result.elements:
        print(f"{e.index:>6}{e.centre_depth:>10.3f}{e.det_time:>10.4f}{e.em:>12.5f}")


def main(argv: List[str] | None = None) -> int:  # noqa: D401
    """Main entry point for the command-line interface."""
    parser = _parse_args(argv)
    args = parser.parse_args(argv)

    try:
        cfg, columns = _load(args)
    except (ChargeSimError, OSError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2
    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file, tag=cfg.tag)

    hole = getattr(args, "hole", None)
    if hole is not None and not 0 <= hole < len(columns):
        print(f"[ERROR] hole index {hole} out of range, {args.columns} has {len(columns)} holes", file=sys.stderr)
        return 2

    if args.cmd == "run":
        indices = [args.hole] if args.hole is not None else range(len(columns))
        for i in indices:
            _print_result(run_once(columns[i], cfg, hole_index=i))

    elif args.cmd == "batch":
        results = run_batch(columns, cfg, processes=args.processes)
        packed = pack_results(results, max_elements=cfg.max_elements)
        args.out.parent.mkdir(parents=True, exist_ok=True)
        np.save(args.out, packed.as_grid())
        counts = {status.value: sum(r.status is status for r in results) for status in HoleStatus}
        print(f"Packed {packed.hole_count} holes x {packed.max_elements} elements to {args.out}")
        print("Status: " + ", ".join(f"{k}={v}" for k, v in counts.items() if v))

    elif args.cmd == "plot":
        from .simulator.visualize import plot_detonation_sequence

        result = run_once(columns[args.hole], cfg, hole_index=args.hole)
        if not result.status.has_data:
            print(f"[ERROR] hole {result.hole_id} has no data: {result.error}", file=sys.stderr)
            return 1
        plot_detonation_sequence(result.column, result.elements, save_path=args.save)
    else:
        raise ValueError(f"Unknown command: {args.cmd}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
