"""Task-parallel fan-out of hole simulations using a process pool.

Each hole depends only on its own column, so holes run as independent tasks
and results come back in input order for packing.
"""
from __future__ import annotations

import logging
import multiprocessing as mp
from typing import Iterable, List, Optional

from .config import SimulationConfig
from .simulator.column import ChargeColumn
from .simulator.engine import HoleResult, run_once

__all__ = ["run_batch"]

logger = logging.getLogger(__name__)


def _worker(args):  # type: ignore
    hole_index, column, cfg = args
    return run_once(column, cfg, hole_index=hole_index)


def run_batch(
    columns: Iterable[ChargeColumn],
    cfg: SimulationConfig,
    processes: Optional[int] = None,
) -> List[HoleResult]:
    """Simulate many holes; ``processes=1`` runs them in the calling process."""
    tasks = [(i, column, cfg) for i, column in enumerate(columns)]
    if processes is None:
        processes = cfg.processes

    if processes == 1 or len(tasks) <= 1:
        results = [_worker(task) for task in tasks]
    else:
        with mp.Pool(processes=processes) as pool:
            results = pool.map(_worker, tasks)

    failed = [r.hole_id for r in results if not r.status.has_data]
    logger.info("simulated %d holes, %d without data", len(results), len(failed))
    return results
