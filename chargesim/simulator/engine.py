"""Execution engine that simulates a single charge column.

:func:`simulate_column` is the pure numerical pipeline and raises on any
problem. :func:`run_once` wraps it with the per-hole isolation policy used by
batch runs: a failing hole never aborts the others, it only comes back with a
non-OK status.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import List, Optional

from ..config import SimulationConfig
from ..errors import ComputationInvariantViolation, ConfigurationError, NumericDegeneracy
from .column import ChargeColumn, Element
from .discretize import discretize_column
from .energy import check_conservation, compute_em_values, default_simultaneity_tolerance
from .fronts import simulate_detonation

__all__ = ["HoleStatus", "HoleResult", "simulate_column", "single_primer_fallback", "run_once"]

logger = logging.getLogger(__name__)


class HoleStatus(str, enum.Enum):
    OK = "ok"
    FALLBACK = "fallback"  # degraded single-primer approximation
    INVALID = "invalid"  # ConfigurationError
    DEGENERATE = "degenerate"  # NumericDegeneracy
    FAILED = "failed"  # fallback also violated conservation

    @property
    def has_data(self) -> bool:
        return self in (HoleStatus.OK, HoleStatus.FALLBACK)


@dataclass
class HoleResult:
    """Container returned by `run_once`."""

    hole_index: int
    column: ChargeColumn
    status: HoleStatus
    elements: Optional[List[Element]] = None
    error: str = ""

    @property
    def hole_id(self) -> str:
        return self.column.hole_id or str(self.hole_index)


# ------------------------------------------------------------------
# Numerical pipeline
# ------------------------------------------------------------------

def simulate_column(column: ChargeColumn, cfg: SimulationConfig) -> List[Element]:
    """Discretise, propagate fronts and distribute Em for one column.

    Returns elements in spatial order (index 0 at the toe). Raises
    ConfigurationError, NumericDegeneracy or ComputationInvariantViolation.
    """
    column.validate()
    elements = simulate_detonation(column, discretize_column(column))

    tolerance = cfg.simultaneity_tolerance_ms
    if tolerance is None:
        tolerance = default_simultaneity_tolerance(column)

    elements, cohorts = compute_em_values(elements, cfg.charge_exponent, tolerance)
    check_conservation(
        elements,
        column.total_mass,
        cfg.charge_exponent,
        rtol=cfg.conservation_rtol,
        cohorts=cohorts,
        hole_id=column.hole_id,
    )
    logger.debug(
        "hole %s: %d elements in %d cohorts, last det_time %.4f ms",
        column.hole_id or "<unnamed>",
        len(elements),
        len(cohorts),
        max(e.det_time for e in elements),
    )
    return elements


def single_primer_fallback(column: ChargeColumn, cfg: SimulationConfig) -> List[Element]:
    """Re-run the pipeline with only the earliest-firing primer.

    Ties on fire time go to the deepest primer.
    """
    column.validate()
    primer = min(column.primers, key=lambda p: (p.fire_time, -p.depth))
    return simulate_column(replace(column, primers=(primer,)), cfg)


# ------------------------------------------------------------------
# Engine entry-point
# ------------------------------------------------------------------

def run_once(column: ChargeColumn, cfg: SimulationConfig, hole_index: int = 0) -> HoleResult:
    """Simulate one hole, isolating its failures from the rest of the batch."""
    label = column.hole_id or str(hole_index)
    try:
        if column.num_elements > cfg.max_elements:
            raise ConfigurationError(
                f"hole {label}: {column.num_elements} elements exceed max_elements={cfg.max_elements}"
            )
        elements = simulate_column(column, cfg)
    except ConfigurationError as exc:
        logger.warning("hole %s skipped: %s", label, exc)
        return HoleResult(hole_index, column, HoleStatus.INVALID, error=str(exc))
    except NumericDegeneracy as exc:
        logger.warning("hole %s abandoned: %s", label, exc)
        return HoleResult(hole_index, column, HoleStatus.DEGENERATE, error=str(exc))
    except ComputationInvariantViolation as exc:
        logger.error("hole %s: falling back to single-primer approximation (%s)", label, exc)
        try:
            elements = single_primer_fallback(column, cfg)
        except (ComputationInvariantViolation, NumericDegeneracy) as fallback_exc:
            logger.error("hole %s: fallback failed: %s", label, fallback_exc)
            return HoleResult(hole_index, column, HoleStatus.FAILED, error=str(fallback_exc))
        return HoleResult(hole_index, column, HoleStatus.FALLBACK, elements=elements, error=str(exc))

    return HoleResult(hole_index, column, HoleStatus.OK, elements=elements)
