"""Generalised non-linear superposition of element energies (Blair, 2008).

Elements are ranked by detonation time rather than by position. Walking the
ranking in cohorts of simultaneous elements with a running cumulative mass
``W``, cohort *k* receives

    Em_k = W_after ** A - W_before ** A

split evenly among its members. The sum telescopes to ``total_mass ** A`` for
any primer configuration, and reduces to the classical closed forms for a
single base primer (one element per cohort) and a single mid-column primer
(two elements per cohort).

Reference: Blair (2008), "Non-linear superposition models of blast vibration",
Int J Rock Mech Min Sci 45, 235-247.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from ..errors import ComputationInvariantViolation, NumericDegeneracy
from .column import ChargeColumn, Element

__all__ = [
    "Cohort",
    "default_simultaneity_tolerance",
    "group_cohorts",
    "compute_em_values",
    "check_conservation",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cohort:
    """Elements treated as detonating simultaneously."""

    indices: Tuple[int, ...]  # spatial element indices
    start_time: float  # ms, det_time of the earliest member
    mass_before: float
    mass_after: float
    em_total: float

    @property
    def size(self) -> int:
        return len(self.indices)

    @property
    def em_per_element(self) -> float:
        return self.em_total / len(self.indices)


def default_simultaneity_tolerance(column: ChargeColumn) -> float:
    """Half the time (ms) a front needs to cross one element of ``column``."""
    return 0.5 * column.element_length / column.vod * 1000.0


def group_cohorts(elements: Sequence[Element], tolerance_ms: float) -> List[List[Element]]:
    """Group elements ranked by ``det_time`` into simultaneous cohorts.

    An element joins the current cohort while its ``det_time`` is within
    ``tolerance_ms`` of the cohort's first member; ties are ranked by index.
    """
    ranked = sorted(elements, key=lambda e: (e.det_time, e.index))
    groups: List[List[Element]] = []
    for element in ranked:
        if groups and element.det_time - groups[-1][0].det_time < tolerance_ms:
            groups[-1].append(element)
        else:
            groups.append([element])
    return groups


def _power(mass: float, exponent: float) -> float:
    return mass ** exponent if mass > 0 else 0.0


def compute_em_values(
    elements: Sequence[Element],
    charge_exponent: float,
    tolerance_ms: float,
) -> Tuple[List[Element], List[Cohort]]:
    """Assign Em to every element from its place in the detonation sequence.

    Returns the elements in their original (spatial) order with ``em`` set,
    together with the cohort trace used to compute them.
    """
    if not elements:
        return [], []
    bad = [e.index for e in elements if not math.isfinite(e.det_time)]
    if bad:
        raise NumericDegeneracy(f"non-finite detonation time for elements {bad}")

    em_by_index = {}
    cohorts = []
    cumulative = 0.0
    for group in group_cohorts(elements, tolerance_ms):
        group_mass = sum(e.mass for e in group)
        before = cumulative
        cumulative = before + group_mass
        em_total = _power(cumulative, charge_exponent) - _power(before, charge_exponent)
        if not math.isfinite(em_total):
            raise NumericDegeneracy(f"non-finite Em for cohort starting at {group[0].det_time} ms")
        share = em_total / len(group)
        for e in group:
            em_by_index[e.index] = share
        cohorts.append(
            Cohort(
                indices=tuple(e.index for e in group),
                start_time=group[0].det_time,
                mass_before=before,
                mass_after=cumulative,
                em_total=em_total,
            )
        )

    return [replace(e, em=em_by_index[e.index]) for e in elements], cohorts


def check_conservation(
    elements: Sequence[Element],
    total_mass: float,
    charge_exponent: float,
    rtol: float = 1e-6,
    cohorts: Optional[Sequence[Cohort]] = None,
    hole_id: str = "",
) -> float:
    """Verify ``sum(Em) == total_mass ** A`` and return the sum.

    Raises :class:`ComputationInvariantViolation` on mismatch after logging the
    cohort groupings and the cumulative-mass trace.
    """
    expected = total_mass ** charge_exponent
    actual = math.fsum(e.em for e in elements)
    if not math.isfinite(actual):
        raise NumericDegeneracy(f"hole {hole_id or '<unnamed>'}: non-finite Em sum {actual}")
    if abs(actual - expected) <= rtol * abs(expected):
        return actual

    trace = [
        {
            "indices": list(c.indices),
            "start_time_ms": c.start_time,
            "mass_before": c.mass_before,
            "mass_after": c.mass_after,
            "em_total": c.em_total,
        }
        for c in (cohorts or ())
    ]
    logger.error(
        "hole %s: conservation violated, sum(Em)=%.12g expected %.12g (A=%s, total_mass=%s); cohorts=%s",
        hole_id or "<unnamed>",
        actual,
        expected,
        charge_exponent,
        total_mass,
        trace,
    )
    raise ComputationInvariantViolation(
        f"sum(Em)={actual!r} differs from total_mass**A={expected!r}",
        expected=expected,
        actual=actual,
        trace=trace,
    )
