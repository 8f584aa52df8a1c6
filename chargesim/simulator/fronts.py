"""Multi-primer detonation front propagation with front collision.

Every primer emits two fronts, one toward decreasing depth ("up") and one
toward increasing depth ("down"), both travelling at the column VOD. When the
inward-facing fronts of two neighbouring primers meet inside the interval
between them, each front stops at the collision depth. The region a front can
still reach is precomputed once per column as a list of owned intervals, and
each element is then resolved by a plain interval lookup.

Units: depths in m, VOD in m/s, times in ms.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from .column import ChargeColumn, Element, Primer
from .discretize import discretize_column

__all__ = [
    "UP",
    "DOWN",
    "FrontInterval",
    "sort_primers",
    "collision_depth",
    "owned_intervals",
    "arrival_time",
    "simulate_detonation",
]

logger = logging.getLogger(__name__)

UP = "up"  # toward decreasing depth (collar side)
DOWN = "down"  # toward increasing depth (toe side)


@dataclass(frozen=True)
class FrontInterval:
    """Depth range ``[start, end]`` reachable by one primer-direction front."""

    primer: Primer
    direction: str
    start: float
    end: float

    def contains(self, depth: float) -> bool:
        return self.start <= depth <= self.end


def sort_primers(primers: Sequence[Primer]) -> List[Primer]:
    """Primers ordered by depth, then by fire time."""
    return sorted(primers, key=lambda p: (p.depth, p.fire_time))


def collision_depth(shallow: Primer, deep: Primer, vod: float) -> Optional[float]:
    """Depth where the inward fronts of two neighbouring primers meet.

    Returns ``None`` when the meeting point falls outside
    ``[shallow.depth, deep.depth]``: one front sweeps the whole interval
    before the other is fired, so neither blocks the other.
    """
    depth = (shallow.depth + deep.depth) / 2.0 + vod * (deep.fire_time - shallow.fire_time) / 2000.0
    if depth < shallow.depth or depth > deep.depth:
        return None
    return depth


def owned_intervals(column: ChargeColumn) -> List[FrontInterval]:
    """One :class:`FrontInterval` per primer-direction, bounded by collisions."""
    primers = sort_primers(column.primers)
    length = column.charge_length
    collisions: List[Optional[float]] = [
        collision_depth(primers[i], primers[i + 1], column.vod) for i in range(len(primers) - 1)
    ]

    intervals = []
    for i, primer in enumerate(primers):
        shallow_hit = collisions[i - 1] if i > 0 else None
        deep_hit = collisions[i] if i < len(collisions) else None
        intervals.append(FrontInterval(primer, UP, 0.0 if shallow_hit is None else shallow_hit, primer.depth))
        intervals.append(FrontInterval(primer, DOWN, primer.depth, length if deep_hit is None else deep_hit))

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "hole %s: collisions=%s intervals=%s",
            column.hole_id or "<unnamed>",
            collisions,
            [(iv.primer.depth, iv.direction, iv.start, iv.end) for iv in intervals],
        )
    return intervals


def arrival_time(primer: Primer, depth: float, vod: float) -> float:
    """One-way arrival time (ms) of a front from ``primer`` at ``depth``."""
    return primer.fire_time + abs(depth - primer.depth) / vod * 1000.0


def _earliest_arrival(depth: float, intervals: Sequence[FrontInterval], vod: float) -> Tuple[float, int]:
    """Minimum arrival over the fronts owning ``depth`` and how many own it."""
    best = float("inf")
    owners = 0
    for interval in intervals:
        if interval.contains(depth):
            owners += 1
            best = min(best, arrival_time(interval.primer, depth, vod))
    return best, owners


def simulate_detonation(column: ChargeColumn, elements: Optional[List[Element]] = None) -> List[Element]:
    """Return the column's elements with ``det_time`` filled in.

    ``det_time`` is the earliest arrival over every front whose owned interval
    contains the element centre. Elements are discretised from ``column`` when
    not supplied. The input elements are not modified.
    """
    column.validate()
    if elements is None:
        elements = discretize_column(column)

    intervals = owned_intervals(column)
    result = []
    for element in elements:
        det_time, owners = _earliest_arrival(element.centre_depth, intervals, column.vod)
        if owners == 0:
            # NaN depths or VOD fall through every interval test
            logger.debug("hole %s: element %d owned by no front", column.hole_id, element.index)
        result.append(replace(element, det_time=det_time))
    return result
