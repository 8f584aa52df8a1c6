"""Flat, randomly addressable packing of per-element (Em, det_time) pairs.

Layout
------
Row-major over ``(hole, element)`` with two values per cell::

    buffer[(hole * max_elements + element) * 2 + 0] = Em
    buffer[(hole * max_elements + element) * 2 + 1] = det_time (ms)

This is the layout of an RG float texture of width ``max_elements`` and height
``hole_count``. Unused cells, and every cell of a hole without valid data,
hold the sentinel pair ``(0, -1)``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError
from .simulator.column import Element
from .simulator.engine import HoleResult

__all__ = ["NO_DATA", "PackedElementData", "pack_element_data", "pack_results"]

logger = logging.getLogger(__name__)

NO_DATA: Tuple[float, float] = (0.0, -1.0)


@dataclass(frozen=True)
class PackedElementData:
    buffer: np.ndarray  # shape (hole_count * max_elements * 2,)
    hole_count: int
    max_elements: int

    def as_grid(self) -> np.ndarray:
        """View of the buffer shaped ``(hole_count, max_elements, 2)``."""
        return self.buffer.reshape(self.hole_count, self.max_elements, 2)

    def cell(self, hole: int, element: int) -> Tuple[float, float]:
        """Return ``(em, det_time)`` stored at ``(hole, element)``."""
        if not (0 <= hole < self.hole_count and 0 <= element < self.max_elements):
            raise IndexError(f"cell {(hole, element)} outside {(self.hole_count, self.max_elements)}")
        idx = (hole * self.max_elements + element) * 2
        return float(self.buffer[idx]), float(self.buffer[idx + 1])

    def hole(self, hole: int) -> List[Tuple[float, float]]:
        """Pairs of one hole in spatial order, sentinel cells excluded."""
        grid = self.as_grid()[hole]
        return [(float(em), float(t)) for em, t in grid if t >= 0.0]

    def visible_mask(self, display_time: Optional[float] = None) -> np.ndarray:
        """Boolean ``(hole_count, max_elements)`` mask of elements to show.

        Sentinel cells are never visible. With a ``display_time`` only
        elements with ``det_time <= display_time`` are kept.
        """
        det_times = self.as_grid()[:, :, 1]
        mask = det_times >= 0.0
        if display_time is not None:
            mask &= det_times <= display_time
        return mask


def pack_element_data(
    hole_elements: Sequence[Optional[Sequence[Element]]],
    max_elements: Optional[int] = None,
    dtype=np.float64,
) -> PackedElementData:
    """Pack per-hole element lists into a :class:`PackedElementData`.

    ``hole_elements[h]`` is the spatially ordered element list of hole ``h``,
    or ``None`` when the hole produced no valid data.
    """
    counts = [len(elems) if elems else 0 for elems in hole_elements]
    if max_elements is None:
        max_elements = max(counts, default=0) or 1
    if max_elements < 1:
        raise ConfigurationError(f"max_elements must be >= 1, got {max_elements}")
    too_long = [h for h, n in enumerate(counts) if n > max_elements]
    if too_long:
        raise ConfigurationError(f"holes {too_long} have more than max_elements={max_elements} elements")

    hole_count = len(hole_elements)
    grid = np.empty((hole_count, max_elements, 2), dtype=dtype)
    grid[:, :] = NO_DATA
    for h, elems in enumerate(hole_elements):
        if not elems:
            continue
        ordered = sorted(elems, key=lambda e: e.index)
        grid[h, : len(ordered), 0] = [e.em for e in ordered]
        grid[h, : len(ordered), 1] = [e.det_time for e in ordered]

    return PackedElementData(buffer=grid.reshape(-1), hole_count=hole_count, max_elements=max_elements)


def pack_results(
    results: Iterable[HoleResult],
    max_elements: Optional[int] = None,
    dtype=np.float64,
) -> PackedElementData:
    """Pack engine results, writing sentinel rows for holes without data.

    Unlike :func:`pack_element_data`, a hole wider than ``max_elements`` does
    not fail the batch; it is logged and packed as a no-data row.
    """
    rows = []
    for result in results:
        if not result.status.has_data:
            logger.info("hole %s packed as no-data (%s)", result.hole_id, result.status.value)
            rows.append(None)
        elif max_elements is not None and len(result.elements) > max_elements:
            logger.warning(
                "hole %s packed as no-data: %d elements exceed max_elements=%d",
                result.hole_id,
                len(result.elements),
                max_elements,
            )
            rows.append(None)
        else:
            rows.append(result.elements)
    return pack_element_data(rows, max_elements=max_elements, dtype=dtype)
