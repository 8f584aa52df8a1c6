"""Element sources handed to the field evaluator.

The evaluator owns the radiation pattern and attenuation law. What it needs
from the simulator is, for a query at display time ``T``, the Em of every
element detonated by ``T`` together with the element's world position. Hole
geometry (collar, toe) is supplied by the hole model; the simulator only maps
element centres onto it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError

__all__ = ["HoleGeometry", "ElementSource", "element_sources", "filter_by_display_time"]

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class HoleGeometry:
    """Hole axis and charge bounds needed to place elements in space."""

    collar: Vec3
    toe: Vec3
    charge_top_depth: float  # m from collar along the axis
    charge_base_depth: float

    def element_position(self, index: int, num_elements: int) -> np.ndarray:
        """World position of element ``index`` (0 at the toe end of the charge)."""
        collar = np.asarray(self.collar, dtype=np.float64)
        axis = np.asarray(self.toe, dtype=np.float64) - collar
        norm = np.linalg.norm(axis)
        if norm == 0:
            raise ConfigurationError("hole collar and toe coincide")
        length = self.charge_base_depth - self.charge_top_depth
        centre_depth = length - (index + 0.5) * length / num_elements
        return collar + axis / norm * (self.charge_top_depth + centre_depth)


@dataclass(frozen=True)
class ElementSource:
    hole: int
    element: int
    em: float
    det_time: float
    position: np.ndarray


def filter_by_display_time(pairs: Sequence[Tuple[float, float]], display_time: Optional[float] = None) -> List[Tuple[float, float]]:
    """Keep ``(em, det_time)`` pairs detonated by ``display_time`` (all if None)."""
    return [(em, t) for em, t in pairs if t >= 0.0 and (display_time is None or t <= display_time)]


def element_sources(
    packed,
    geometries: Sequence[HoleGeometry],
    display_time: Optional[float] = None,
    num_elements: Optional[Sequence[int]] = None,
) -> Iterator[ElementSource]:
    """Yield an :class:`ElementSource` for every visible packed element.

    ``packed`` is a :class:`chargesim.packing.PackedElementData`.
    ``num_elements[h]`` defaults to the number of non-sentinel cells of hole
    ``h``, which is exact for every hole packed from a full simulation.
    """
    if len(geometries) != packed.hole_count:
        raise ConfigurationError(f"{len(geometries)} geometries for {packed.hole_count} packed holes")
    grid = packed.as_grid()
    mask = packed.visible_mask(display_time)
    for h, geometry in enumerate(geometries):
        count = num_elements[h] if num_elements is not None else int(np.count_nonzero(grid[h, :, 1] >= 0.0))
        for m in np.flatnonzero(mask[h]):
            yield ElementSource(
                hole=h,
                element=int(m),
                em=float(grid[h, m, 0]),
                det_time=float(grid[h, m, 1]),
                position=geometry.element_position(int(m), count),
            )
