"""Column discretisation into equal-length, equal-mass elements."""
from __future__ import annotations

from typing import List

from ..errors import ConfigurationError
from .column import ChargeColumn, Element

__all__ = ["discretize_column"]


def discretize_column(column: ChargeColumn) -> List[Element]:
    """Split ``column`` into ``num_elements`` elements ordered toe to collar.

    Element 0 is centred nearest the base of the column and element M-1
    nearest the top. ``centre_depth(i) = L - (i + 0.5) * L / M`` with depths
    measured from the top of the charge column.
    """
    n = column.num_elements
    length = column.charge_length
    if n < 1:
        raise ConfigurationError(f"num_elements must be >= 1, got {n}")
    if not length > 0:
        raise ConfigurationError(f"charge length must be positive, got {length}")

    dl = length / n
    mass = column.total_mass / n
    return [Element(index=i, centre_depth=length - (i + 0.5) * dl, mass=mass) for i in range(n)]
