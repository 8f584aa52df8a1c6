"""Charge column value objects: primers, columns and discretised elements."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

import yaml

from ..errors import ConfigurationError

__all__ = ["Primer", "ChargeColumn", "Element", "load_columns"]


@dataclass(frozen=True)
class Primer:
    """Initiation point inside a charge column.

    ``depth`` is measured from the top of the charge column (m) and
    ``fire_time`` from the blast-wide time origin (ms).
    """

    depth: float
    fire_time: float = 0.0


@dataclass(frozen=True)
class ChargeColumn:
    """Explosive column of one hole, as supplied by the charging model."""

    charge_top_depth: float  # m from collar along the hole axis
    charge_base_depth: float  # m from collar along the hole axis
    total_mass: float  # kg
    vod: float  # m/s
    num_elements: int
    primers: Tuple[Primer, ...] = ()
    hole_id: str = ""

    def __post_init__(self) -> None:
        # Accept any iterable of primers but store an immutable tuple
        object.__setattr__(self, "primers", tuple(self.primers))

    @property
    def charge_length(self) -> float:
        return self.charge_base_depth - self.charge_top_depth

    @property
    def element_length(self) -> float:
        return self.charge_length / self.num_elements

    @property
    def element_mass(self) -> float:
        return self.total_mass / self.num_elements

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` on structurally invalid values."""
        label = self.hole_id or "<unnamed>"
        if self.num_elements < 1:
            raise ConfigurationError(f"hole {label}: num_elements must be >= 1, got {self.num_elements}")
        if not self.charge_length > 0:
            raise ConfigurationError(f"hole {label}: charge length must be positive, got {self.charge_length}")
        if self.total_mass <= 0:
            raise ConfigurationError(f"hole {label}: total mass must be positive, got {self.total_mass}")
        if self.vod <= 0:
            raise ConfigurationError(f"hole {label}: VOD must be positive, got {self.vod}")
        if not self.primers:
            raise ConfigurationError(f"hole {label}: at least one primer is required")
        for primer in self.primers:
            if primer.depth < 0 or primer.depth > self.charge_length:
                raise ConfigurationError(
                    f"hole {label}: primer depth {primer.depth} outside column [0, {self.charge_length}]"
                )
            # negative times would collide with the packed no-data sentinel
            if primer.fire_time < 0:
                raise ConfigurationError(f"hole {label}: primer fire time {primer.fire_time} is negative")

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def from_dict(cls, data: dict, default_num_elements: Optional[int] = None) -> "ChargeColumn":
        """Build a column from a plain mapping (one YAML ``holes:`` entry).

        Primers may be given as mappings with ``depth`` and ``fire_time`` keys
        or as ``[depth, fire_time]`` pairs.
        """
        label = data.get("hole_id", "<unnamed>")
        num_elements = data.get("num_elements", default_num_elements)
        if num_elements is None:
            raise ConfigurationError(f"hole {label}: num_elements missing and no default given")
        try:
            primers = []
            for entry in data.get("primers", []):
                if isinstance(entry, dict):
                    primers.append(Primer(depth=float(entry["depth"]), fire_time=float(entry.get("fire_time", 0.0))))
                else:
                    depth, fire_time = entry
                    primers.append(Primer(depth=float(depth), fire_time=float(fire_time)))
            return cls(
                charge_top_depth=float(data["charge_top_depth"]),
                charge_base_depth=float(data["charge_base_depth"]),
                total_mass=float(data["total_mass"]),
                vod=float(data["vod"]),
                num_elements=int(num_elements),
                primers=tuple(primers),
                hole_id=str(data.get("hole_id", "")),
            )
        except KeyError as exc:
            raise ConfigurationError(f"hole {label}: entry missing field {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"hole {label}: malformed entry ({exc})") from exc


@dataclass(frozen=True)
class Element:
    """One equal-mass slice of a charge column.

    Index 0 sits at the toe end of the column, index M-1 at the collar end.
    ``centre_depth`` is measured from the top of the charge column.
    """

    index: int
    centre_depth: float
    mass: float
    det_time: float = math.inf
    em: float = 0.0


def load_columns(path: os.PathLike | str, default_num_elements: Optional[int] = None) -> List[ChargeColumn]:
    """Read charge columns from a YAML file with a top-level ``holes`` list."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    holes = data.get("holes") if isinstance(data, dict) else None
    if not isinstance(holes, list):
        raise ConfigurationError(f"{path}: expected a top-level 'holes' list")
    columns = []
    for i, entry in enumerate(holes):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"{path}: hole {i} is not a mapping")
        entry = dict(entry)
        entry.setdefault("hole_id", str(i))
        columns.append(ChargeColumn.from_dict(entry, default_num_elements=default_num_elements))
    return columns
