"""Simulation configuration definitions.

Every tunable of the simulator lives in :class:`SimulationConfig` and is passed
explicitly to the stages that need it. Config objects can be created either
programmatically or loaded from YAML files to facilitate batch runs over a
whole blast.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

import yaml

from .errors import ConfigurationError

__all__ = [
    "SimulationConfig",
]

DEFAULT_YAML_INDENT = 2


@dataclass
class SimulationConfig:
    """Container for all simulation parameters.

    Attributes
    ----------
    charge_exponent
        Blair charge exponent *A* converting cumulative mass to effective
        energy (unit-less, typically 0.5–0.8).
    num_elements
        Element count *M* used for holes that do not specify their own.
    simultaneity_tolerance_ms
        Cohort grouping tolerance in ms. ``None`` selects the physical default,
        half the time a front needs to cross one element.
    conservation_rtol
        Relative tolerance of the ``sum(Em) == total_mass ** A`` check.
    max_elements
        Element-column width of the packed buffer shared by all holes.
    processes
        Worker processes for batch runs (``None`` = CPU count, 1 = serial).
    """

    charge_exponent: float = 0.5
    num_elements: int = 20
    simultaneity_tolerance_ms: Optional[float] = None
    conservation_rtol: float = 1e-6
    max_elements: int = 64
    processes: Optional[int] = None

    # Free-form field to store arbitrary user metadata (e.g., blast name).
    tag: str = field(default="", metadata={"yaml_field": True})

    # Automatically filled, not expected to be loaded from file.
    _yaml_path: Optional[Path] = field(default=None, repr=False, compare=False)

    # ---------------------------------------------------------------------
    # YAML helpers
    # ---------------------------------------------------------------------
    @classmethod
    def from_yaml(cls, path: os.PathLike | str) -> "SimulationConfig":
        """Load a configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        try:
            cfg = cls(**data)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc
        cfg._yaml_path = Path(path)
        return cfg

    def to_yaml(self, path: os.PathLike | str) -> None:
        """Save the config to YAML."""
        data = {k: v for k, v in asdict(self).items() if not k.startswith("_")}
        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(data, fh, indent=DEFAULT_YAML_INDENT)

    # Convenience str representation for logging
    def __str__(self) -> str:  # noqa: DunderStr
        return (
            f"SimulationConfig(A={self.charge_exponent}, M={self.num_elements}, "
            f"max_elements={self.max_elements})"
        )

    def __post_init__(self):
        # YAML may hand back ints or strings such as '1e-6'
        self.charge_exponent = float(self.charge_exponent)
        self.conservation_rtol = float(self.conservation_rtol)
        if self.simultaneity_tolerance_ms is not None:
            self.simultaneity_tolerance_ms = float(self.simultaneity_tolerance_ms)
        if self.charge_exponent <= 0:
            raise ConfigurationError(f"charge_exponent must be positive, got {self.charge_exponent}")
        if self.num_elements < 1:
            raise ConfigurationError(f"num_elements must be >= 1, got {self.num_elements}")
        if self.max_elements < 1:
            raise ConfigurationError(f"max_elements must be >= 1, got {self.max_elements}")
