"""Error taxonomy shared by every stage of the simulator.

Errors are raised where the condition is detected. The only place that
catches them is the per-hole isolation boundary in
:func:`chargesim.simulator.engine.run_once`.
"""
from __future__ import annotations

__all__ = [
    "ChargeSimError",
    "ConfigurationError",
    "ComputationInvariantViolation",
    "NumericDegeneracy",
]


class ChargeSimError(Exception):
    """Base class for all simulator errors."""


class ConfigurationError(ChargeSimError, ValueError):
    """Structurally invalid column, primer or packing input."""


class ComputationInvariantViolation(ChargeSimError, RuntimeError):
    """Sum of Em differs from ``total_mass ** charge_exponent``.

    This signals a defect in the simulator or calculator, never bad input.
    """

    def __init__(self, message: str, expected: float, actual: float, trace: list | None = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual
        self.trace = trace or []


class NumericDegeneracy(ChargeSimError, ArithmeticError):
    """NaN or infinity produced while simulating a column."""
