"""Exception hierarchy for the load flow engine.

Non-convergence is not an error: it is reported through
``SolverState.NOT_CONVERGED`` on the solver result.
"""

from __future__ import annotations


class PowerFlowError(Exception):
    """Base class for all load flow engine failures."""


class MalformedInputError(PowerFlowError, ValueError):
    """A bus or line record could not be parsed or fails validation."""


class BusIndexOutOfRangeError(MalformedInputError, IndexError):
    """A line references a bus position outside [0, n)."""

    def __init__(self, line_index: int, bus_index: int, n_bus: int):
        self.line_index = line_index
        self.bus_index = bus_index
        self.n_bus = n_bus
        super().__init__(
            f"Line {line_index + 1} references bus position {bus_index + 1}, "
            f"network has {n_bus} buses"
        )


class DegenerateNetworkError(PowerFlowError):
    """A bus cannot be updated because its admittance terms vanish."""


class ComplexDivisionByZero(PowerFlowError, ZeroDivisionError):
    """Division by a complex number of zero magnitude."""
