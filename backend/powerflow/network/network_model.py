"""Network topology model and Y-bus matrix construction.

Builds the bus admittance matrix (Y-bus) from bus and line data.
Bus positions in the input order define matrix indices; bus identifiers
are labels only.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from powerflow.network import complex_ops as cx
from powerflow.network.errors import BusIndexOutOfRangeError, MalformedInputError


class BusType(str, Enum):
    SLACK = "slack"
    PV = "pv"
    PQ = "pq"


@dataclass(frozen=True)
class BusData:
    """Single bus definition (per-unit, angle in degrees)."""
    index: int
    bus_id: int
    bus_type: BusType
    p_pu: float = 0.0
    q_pu: float = 0.0
    v_setpoint_pu: float = 1.0
    theta_deg: float = 0.0

    @property
    def s_spec(self) -> complex:
        """Specified complex power as used by the update, S = P - jQ."""
        return complex(self.p_pu, -self.q_pu)


@dataclass(frozen=True)
class LineData:
    """Single line as a pi-section; b_pu is the total charging susceptance."""
    index: int
    from_bus: int  # bus position
    to_bus: int    # bus position
    r_pu: float
    x_pu: float
    b_pu: float = 0.0

    @property
    def z_pu(self) -> complex:
        return complex(self.r_pu, self.x_pu)


def build_admittance_matrix(n: int, lines: Sequence[LineData]) -> np.ndarray:
    """Construct the bus admittance matrix Y-bus.

    For each line with series impedance z = R + jX and charging B:
    - y = 1/z
    - Y_ii += y + jB/2
    - Y_jj += y + jB/2
    - Y_ij -= y
    - Y_ji -= y

    Raises ComplexDivisionByZero for a zero-impedance line and
    BusIndexOutOfRangeError for an endpoint outside [0, n).
    """
    y_bus = np.zeros((n, n), dtype=complex)

    for line in lines:
        i = line.from_bus
        j = line.to_bus
        for k in (i, j):
            if not 0 <= k < n:
                raise BusIndexOutOfRangeError(line.index, k, n)

        y = cx.div(1.0, line.z_pu)
        b_half = 1j * line.b_pu / 2

        y_bus[i, i] += y + b_half
        y_bus[j, j] += y + b_half
        y_bus[i, j] -= y
        y_bus[j, i] -= y

    return y_bus


@dataclass
class NetworkModel:
    """Complete network model with Y-bus construction."""
    buses: list[BusData] = field(default_factory=list)
    lines: list[LineData] = field(default_factory=list)

    @property
    def n_bus(self) -> int:
        return len(self.buses)

    @property
    def slack_bus(self) -> int:
        """Index of the slack bus."""
        for bus in self.buses:
            if bus.bus_type == BusType.SLACK:
                return bus.index
        raise MalformedInputError("No slack bus defined in network")

    @property
    def pv_buses(self) -> list[int]:
        return [b.index for b in self.buses if b.bus_type == BusType.PV]

    @property
    def pq_buses(self) -> list[int]:
        return [b.index for b in self.buses if b.bus_type == BusType.PQ]

    def validate(self) -> None:
        """Check structural preconditions of a solve.

        Exactly one slack bus, unique identifiers, positions matching list
        order, and line endpoints that are in range and distinct.
        """
        if not self.buses:
            raise MalformedInputError("Network has no buses")

        for pos, bus in enumerate(self.buses):
            if bus.index != pos:
                raise MalformedInputError(
                    f"Bus {bus.bus_id} has index {bus.index}, expected {pos}"
                )

        n_slack = sum(1 for b in self.buses if b.bus_type == BusType.SLACK)
        if n_slack != 1:
            raise MalformedInputError(
                f"Network must have exactly one slack bus, found {n_slack}"
            )

        seen: set[int] = set()
        for bus in self.buses:
            if bus.bus_id in seen:
                raise MalformedInputError(f"Duplicate bus identifier {bus.bus_id}")
            seen.add(bus.bus_id)

        n = self.n_bus
        for line in self.lines:
            for k in (line.from_bus, line.to_bus):
                if not 0 <= k < n:
                    raise BusIndexOutOfRangeError(line.index, k, n)
            if line.from_bus == line.to_bus:
                raise MalformedInputError(
                    f"Line {line.index + 1} connects bus position "
                    f"{line.from_bus + 1} to itself"
                )

    def build_y_bus(self) -> np.ndarray:
        return build_admittance_matrix(self.n_bus, self.lines)

    def initial_voltages(self) -> np.ndarray:
        """Voltage vector from each bus's magnitude and angle setpoints."""
        return np.array(
            [cx.from_polar(b.v_setpoint_pu, b.theta_deg) for b in self.buses],
            dtype=complex,
        )

    def get_bus_by_id(self, bus_id: int) -> BusData:
        for bus in self.buses:
            if bus.bus_id == bus_id:
                return bus
        raise KeyError(f"Bus id {bus_id} not found")
