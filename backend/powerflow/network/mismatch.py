"""Post-solution power mismatch.

S_calc = V ∘ conj(Y·V), summed over all buses including the diagonal.
ΔP = Re(S_calc) - P_spec, ΔQ = -Im(S_calc) - Q_spec. Raw values only;
interpreting them against a tolerance is left to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from powerflow.network.network_model import NetworkModel


@dataclass(frozen=True)
class BusMismatch:
    bus_index: int
    bus_id: int
    p_calc_pu: float
    q_calc_pu: float
    delta_p_pu: float
    delta_q_pu: float


@dataclass
class MismatchResult:
    buses: list[BusMismatch] = field(default_factory=list)

    @property
    def delta_p(self) -> np.ndarray:
        return np.array([b.delta_p_pu for b in self.buses])

    @property
    def delta_q(self) -> np.ndarray:
        return np.array([b.delta_q_pu for b in self.buses])

    @property
    def max_abs_delta_p(self) -> float:
        return float(np.max(np.abs(self.delta_p))) if self.buses else 0.0

    @property
    def max_abs_delta_q(self) -> float:
        return float(np.max(np.abs(self.delta_q))) if self.buses else 0.0


def compute_mismatch(
    network: NetworkModel,
    y_bus: np.ndarray,
    voltages: np.ndarray,
) -> MismatchResult:
    """Recompute bus injections from voltages and compare with setpoints."""
    i_bus = y_bus @ voltages
    s_calc = voltages * np.conj(i_bus)
    p_calc = s_calc.real
    q_calc = -s_calc.imag

    return MismatchResult(buses=[
        BusMismatch(
            bus_index=bus.index,
            bus_id=bus.bus_id,
            p_calc_pu=float(p_calc[bus.index]),
            q_calc_pu=float(q_calc[bus.index]),
            delta_p_pu=float(p_calc[bus.index] - bus.p_pu),
            delta_q_pu=float(q_calc[bus.index] - bus.q_pu),
        )
        for bus in network.buses
    ])
