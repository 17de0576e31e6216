"""Gauss-Seidel AC Power Flow Solver.

Sweeps the buses in input order and updates each voltage in place, so buses
later in a sweep already see the new values of earlier ones.

Bus handling per sweep:
  Slack: held at its setpoint, never updated
  PV:    update, then re-impose |V| = V_setpoint and keep the angle
  PQ:    accept the update as-is

Update rules, with S = P - jQ and ΣYV = Σ_{j≠i} Y_ij·V_j:
  simplified:  V_i = S / conj(ΣYV)
  classical:   V_i = (conj(S) / conj(V_i) - ΣYV) / Y_ii

Convergence: max |V_new - V_old| over non-slack buses below tolerance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from powerflow.network import complex_ops as cx
from powerflow.network.errors import ComplexDivisionByZero, DegenerateNetworkError
from powerflow.network.network_model import BusData, BusType, NetworkModel

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITER = 50
DEFAULT_TOLERANCE = 1e-6


class UpdateRule(str, Enum):
    SIMPLIFIED = "simplified"
    CLASSICAL = "classical"


class SolverState(str, Enum):
    RUNNING = "running"
    CONVERGED = "converged"
    NOT_CONVERGED = "not_converged"


@dataclass
class BusUpdate:
    """One bus visit within one sweep."""
    iteration: int
    bus_index: int
    bus_id: int
    bus_type: BusType
    v_old: complex
    v_new: complex
    error: float
    skipped: bool = False


@dataclass
class GaussSeidelResult:
    """Results of a Gauss-Seidel solve."""
    state: SolverState
    iterations: int
    max_error: float
    voltages: np.ndarray  # complex, indexed by bus position
    update_rule: UpdateRule
    max_iter: int
    tolerance: float
    trace: list[BusUpdate] = field(default_factory=list)
    error_history: list[float] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.state == SolverState.CONVERGED

    @property
    def voltage_pu(self) -> np.ndarray:
        return np.abs(self.voltages)

    @property
    def voltage_angle_deg(self) -> np.ndarray:
        return np.array([cx.angle_deg(v) for v in self.voltages])

    def sweep(self, iteration: int) -> list[BusUpdate]:
        """Trace entries of a single sweep (1-based)."""
        return [u for u in self.trace if u.iteration == iteration]


def solve_gauss_seidel(
    network: NetworkModel,
    max_iter: int = DEFAULT_MAX_ITER,
    tolerance: float = DEFAULT_TOLERANCE,
    update_rule: UpdateRule | str = UpdateRule.SIMPLIFIED,
    y_bus: np.ndarray | None = None,
) -> GaussSeidelResult:
    """Solve AC power flow using the Gauss-Seidel method.

    Args:
        network: validated NetworkModel
        max_iter: sweep cap (default 50)
        tolerance: convergence threshold on max |ΔV| per sweep
        update_rule: "simplified" (default) or "classical"
        y_bus: precomputed admittance matrix, built from the network if None

    Raises:
        DegenerateNetworkError: a non-slack bus has zero self-admittance, or
            an update divides by zero or overflows.
    """
    if max_iter < 1:
        raise ValueError(f"max_iter must be at least 1, got {max_iter}")
    if not tolerance > 0:
        raise ValueError(f"tolerance must be positive, got {tolerance}")
    update_rule = UpdateRule(update_rule)

    if y_bus is None:
        y_bus = network.build_y_bus()

    for bus in network.buses:
        if bus.bus_type != BusType.SLACK and y_bus[bus.index, bus.index] == 0:
            raise DegenerateNetworkError(
                f"Bus {bus.bus_id} has zero self-admittance (no connected lines)"
            )

    V = network.initial_voltages()
    trace: list[BusUpdate] = []
    error_history: list[float] = []

    state = SolverState.RUNNING
    iteration = 0
    max_error = float("inf")

    while state == SolverState.RUNNING:
        iteration += 1
        max_error = 0.0

        for bus in network.buses:
            i = bus.index
            v_old = complex(V[i])

            if bus.bus_type == BusType.SLACK:
                trace.append(BusUpdate(
                    iteration=iteration, bus_index=i, bus_id=bus.bus_id,
                    bus_type=bus.bus_type, v_old=v_old, v_new=v_old,
                    error=0.0, skipped=True,
                ))
                continue

            v_new = _update_bus(bus, y_bus, V, update_rule)
            if bus.bus_type == BusType.PV:
                v_new = cx.from_polar(bus.v_setpoint_pu, cx.angle_deg(v_new))

            V[i] = v_new
            error = cx.magnitude(cx.sub(v_new, v_old))
            max_error = max(max_error, error)

            trace.append(BusUpdate(
                iteration=iteration, bus_index=i, bus_id=bus.bus_id,
                bus_type=bus.bus_type, v_old=v_old, v_new=v_new, error=error,
            ))

        error_history.append(max_error)
        logger.debug("Gauss-Seidel sweep %d: max |dV| = %.3e", iteration, max_error)

        if max_error < tolerance:
            state = SolverState.CONVERGED
        elif iteration >= max_iter:
            state = SolverState.NOT_CONVERGED

    if state == SolverState.CONVERGED:
        logger.info(
            "Gauss-Seidel (%s) converged at iteration %d (max |dV| = %.3e)",
            update_rule.value, iteration, max_error,
        )
    else:
        logger.warning(
            "Gauss-Seidel (%s) did not converge after %d iterations (max |dV| = %.3e)",
            update_rule.value, iteration, max_error,
        )

    return GaussSeidelResult(
        state=state,
        iterations=iteration,
        max_error=max_error,
        voltages=V.copy(),
        update_rule=update_rule,
        max_iter=max_iter,
        tolerance=tolerance,
        trace=trace,
        error_history=error_history,
    )


def _cross_term(y_bus: np.ndarray, V: np.ndarray, i: int) -> complex:
    """Σ_{j≠i} Y_ij·V_j over the current voltage vector."""
    return complex(y_bus[i, :i] @ V[:i] + y_bus[i, i + 1:] @ V[i + 1:])


def _update_bus(
    bus: BusData,
    y_bus: np.ndarray,
    V: np.ndarray,
    update_rule: UpdateRule,
) -> complex:
    """Unconstrained voltage update for one non-slack bus."""
    i = bus.index
    sum_yv = _cross_term(y_bus, V, i)
    s_spec = bus.s_spec

    try:
        if update_rule == UpdateRule.SIMPLIFIED:
            v_new = cx.div(s_spec, cx.conj(sum_yv))
        else:
            if bus.bus_type == BusType.PV:
                # Q that the current state would draw, in the mismatch convention
                s_calc = cx.mul(V[i], cx.conj(sum_yv + y_bus[i, i] * V[i]))
                s_spec = complex(bus.p_pu, s_calc.imag)
            current = cx.div(cx.conj(s_spec), cx.conj(V[i]))
            v_new = cx.div(cx.sub(current, sum_yv), y_bus[i, i])
    except ComplexDivisionByZero as exc:
        raise DegenerateNetworkError(
            f"Bus {bus.bus_id}: voltage update divides by zero ({exc})"
        ) from exc

    if not np.isfinite(v_new):
        raise DegenerateNetworkError(
            f"Bus {bus.bus_id}: voltage update is not finite ({v_new})"
        )
    return v_new
