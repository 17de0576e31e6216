"""Plain-text report for Gauss-Seidel load flow results.

Produces ordered text blocks: admittance matrix, iteration trace,
termination state, final voltages and power mismatches.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from powerflow.network import complex_ops as cx
from powerflow.network.gauss_seidel import GaussSeidelResult, SolverState
from powerflow.network.mismatch import MismatchResult
from powerflow.network.network_model import NetworkModel

# ══════════════════════════════════════════════════════════════════════
# Constants
# ══════════════════════════════════════════════════════════════════════

RULE = "─" * 60

TITLE_Y_BUS = "Admittance Matrix (Y-bus)"
TITLE_TRACE = "Iteration Trace"
TITLE_STATE = "Termination"
TITLE_VOLTAGES = "Final Bus Voltages"
TITLE_MISMATCH = "Power Mismatch"


@dataclass
class ReportBlock:
    title: str
    lines: list[str] = field(default_factory=list)

    def render(self) -> str:
        return "\n".join([self.title, RULE, *self.lines])


@dataclass
class PowerFlowReport:
    blocks: list[ReportBlock] = field(default_factory=list)

    def block(self, title: str) -> ReportBlock:
        for b in self.blocks:
            if b.title == title:
                return b
        raise KeyError(f"No report block titled {title!r}")


def termination_message(result: GaussSeidelResult) -> str:
    if result.state == SolverState.CONVERGED:
        return f"Converged at iteration {result.iterations}"
    return f"Did not converge after {result.iterations} iterations"


# ══════════════════════════════════════════════════════════════════════
# Blocks
# ══════════════════════════════════════════════════════════════════════


def _y_bus_block(network: NetworkModel, y_bus: np.ndarray) -> ReportBlock:
    ids = [b.bus_id for b in network.buses]
    width = 22
    header = " " * 6 + "".join(f"{f'Bus {bid}':>{width}}" for bid in ids)
    lines = [header]
    for row, bid in enumerate(ids):
        cells = "".join(f"{cx.format_rect(y_bus[row, col]):>{width}}" for col in range(len(ids)))
        lines.append(f"{bid:>4}  {cells}")
    return ReportBlock(TITLE_Y_BUS, lines)


def _trace_block(result: GaussSeidelResult) -> ReportBlock:
    lines = []
    for k in range(1, result.iterations + 1):
        lines.append(f"Iteration {k}")
        for u in result.sweep(k):
            if u.skipped:
                lines.append(f"  Bus {u.bus_id}: skipped (slack)")
                continue
            lines.append(
                f"  Bus {u.bus_id}: V_old = {cx.format_polar(u.v_old)}, "
                f"V_new = {cx.format_polar(u.v_new)}, error = {u.error:.3e}"
            )
    return ReportBlock(TITLE_TRACE, lines)


def _voltage_block(network: NetworkModel, result: GaussSeidelResult) -> ReportBlock:
    lines = [f"{'Bus':>5}  {'Type':<6}{'|V| (pu)':>10}{'Angle (deg)':>14}"]
    magnitudes, angles = result.voltage_pu, result.voltage_angle_deg
    for bus in network.buses:
        mag, ang = magnitudes[bus.index], angles[bus.index]
        lines.append(
            f"{bus.bus_id:>5}  {bus.bus_type.value.upper():<6}{mag:>10.4f}{ang:>14.2f}"
        )
    return ReportBlock(TITLE_VOLTAGES, lines)


def _mismatch_block(mismatch: MismatchResult) -> ReportBlock:
    lines = [f"{'Bus':>5}{'dP (pu)':>12}{'dQ (pu)':>12}"]
    for m in mismatch.buses:
        lines.append(f"{m.bus_id:>5}{m.delta_p_pu:>12.4f}{m.delta_q_pu:>12.4f}")
    return ReportBlock(TITLE_MISMATCH, lines)


def build_report(
    network: NetworkModel,
    y_bus: np.ndarray,
    result: GaussSeidelResult,
    mismatch: MismatchResult,
) -> PowerFlowReport:
    """Assemble the report blocks in presentation order."""
    return PowerFlowReport(blocks=[
        _y_bus_block(network, y_bus),
        _trace_block(result),
        ReportBlock(TITLE_STATE, [termination_message(result)]),
        _voltage_block(network, result),
        _mismatch_block(mismatch),
    ])


def render_text(report: PowerFlowReport) -> str:
    return "\n\n".join(b.render() for b in report.blocks) + "\n"
