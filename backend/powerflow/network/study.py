"""One-call load flow study: Y-bus, Gauss-Seidel solve, mismatch, report."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from powerflow.network.gauss_seidel import (
    DEFAULT_MAX_ITER,
    DEFAULT_TOLERANCE,
    GaussSeidelResult,
    UpdateRule,
    solve_gauss_seidel,
)
from powerflow.network.mismatch import MismatchResult, compute_mismatch
from powerflow.network.network_model import NetworkModel
from powerflow.reporting.text_report import PowerFlowReport, build_report, render_text

logger = logging.getLogger(__name__)


@dataclass
class PowerFlowStudy:
    network: NetworkModel
    y_bus: np.ndarray
    result: GaussSeidelResult
    mismatch: MismatchResult
    report: PowerFlowReport

    def report_text(self) -> str:
        return render_text(self.report)


def run_study(
    network: NetworkModel,
    max_iter: int = DEFAULT_MAX_ITER,
    tolerance: float = DEFAULT_TOLERANCE,
    update_rule: UpdateRule | str = UpdateRule.SIMPLIFIED,
) -> PowerFlowStudy:
    """Validate the network, solve it and assemble the report."""
    network.validate()
    y_bus = network.build_y_bus()
    logger.debug("Built %dx%d Y-bus from %d lines", network.n_bus, network.n_bus, len(network.lines))

    result = solve_gauss_seidel(
        network,
        max_iter=max_iter,
        tolerance=tolerance,
        update_rule=update_rule,
        y_bus=y_bus,
    )
    mismatch = compute_mismatch(network, y_bus, result.voltages)
    report = build_report(network, y_bus, result, mismatch)

    return PowerFlowStudy(
        network=network,
        y_bus=y_bus,
        result=result,
        mismatch=mismatch,
        report=report,
    )
