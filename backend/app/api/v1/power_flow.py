"""Gauss-Seidel power flow endpoints.

Synchronous solve (well under a second for networks of a few dozen buses);
no state is kept between requests.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from app.config import settings
from app.schemas.power_flow import (
    BusMismatchRow,
    BusVoltage,
    ComplexValue,
    GaussSeidelRequest,
    GaussSeidelResponse,
    GaussSeidelTextRequest,
    SolverOptions,
    TraceEntry,
)
from powerflow.network import complex_ops as cx
from powerflow.network.errors import (
    ComplexDivisionByZero,
    DegenerateNetworkError,
    MalformedInputError,
)
from powerflow.network.network_model import NetworkModel
from powerflow.network.records import build_network_from_records, build_network_from_text
from powerflow.network.study import PowerFlowStudy, run_study

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/gauss-seidel", response_model=GaussSeidelResponse)
async def run_gauss_seidel(body: GaussSeidelRequest):
    bus_rows = [
        [b.bus_id, b.bus_type, b.p_pu, b.q_pu, b.v_pu, b.theta_deg]
        for b in body.buses
    ]
    line_rows = [
        [ln.from_bus, ln.to_bus, ln.r_pu, ln.x_pu, ln.b_pu]
        for ln in body.lines
    ]
    try:
        network = build_network_from_records(bus_rows, line_rows)
    except MalformedInputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return _solve(network, body)


@router.post("/gauss-seidel/text", response_model=GaussSeidelResponse)
async def run_gauss_seidel_text(body: GaussSeidelTextRequest):
    try:
        network = build_network_from_text(body.bus_data, body.line_data)
    except MalformedInputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    return _solve(network, body)


def _solve(network: NetworkModel, options: SolverOptions) -> GaussSeidelResponse:
    max_iter = options.max_iterations or settings.gs_max_iterations
    tolerance = options.tolerance or settings.gs_tolerance
    update_rule = options.update_rule or settings.gs_update_rule

    try:
        study = run_study(
            network, max_iter=max_iter, tolerance=tolerance, update_rule=update_rule,
        )
    except MalformedInputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except (DegenerateNetworkError, ComplexDivisionByZero) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Degenerate network: {e}",
        )

    logger.info(
        "Gauss-Seidel solve: %d buses, %s after %d iterations",
        network.n_bus, study.result.state.value, study.result.iterations,
        extra={
            "n_bus": network.n_bus,
            "iterations": study.result.iterations,
            "state": study.result.state.value,
        },
    )
    return _to_response(study)


def _to_response(study: PowerFlowStudy) -> GaussSeidelResponse:
    result = study.result
    network = study.network

    y_bus = [
        [ComplexValue(real=float(y.real), imag=float(y.imag)) for y in row]
        for row in study.y_bus
    ]
    trace = [
        TraceEntry(
            iteration=u.iteration,
            bus_id=u.bus_id,
            skipped=u.skipped,
            v_old=cx.format_polar(u.v_old),
            v_new=cx.format_polar(u.v_new),
            error=f"{u.error:.3e}",
        )
        for u in result.trace
    ]
    voltages = []
    magnitudes, angles = result.voltage_pu, result.voltage_angle_deg
    for bus in network.buses:
        mag, ang = float(magnitudes[bus.index]), float(angles[bus.index])
        voltages.append(BusVoltage(
            bus_id=bus.bus_id,
            bus_type=bus.bus_type.value,
            magnitude_pu=round(mag, 4),
            angle_deg=round(ang, 2),
        ))
    mismatches = [
        BusMismatchRow(
            bus_id=m.bus_id,
            delta_p_pu=round(m.delta_p_pu, 4),
            delta_q_pu=round(m.delta_q_pu, 4),
        )
        for m in study.mismatch.buses
    ]

    return GaussSeidelResponse(
        state=result.state.value,
        converged=result.converged,
        iterations=result.iterations,
        max_error=result.max_error,
        update_rule=result.update_rule.value,
        y_bus=y_bus,
        trace=trace,
        voltages=voltages,
        mismatches=mismatches,
        report=study.report_text(),
    )
