"""Shared test fixtures for SeidelFlow engine and API tests."""

from __future__ import annotations

import pytest

from powerflow.network.network_model import BusData, BusType, LineData, NetworkModel


# ======================================================================
# Network fixtures
# ======================================================================


def _two_bus_network(
    p_pu: float = -0.3,
    q_pu: float = 0.1,
    r_pu: float = 0.01,
    x_pu: float = 0.05,
) -> NetworkModel:
    """Minimal 2-bus network: slack + PQ load over a single line."""
    buses = [
        BusData(index=0, bus_id=1, bus_type=BusType.SLACK, v_setpoint_pu=1.0),
        BusData(index=1, bus_id=2, bus_type=BusType.PQ, p_pu=p_pu, q_pu=q_pu),
    ]
    lines = [LineData(index=0, from_bus=0, to_bus=1, r_pu=r_pu, x_pu=x_pu)]
    return NetworkModel(buses=buses, lines=lines)


def _three_bus_network() -> NetworkModel:
    """3-bus chain: slack (1) - PV (2) - PQ (3)."""
    buses = [
        BusData(index=0, bus_id=1, bus_type=BusType.SLACK, v_setpoint_pu=1.0, theta_deg=0.0),
        BusData(index=1, bus_id=2, bus_type=BusType.PV, p_pu=0.5, v_setpoint_pu=1.0),
        BusData(index=2, bus_id=3, bus_type=BusType.PQ, p_pu=-0.8, q_pu=-0.4),
    ]
    lines = [
        LineData(index=0, from_bus=0, to_bus=1, r_pu=0.02, x_pu=0.06, b_pu=0.0),
        LineData(index=1, from_bus=1, to_bus=2, r_pu=0.03, x_pu=0.08, b_pu=0.0),
    ]
    return NetworkModel(buses=buses, lines=lines)


@pytest.fixture
def two_bus_network() -> NetworkModel:
    return _two_bus_network()


@pytest.fixture
def three_bus_network() -> NetworkModel:
    return _three_bus_network()


# ======================================================================
# Record fixtures
# ======================================================================


@pytest.fixture
def three_bus_text() -> tuple[str, str]:
    """Bus and line tables for the 3-bus chain as text blocks."""
    bus_text = """
    # id  type   P     Q     V    angle
    1     Slack  0.0   0.0   1.0  0.0
    2     PV     0.5   0.0   1.0  0.0
    3     PQ    -0.8  -0.4   1.0  0.0
    """
    line_text = """
    # from to  R     X     B
    1, 2, 0.02, 0.06, 0.0
    2, 3, 0.03, 0.08, 0.0
    """
    return bus_text, line_text
