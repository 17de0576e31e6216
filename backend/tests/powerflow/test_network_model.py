"""Tests for powerflow.network.network_model: Y-bus and validation."""

from __future__ import annotations

import numpy as np
import pytest

from powerflow.network.errors import (
    BusIndexOutOfRangeError,
    ComplexDivisionByZero,
    MalformedInputError,
)
from powerflow.network.network_model import (
    BusData,
    BusType,
    LineData,
    NetworkModel,
    build_admittance_matrix,
)


class TestAdmittanceMatrix:

    def test_single_line_entries(self):
        """y = 1/(0.02 + j0.06) = 5 - j15."""
        y_bus = build_admittance_matrix(2, [LineData(0, 0, 1, r_pu=0.02, x_pu=0.06)])
        np.testing.assert_allclose(y_bus[0, 0], 5 - 15j)
        np.testing.assert_allclose(y_bus[1, 1], 5 - 15j)
        np.testing.assert_allclose(y_bus[0, 1], -5 + 15j)
        np.testing.assert_allclose(y_bus[1, 0], -5 + 15j)

    def test_shunt_split_between_terminals(self):
        y_bus = build_admittance_matrix(2, [LineData(0, 0, 1, r_pu=0.02, x_pu=0.06, b_pu=0.04)])
        np.testing.assert_allclose(y_bus[0, 0], 5 - 15j + 0.02j)
        np.testing.assert_allclose(y_bus[1, 1], 5 - 15j + 0.02j)
        # Shunt never appears off the diagonal
        np.testing.assert_allclose(y_bus[0, 1], -5 + 15j)

    def test_parallel_lines_accumulate(self):
        line = LineData(0, 0, 1, r_pu=0.02, x_pu=0.06)
        twin = LineData(1, 0, 1, r_pu=0.02, x_pu=0.06)
        y_bus = build_admittance_matrix(2, [line, twin])
        np.testing.assert_allclose(y_bus[0, 0], 10 - 30j)
        np.testing.assert_allclose(y_bus[0, 1], -10 + 30j)

    def test_empty_matrix_starts_at_zero(self):
        y_bus = build_admittance_matrix(3, [])
        assert y_bus.shape == (3, 3)
        assert y_bus.dtype == complex
        assert not y_bus.any()

    def test_ybus_symmetry(self, three_bus_network):
        y_bus = three_bus_network.build_y_bus()
        np.testing.assert_allclose(
            y_bus, y_bus.T, atol=1e-12,
            err_msg="Y-bus matrix is not symmetric",
        )

    def test_row_sums_vanish_without_shunts(self, three_bus_network):
        """With B = 0 every row of Y sums to zero."""
        y_bus = three_bus_network.build_y_bus()
        np.testing.assert_allclose(y_bus.sum(axis=1), 0, atol=1e-12)

    def test_zero_impedance_raises_division_by_zero(self):
        with pytest.raises(ComplexDivisionByZero):
            build_admittance_matrix(2, [LineData(0, 0, 1, r_pu=0.0, x_pu=0.0)])

    def test_out_of_range_bus_raises(self):
        with pytest.raises(BusIndexOutOfRangeError):
            build_admittance_matrix(2, [LineData(0, 0, 2, r_pu=0.01, x_pu=0.05)])

    def test_out_of_range_is_malformed_input(self):
        with pytest.raises(MalformedInputError, match="bus position 4"):
            build_admittance_matrix(3, [LineData(0, 3, 0, r_pu=0.01, x_pu=0.05)])


class TestNetworkModel:

    def test_bus_classification(self, three_bus_network):
        assert three_bus_network.n_bus == 3
        assert three_bus_network.slack_bus == 0
        assert three_bus_network.pv_buses == [1]
        assert three_bus_network.pq_buses == [2]

    def test_initial_voltages_from_setpoints(self):
        network = NetworkModel(buses=[
            BusData(0, 1, BusType.SLACK, v_setpoint_pu=1.05, theta_deg=0.0),
            BusData(1, 2, BusType.PQ, v_setpoint_pu=1.0, theta_deg=90.0),
        ])
        v0 = network.initial_voltages()
        np.testing.assert_allclose(v0, [1.05, 1j], atol=1e-12)

    def test_s_spec_negates_q(self):
        bus = BusData(0, 1, BusType.PQ, p_pu=-0.8, q_pu=-0.4)
        assert bus.s_spec == complex(-0.8, 0.4)

    def test_valid_network_passes(self, three_bus_network):
        three_bus_network.validate()

    def test_no_slack_rejected(self, three_bus_network):
        buses = [
            BusData(b.index, b.bus_id, BusType.PQ if b.bus_type == BusType.SLACK else b.bus_type)
            for b in three_bus_network.buses
        ]
        network = NetworkModel(buses=buses, lines=three_bus_network.lines)
        with pytest.raises(MalformedInputError, match="exactly one slack"):
            network.validate()

    def test_two_slacks_rejected(self):
        network = NetworkModel(buses=[
            BusData(0, 1, BusType.SLACK),
            BusData(1, 2, BusType.SLACK),
        ], lines=[LineData(0, 0, 1, 0.01, 0.05)])
        with pytest.raises(MalformedInputError, match="found 2"):
            network.validate()

    def test_duplicate_ids_rejected(self):
        network = NetworkModel(buses=[
            BusData(0, 7, BusType.SLACK),
            BusData(1, 7, BusType.PQ),
        ], lines=[LineData(0, 0, 1, 0.01, 0.05)])
        with pytest.raises(MalformedInputError, match="Duplicate bus identifier 7"):
            network.validate()

    def test_self_loop_rejected(self):
        network = NetworkModel(buses=[
            BusData(0, 1, BusType.SLACK),
            BusData(1, 2, BusType.PQ),
        ], lines=[LineData(0, 1, 1, 0.01, 0.05)])
        with pytest.raises(MalformedInputError, match="to itself"):
            network.validate()

    def test_empty_network_rejected(self):
        with pytest.raises(MalformedInputError, match="no buses"):
            NetworkModel().validate()

    def test_identifier_is_label_not_index(self):
        """Bus ids 10/20 still map to matrix rows 0/1."""
        network = NetworkModel(buses=[
            BusData(0, 20, BusType.SLACK),
            BusData(1, 10, BusType.PQ),
        ], lines=[LineData(0, 0, 1, 0.02, 0.06)])
        network.validate()
        assert network.build_y_bus().shape == (2, 2)
        assert network.get_bus_by_id(10).index == 1
