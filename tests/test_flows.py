"""Tests for per-flow classifier bookkeeping."""

import pytest

from packet_loss_classification import (
    Classification,
    FlowTable,
    MBiaz,
    MBiazConfig,
    OutOfOrderObservation,
)


@pytest.fixture
def table():
    config = MBiazConfig(window_size=4, lower_window_limit=1.0, upper_window_limit=1.25)
    return FlowTable(lambda: MBiaz(config))


class TestFlowTable:
    def test_flows_are_created_lazily(self, table):
        assert len(table) == 0
        assert "a" not in table

        table.report_observation("a", 0, 0.0)

        assert "a" in table
        assert table.flow_ids() == ["a"]

    def test_each_flow_gets_its_own_instance(self, table):
        table.report_observation("a", 0, 0.0)
        table.report_observation("b", 0, 0.0)

        assert table.get("a") is not table.get("b")
        assert len(table) == 2

    def test_flows_do_not_share_history(self, table):
        for seq in range(6):
            table.report_observation("a", seq, float(seq))
        table.report_observation("b", 100, 0.0)

        # Flow a is warmed up, flow b has no intervals yet
        _, verdict_a = table.report_observation("a", 7, 7.0)
        _, verdict_b = table.report_observation("b", 102, 2.0)

        assert verdict_a is Classification.WIRELESS
        assert verdict_b is Classification.UNKNOWN

    def test_out_of_order_is_scoped_to_its_flow(self, table):
        table.report_observation("a", 5, 5.0)
        table.report_observation("b", 1, 1.0)

        with pytest.raises(OutOfOrderObservation):
            table.report_observation("a", 4, 6.0)

        assert table.report_observation("b", 2, 2.0) is None

    def test_discard_drops_state(self, table):
        table.report_observation("a", 5, 5.0)
        table.discard("a")

        assert "a" not in table
        # A new instance starts over, so a lower sequence number is accepted
        assert table.report_observation("a", 0, 0.0) is None

    def test_discard_unknown_flow_is_noop(self, table):
        table.discard("missing")
        assert len(table) == 0
