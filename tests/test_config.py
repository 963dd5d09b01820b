"""Tests for construction-time configuration validation."""

import pytest

from packet_loss_classification import (
    InvalidConfiguration,
    MBiazConfig,
    SpikeConfig,
    TopologyConfig,
    TopologyEstimate,
    TrendConfig,
    ZBSConfig,
    ZigZagConfig,
)
from packet_loss_classification.config import RECOMMENDED_WEIGHTS


class TestRecommended:
    @pytest.mark.parametrize(
        "cls", [MBiazConfig, SpikeConfig, ZigZagConfig, TrendConfig, TopologyConfig, ZBSConfig]
    )
    def test_recommended_presets_are_valid(self, cls):
        assert isinstance(cls.recommended(), cls)

    def test_mbiaz_preset_uses_published_limits(self):
        config = MBiazConfig.recommended()
        assert (config.lower_window_limit, config.upper_window_limit) == (1.0, 1.25)


class TestInvalidConfiguration:
    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(window_size=0, lower_window_limit=1.0, upper_window_limit=1.25),
            dict(window_size=-4, lower_window_limit=1.0, upper_window_limit=1.25),
            dict(window_size=2.5, lower_window_limit=1.0, upper_window_limit=1.25),
            dict(window_size=True, lower_window_limit=1.0, upper_window_limit=1.25),
            dict(window_size=8, lower_window_limit=0.0, upper_window_limit=1.25),
            dict(window_size=8, lower_window_limit=1.5, upper_window_limit=1.25),
        ],
    )
    def test_mbiaz(self, kwargs):
        with pytest.raises(InvalidConfiguration):
            MBiazConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(window_size=0, spike_start_threshold=2.0, spike_end_threshold=1.5),
            dict(window_size=8, spike_start_threshold=-2.0, spike_end_threshold=1.5),
            dict(window_size=8, spike_start_threshold=2.0, spike_end_threshold=0.0),
            dict(window_size=8, spike_start_threshold=1.5, spike_end_threshold=2.0),
        ],
    )
    def test_spike(self, kwargs):
        with pytest.raises(InvalidConfiguration):
            SpikeConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(window_size=0, run_length_threshold=1),
            dict(window_size=8, run_length_threshold=0),
            dict(window_size=4, run_length_threshold=4),
        ],
    )
    def test_zigzag(self, kwargs):
        with pytest.raises(InvalidConfiguration):
            ZigZagConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(window_size=1, slope_threshold=0.02),
            dict(window_size=8, slope_threshold=0.0),
            dict(window_size=8, slope_threshold="0.02"),
        ],
    )
    def test_trend(self, kwargs):
        with pytest.raises(InvalidConfiguration):
            TrendConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(window_size=1, variance_threshold=0.05, hysteresis=0.2, min_dwell=0),
            dict(window_size=8, variance_threshold=0.0, hysteresis=0.2, min_dwell=0),
            dict(window_size=8, variance_threshold=0.05, hysteresis=1.0, min_dwell=0),
            dict(window_size=8, variance_threshold=0.05, hysteresis=-0.1, min_dwell=0),
            dict(window_size=8, variance_threshold=0.05, hysteresis=0.2, min_dwell=-1),
        ],
    )
    def test_topology(self, kwargs):
        with pytest.raises(InvalidConfiguration):
            TopologyConfig(**kwargs)

    def test_missing_parameter_fails_at_construction(self):
        with pytest.raises(TypeError):
            MBiazConfig(window_size=8)

    def test_invalid_configuration_is_a_value_error(self):
        with pytest.raises(ValueError):
            TrendConfig(window_size=0, slope_threshold=0.1)


class TestZBSConfig:
    def _build(self, **overrides):
        kwargs = dict(
            mbiaz=MBiazConfig.recommended(),
            spike=SpikeConfig.recommended(),
            zigzag=ZigZagConfig.recommended(),
            trend=TrendConfig.recommended(),
            topology=TopologyConfig.recommended(),
            weights=RECOMMENDED_WEIGHTS,
        )
        kwargs.update(overrides)
        return ZBSConfig(**kwargs)

    def test_weights_are_copied(self):
        weights = {r: dict(row) for r, row in RECOMMENDED_WEIGHTS.items()}
        config = self._build(weights=weights)
        weights[TopologyEstimate.STABLE]["mbiaz"] = 99.0

        assert config.weights[TopologyEstimate.STABLE]["mbiaz"] == 2.0

    def test_missing_regime(self):
        weights = {r: row for r, row in RECOMMENDED_WEIGHTS.items() if r is not TopologyEstimate.VOLATILE}
        with pytest.raises(InvalidConfiguration):
            self._build(weights=weights)

    def test_missing_classifier_weight(self):
        weights = {r: dict(row) for r, row in RECOMMENDED_WEIGHTS.items()}
        del weights[TopologyEstimate.UNDETERMINED]["zigzag"]
        with pytest.raises(InvalidConfiguration):
            self._build(weights=weights)

    def test_unknown_classifier_weight(self):
        weights = {r: dict(row) for r, row in RECOMMENDED_WEIGHTS.items()}
        weights[TopologyEstimate.STABLE]["bogus"] = 1.0
        with pytest.raises(InvalidConfiguration):
            self._build(weights=weights)

    def test_wrong_component_config_type(self):
        with pytest.raises(InvalidConfiguration):
            self._build(mbiaz=SpikeConfig.recommended())
