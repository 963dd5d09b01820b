"""Shared stream builders for the classifier tests.

Arrival times are kept on exactly representable values (integers, halves)
so interval arithmetic in assertions is exact.
"""

import pytest

from packet_loss_classification import (
    MBiazConfig,
    SpikeConfig,
    TopologyConfig,
    TrendConfig,
    ZigZagConfig,
)


def stream_from_intervals(intervals, start_seq=0, start_time=0.0):
    """Contiguous (seq, time) pairs whose successive spacing is intervals."""
    observations = [(start_seq, start_time)]
    t = start_time
    for i, interval in enumerate(intervals, start=1):
        t += interval
        observations.append((start_seq + i, t))
    return observations


def feed(classifier, observations):
    """Report every observation and return the non-None results."""
    results = []
    for seq, t in observations:
        result = classifier.report_observation(seq, t)
        if result is not None:
            results.append(result)
    return results


@pytest.fixture
def mbiaz_config():
    return MBiazConfig(window_size=8, lower_window_limit=1.0, upper_window_limit=1.25)


@pytest.fixture
def spike_config():
    return SpikeConfig(window_size=8, spike_start_threshold=2.0, spike_end_threshold=1.5)


@pytest.fixture
def zigzag_config():
    return ZigZagConfig(window_size=4, run_length_threshold=2)


@pytest.fixture
def trend_config():
    return TrendConfig(window_size=5, slope_threshold=0.02)


@pytest.fixture
def topology_config():
    return TopologyConfig(window_size=4, variance_threshold=0.2, hysteresis=0.5, min_dwell=0)
