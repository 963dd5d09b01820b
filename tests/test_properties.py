"""Behaviour every classifier shares, checked across all five of them."""

import numpy as np
import pytest

from conftest import feed, stream_from_intervals
from packet_loss_classification import (
    Classification,
    MBiaz,
    OutOfOrderObservation,
    Spike,
    Trend,
    ZBS,
    ZBSConfig,
    ZigZag,
)
from packet_loss_classification.simulate import generate_trace

CONFIG = ZBSConfig.recommended()

FACTORIES = {
    "mbiaz": lambda: MBiaz(CONFIG.mbiaz),
    "spike": lambda: Spike(CONFIG.spike),
    "zigzag": lambda: ZigZag(CONFIG.zigzag),
    "trend": lambda: Trend(CONFIG.trend),
    "zbs": lambda: ZBS.from_config(CONFIG),
}

# Qualifying intervals each base classifier needs before it can decide
REQUIRED_INTERVALS = {
    "mbiaz": CONFIG.mbiaz.window_size,
    "spike": CONFIG.spike.window_size,
    "zigzag": CONFIG.zigzag.window_size + 1,
    "trend": CONFIG.trend.window_size,
}


def noisy_trace(seed):
    return generate_trace(
        packets=800,
        base_interval=0.002,
        wireless_loss_rate=0.03,
        congestion_period=40,
        rng=np.random.default_rng(seed),
    )


@pytest.fixture(params=sorted(FACTORIES))
def classifier(request):
    return FACTORIES[request.param]()


class TestSharedProperties:
    def test_no_gaps_never_classifies(self, classifier):
        rng = np.random.default_rng(3)
        intervals = list(rng.uniform(0.5, 5.0, size=300))

        assert feed(classifier, stream_from_intervals(intervals)) == []

    def test_out_of_order_observation_leaves_state_unchanged(self, classifier):
        observations = [(p.sequence_number, p.arrival_time) for p in noisy_trace(5).packets]
        feed(classifier, observations[:400])
        before = classifier.snapshot()
        last_seq, last_time = observations[399]

        for seq in (last_seq, last_seq - 1, 0):
            with pytest.raises(OutOfOrderObservation):
                classifier.report_observation(seq, last_time + 1.0)

        assert classifier.snapshot() == before

    def test_identical_streams_give_identical_classifications(self):
        observations = [(p.sequence_number, p.arrival_time) for p in noisy_trace(11).packets]
        for name, factory in FACTORIES.items():
            first = [verdict for _, verdict in feed(factory(), observations)]
            second = [verdict for _, verdict in feed(factory(), observations)]
            assert first == second, name
            assert first, name


@pytest.mark.parametrize("name", sorted(REQUIRED_INTERVALS))
class TestUnknownUntilWindowFull:
    def test_unknown_below_window(self, name):
        classifier = FACTORIES[name]()
        count = REQUIRED_INTERVALS[name] - 1
        feed(classifier, stream_from_intervals([1.0] * count))

        _, verdict = classifier.report_observation(count + 2, count + 2.0)

        assert verdict is Classification.UNKNOWN

    def test_decides_once_window_full(self, name):
        classifier = FACTORIES[name]()
        count = REQUIRED_INTERVALS[name]
        feed(classifier, stream_from_intervals([1.0] * count))

        _, verdict = classifier.report_observation(count + 2, count + 2.0)

        assert verdict is not Classification.UNKNOWN

    def test_stays_decided_after_losses(self, name):
        classifier = FACTORIES[name]()
        count = REQUIRED_INTERVALS[name]
        feed(classifier, stream_from_intervals([1.0] * count))

        # Repeated single losses leave the windows full
        seq, t = count, float(count)
        for _ in range(10):
            seq, t = seq + 2, t + 2.0
            _, verdict = classifier.report_observation(seq, t)
            assert verdict is not Classification.UNKNOWN
