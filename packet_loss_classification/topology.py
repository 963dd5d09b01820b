"""
Path topology estimation.

Each classifier performs well on the topologies it was designed for. On a
path whose natural spacing is steady (e.g. a wireless last hop that is the
unshared bottleneck) the absolute spacing floor is meaningful and MBiaz and
Spike do best. On a path where spacing varies a lot (shared backbone,
competing flows) relative patterns are more trustworthy, which favours
ZigZag and Trend.

The estimator summarizes the path as a regime from the normalized variance
(variance / mean^2) of recent inter-arrival times. A dead-band around the
threshold and a minimum dwell time between switches keep the regime from
flapping when the variance hovers near the threshold.
"""

import logging
from collections import deque
from typing import Optional

import numpy as np

from packet_loss_classification.config import TopologyConfig
from packet_loss_classification.detector import LossDetector
from packet_loss_classification.models import Observation, TopologyEstimate

logger = logging.getLogger(__name__)


class TopologyEstimator:
    """
    Rolling jitter-regime estimator for one flow.

    Attributes:
        config (TopologyConfig): Window, threshold, dead-band and dwell
    """

    def __init__(self, config: TopologyConfig):
        self.config = config
        self._detector = LossDetector()
        self._intervals = deque(maxlen=config.window_size)
        self._regime = TopologyEstimate.UNDETERMINED
        # Intervals since the last switch, saturating at min_dwell
        self._since_switch = 0

        logger.info(
            f"TopologyEstimator initialized: window={config.window_size}, "
            f"variance_threshold={config.variance_threshold}, "
            f"hysteresis={config.hysteresis}, min_dwell={config.min_dwell}"
        )

    def current_regime(self) -> TopologyEstimate:
        return self._regime

    def normalized_variance(self) -> Optional[float]:
        """Variance of the window divided by its squared mean, None until full"""
        if len(self._intervals) < self.config.window_size:
            return None
        values = np.fromiter(self._intervals, dtype=float, count=len(self._intervals))
        mean = values.mean()
        if mean <= 0:
            return 0.0
        return float(values.var() / (mean * mean))

    def _next_regime(self, variance):
        threshold = self.config.variance_threshold
        if self._regime is TopologyEstimate.UNDETERMINED:
            return TopologyEstimate.VOLATILE if variance > threshold else TopologyEstimate.STABLE

        if self._since_switch < self.config.min_dwell:
            return self._regime
        if self._regime is TopologyEstimate.STABLE and variance > threshold * (1 + self.config.hysteresis):
            return TopologyEstimate.VOLATILE
        if self._regime is TopologyEstimate.VOLATILE and variance < threshold * (1 - self.config.hysteresis):
            return TopologyEstimate.STABLE
        return self._regime

    def _record(self, interval):
        self._intervals.append(interval)
        variance = self.normalized_variance()
        if variance is None:
            return

        self._since_switch = min(self._since_switch + 1, self.config.min_dwell)
        regime = self._next_regime(variance)
        if regime is not self._regime:
            logger.debug(
                f"Regime switch: {self._regime.value} -> {regime.value}, "
                f"normalized variance={variance:.4f}"
            )
            self._regime = regime
            self._since_switch = 0

    def check(self, obs: Observation):
        """Raise OutOfOrderObservation if obs would be rejected."""
        self._detector.check(obs)

    def observe(self, obs: Observation):
        """
        Update the estimate with the next observation of the flow.

        Raises:
            OutOfOrderObservation: stale, duplicate or reordered observation
        """
        previous = self._detector.last_observation
        event = self._detector.on_observation(obs)
        if event is None and previous is not None:
            self._record(obs.arrival_time - previous.arrival_time)

    def snapshot(self) -> dict:
        return {
            "detector": self._detector.snapshot(),
            "intervals": tuple(self._intervals),
            "regime": self._regime,
            "since_switch": self._since_switch,
        }
