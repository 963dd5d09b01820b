"""
Trend loss classifier.

ZigZag and Spike react to individual intervals and become unreliable when
spacing hovers around their thresholds. Trend instead looks at the delay
trend over a whole window: "When a packet loss is observed at time t, it
should be considered as a congestion loss if T_d is in an ascending phase;
otherwise it is categorized as wireless loss."

The ascending phase is measured as the least-squares slope of the
inter-arrival times against their position in the window, relative to the
window mean.
"""

import logging
from collections import deque
from typing import Optional, Tuple

import numpy as np

from packet_loss_classification.config import TrendConfig
from packet_loss_classification.detector import LossDetector
from packet_loss_classification.models import Classification, LossEvent, Observation

logger = logging.getLogger(__name__)


class Trend:
    """
    Packet loss classifier based on the Trend scheme.

    Attributes:
        config (TrendConfig): Window size and relative slope threshold
    """

    def __init__(self, config: TrendConfig):
        self.config = config
        self._detector = LossDetector()
        self._intervals = deque(maxlen=config.window_size)
        # Fixed regressor for the least-squares fit
        self._positions = np.arange(config.window_size, dtype=float)

        logger.info(
            f"Trend initialized: window={config.window_size}, "
            f"slope_threshold={config.slope_threshold}"
        )

    @property
    def ready(self) -> bool:
        return len(self._intervals) == self.config.window_size

    def relative_slope(self) -> Optional[float]:
        """
        Least-squares slope of the window divided by its mean.

        Returns:
            float: Relative growth of spacing per sample, None before the window is full
        """
        if not self.ready:
            return None
        values = np.fromiter(self._intervals, dtype=float, count=len(self._intervals))
        mean = values.mean()
        if mean <= 0:
            return 0.0
        slope, _ = np.polyfit(self._positions, values, 1)
        return float(slope / mean)

    def classify(self, event: LossEvent) -> Classification:
        """
        Classify a loss event from the spacing trend that preceded it.

        Args:
            event: Loss event of this flow

        Returns:
            Classification: UNKNOWN until the window is full
        """
        slope = self.relative_slope()
        if slope is None:
            return Classification.UNKNOWN

        if slope > self.config.slope_threshold:
            verdict = Classification.CONGESTION
        else:
            verdict = Classification.WIRELESS

        logger.debug(
            f"Trend: lost={event.lost_count}, relative slope={slope:.4f}, "
            f"threshold={self.config.slope_threshold} -> {verdict.value}"
        )
        return verdict

    def check(self, obs: Observation):
        """Raise OutOfOrderObservation if obs would be rejected."""
        self._detector.check(obs)

    def on_observation(self, obs: Observation) -> Optional[Tuple[LossEvent, Classification]]:
        previous = self._detector.last_observation
        event = self._detector.on_observation(obs)
        if event is not None:
            return event, self.classify(event)
        if previous is not None:
            self._intervals.append(obs.arrival_time - previous.arrival_time)
        return None

    def report_observation(self, sequence_number: int, arrival_time: float):
        return self.on_observation(Observation(sequence_number, arrival_time))

    def snapshot(self) -> dict:
        return {
            "detector": self._detector.snapshot(),
            "intervals": tuple(self._intervals),
        }
