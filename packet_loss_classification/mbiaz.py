"""
MBiaz loss classifier.

The MBiaz scheme assumes wireless errors barely influence delay while
congestion losses come with queuing delay. When n packets are lost between
two received packets, the second one should still arrive "on time" if the
loss was a link error. "On time" is bounded by:
  - the spacing floor (minimum recent inter-arrival time)
  - the number of lost packets n
  - the lower window limit
  - the upper window limit
"""

import logging
from collections import deque
from typing import Optional, Tuple

from packet_loss_classification.config import MBiazConfig
from packet_loss_classification.detector import LossDetector
from packet_loss_classification.models import Classification, LossEvent, Observation

logger = logging.getLogger(__name__)


class MBiaz:
    """
    Packet loss classifier based on the MBiaz scheme.

    A loss of n packets across an inter-arrival time T is classified as
    wireless when

        (n + lower_window_limit) * floor <= T < (n + upper_window_limit) * floor

    and as congestion otherwise, where floor is the minimum positive interval
    among the last window_size qualifying intervals. Zero-length intervals
    (equal arrival times) say nothing about achievable spacing and are
    skipped; a window holding only those gives UNKNOWN.

    Attributes:
        config (MBiazConfig): Window size and band limits
    """

    def __init__(self, config: MBiazConfig):
        self.config = config
        self._detector = LossDetector()
        self._intervals = deque(maxlen=config.window_size)

        logger.info(
            f"MBiaz initialized: window={config.window_size}, "
            f"band=[{config.lower_window_limit}, {config.upper_window_limit})"
        )

    @property
    def ready(self) -> bool:
        return len(self._intervals) == self.config.window_size

    @property
    def floor(self) -> Optional[float]:
        """Minimum positive recent inter-arrival time, None if there is none"""
        return min((i for i in self._intervals if i > 0), default=None)

    def classify(self, event: LossEvent) -> Classification:
        """
        Classify a loss event against the current spacing floor.

        Args:
            event: Loss event of this flow

        Returns:
            Classification: UNKNOWN until window_size intervals are held,
                or while none of them is positive
        """
        floor = self.floor
        if not self.ready or floor is None:
            return Classification.UNKNOWN

        n = event.lost_count
        t = event.interarrival_time
        lower = (n + self.config.lower_window_limit) * floor
        upper = (n + self.config.upper_window_limit) * floor

        if lower <= t < upper:
            verdict = Classification.WIRELESS
        else:
            verdict = Classification.CONGESTION

        logger.debug(
            f"MBiaz: lost={n}, gap={t:.6f}, band=[{lower:.6f}, {upper:.6f}) -> {verdict.value}"
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
