"""
ZigZag loss classifier.

Tracks the direction of successive inter-arrival changes. Before a
congestion loss the spacing moves steadily one way while the bottleneck
queue builds up or drains, which shows up as a run of same-direction
changes. Wireless losses strike regardless of queue state, so the signs
preceding them zigzag with no consistent direction.
"""

import logging
from collections import deque
from typing import Optional, Tuple

import numpy as np

from packet_loss_classification.config import ZigZagConfig
from packet_loss_classification.detector import LossDetector
from packet_loss_classification.models import Classification, LossEvent, Observation

logger = logging.getLogger(__name__)


class ZigZag:
    """
    Packet loss classifier based on the ZigZag scheme.

    Keeps the signs (+1 growing, 0 flat, -1 shrinking) of the last
    window_size interval differences. A loss is classified as congestion if
    the trailing run of non-zero signs pointing the same way is longer than
    run_length_threshold. A flat step (sign 0) ends any run.

    Attributes:
        config (ZigZagConfig): Window size and run-length threshold
    """

    def __init__(self, config: ZigZagConfig):
        self.config = config
        self._detector = LossDetector()
        self._signs = deque(maxlen=config.window_size)
        self._last_interval = None

        logger.info(
            f"ZigZag initialized: window={config.window_size}, "
            f"run_length_threshold={config.run_length_threshold}"
        )

    @property
    def ready(self) -> bool:
        return len(self._signs) == self.config.window_size

    def trailing_run(self) -> int:
        """Number of consecutive same-direction changes at the end of the window"""
        if not self._signs or self._signs[-1] == 0:
            return 0

        direction = self._signs[-1]
        run = 0
        for sign in reversed(self._signs):
            if sign != direction:
                break
            run += 1
        return run

    def _record(self, interval):
        if self._last_interval is not None:
            self._signs.append(int(np.sign(interval - self._last_interval)))
        self._last_interval = interval

    def classify(self, event: LossEvent) -> Classification:
        """
        Classify a loss event from the sign pattern that preceded it.

        Args:
            event: Loss event of this flow

        Returns:
            Classification: UNKNOWN until window_size signs are held
        """
        if not self.ready:
            return Classification.UNKNOWN

        run = self.trailing_run()
        if run > self.config.run_length_threshold:
            verdict = Classification.CONGESTION
        else:
            verdict = Classification.WIRELESS

        logger.debug(
            f"ZigZag: lost={event.lost_count}, trailing run={run}, "
            f"threshold={self.config.run_length_threshold} -> {verdict.value}"
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
            self._record(obs.arrival_time - previous.arrival_time)
        return None

    def report_observation(self, sequence_number: int, arrival_time: float):
        return self.on_observation(Observation(sequence_number, arrival_time))

    def snapshot(self) -> dict:
        return {
            "detector": self._detector.snapshot(),
            "signs": tuple(self._signs),
            "last_interval": self._last_interval,
        }
