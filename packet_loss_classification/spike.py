"""
Spike loss classifier.

The Spike scheme assumes congestion losses are preceded by a spike in
delay: a queue builds, packets are spread out, then the queue overflows.
The classifier keeps a moving-average baseline of inter-arrival times and a
two-state machine (NORMAL / SPIKE). A loss seen while in SPIKE state is a
congestion loss, otherwise a wireless loss.

The SPIKE state is entered when an interval leaps over
spike_start_threshold * baseline and left once an interval drops below
spike_end_threshold * baseline. The baseline is only fed intervals observed
in NORMAL state so a spike cannot raise its own detection threshold.

A spike lasting window_size intervals is taken as a lasting change of path
spacing: the baseline is rebuilt from the spike's intervals and the machine
returns to NORMAL. A baseline whose mean is zero (equal arrival times from a
coarse clock) cannot scale a threshold, so detection waits until it turns
positive and losses meanwhile are UNKNOWN.
"""

import logging
from collections import deque
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from packet_loss_classification.config import SpikeConfig
from packet_loss_classification.detector import LossDetector
from packet_loss_classification.models import Classification, LossEvent, Observation

logger = logging.getLogger(__name__)


class SpikeState(Enum):
    NORMAL = "normal"
    SPIKE = "spike"


class Spike:
    """
    Packet loss classifier based on the Spike scheme.

    Attributes:
        config (SpikeConfig): Baseline window and spike thresholds
    """

    def __init__(self, config: SpikeConfig):
        self.config = config
        self._detector = LossDetector()
        self._baseline = deque(maxlen=config.window_size)
        self._state = SpikeState.NORMAL
        # Intervals seen since the current spike started
        self._spike_run = deque(maxlen=config.window_size)

        logger.info(
            f"Spike initialized: window={config.window_size}, "
            f"start={config.spike_start_threshold}, end={config.spike_end_threshold}"
        )

    @property
    def ready(self) -> bool:
        return len(self._baseline) == self.config.window_size

    @property
    def state(self) -> SpikeState:
        return self._state

    @property
    def baseline(self) -> Optional[float]:
        """Mean of the non-spike intervals in the window"""
        return float(np.mean(self._baseline)) if self._baseline else None

    def _record(self, interval):
        baseline = self.baseline
        if not self.ready or baseline <= 0:
            # No usable baseline yet: learn, never detect
            self._baseline.append(interval)
            return

        if self._state is SpikeState.NORMAL and interval > self.config.spike_start_threshold * baseline:
            self._state = SpikeState.SPIKE
            logger.debug(f"Spike start: interval={interval:.6f}, baseline={baseline:.6f}")
        elif self._state is SpikeState.SPIKE and interval < self.config.spike_end_threshold * baseline:
            self._state = SpikeState.NORMAL
            self._spike_run.clear()
            logger.debug(f"Spike end: interval={interval:.6f}, baseline={baseline:.6f}")

        if self._state is SpikeState.NORMAL:
            self._baseline.append(interval)
            return

        self._spike_run.append(interval)
        if len(self._spike_run) == self.config.window_size:
            # A spike lasting a full window is the new normal spacing
            self._baseline.clear()
            self._baseline.extend(self._spike_run)
            self._spike_run.clear()
            self._state = SpikeState.NORMAL
            logger.debug(f"Spike outlasted window, baseline reset to {self.baseline:.6f}")

    def classify(self, event: LossEvent) -> Classification:
        """
        Classify a loss event by whether a delay spike preceded it.

        The spacing across the gap itself counts as well: a per-slot spacing
        above the start threshold means the packet after the loss was delayed.

        Args:
            event: Loss event of this flow

        Returns:
            Classification: UNKNOWN until the baseline window is full and
                its mean spacing is positive
        """
        baseline = self.baseline
        if not self.ready or baseline <= 0:
            return Classification.UNKNOWN

        gap_spike = event.normalized_interval > self.config.spike_start_threshold * baseline

        if self._state is SpikeState.SPIKE or gap_spike:
            verdict = Classification.CONGESTION
        else:
            verdict = Classification.WIRELESS

        logger.debug(
            f"Spike: state={self._state.value}, per-slot gap={event.normalized_interval:.6f}, "
            f"baseline={baseline:.6f} -> {verdict.value}"
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
            "baseline": tuple(self._baseline),
            "state": self._state,
            "spike_run": tuple(self._spike_run),
        }
