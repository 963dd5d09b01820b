"""
Loss detection from sequence-number gaps.

Every classifier composes one LossDetector; it is the only component that
decides whether an observation is accepted.
"""

import logging
from typing import Optional

from packet_loss_classification.errors import OutOfOrderObservation
from packet_loss_classification.models import LossEvent, Observation

logger = logging.getLogger(__name__)


class LossDetector:
    """
    Derive discrete loss events from a flow's ordered observations.

    The detector remembers the last accepted observation. An observation
    whose sequence number skips ahead produces one LossEvent covering the
    missing range; an observation that does not move the sequence number
    forward (or moves the arrival time backwards) is rejected without
    touching state.
    """

    def __init__(self):
        self._last = None

    @property
    def last_observation(self) -> Optional[Observation]:
        return self._last

    def check(self, obs: Observation):
        """Raise OutOfOrderObservation if obs would be rejected."""
        last = self._last
        if last is None:
            return
        if obs.sequence_number <= last.sequence_number or obs.arrival_time < last.arrival_time:
            logger.warning(
                f"Rejecting observation seq={obs.sequence_number} t={obs.arrival_time}: "
                f"last accepted seq={last.sequence_number} t={last.arrival_time}"
            )
            raise OutOfOrderObservation(obs, last)

    def on_observation(self, obs: Observation) -> Optional[LossEvent]:
        """
        Accept an observation and report the gap it closes, if any.

        Args:
            obs: Next observation of the flow

        Returns:
            LossEvent if one or more sequence numbers were skipped, else None

        Raises:
            OutOfOrderObservation: stale, duplicate or reordered observation
        """
        self.check(obs)

        last = self._last
        self._last = obs

        if last is None or obs.sequence_number == last.sequence_number + 1:
            return None

        event = LossEvent(
            expected_sequence_range=(last.sequence_number + 1, obs.sequence_number),
            observation_before=last,
            observation_after=obs,
        )
        logger.debug(
            f"Loss detected: seq [{event.expected_sequence_range[0]}, "
            f"{event.expected_sequence_range[1]}), lost={event.lost_count}, "
            f"gap={event.interarrival_time:.6f}"
        )
        return event

    def snapshot(self) -> dict:
        return {"last_observation": self._last}
