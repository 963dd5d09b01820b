"""Core value types shared by the detector and every classifier."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Classification(Enum):
    """The classified reason of a packet loss."""

    CONGESTION = "congestion"  # Queue overflow under load
    WIRELESS = "wireless"  # Transient link-layer error
    UNKNOWN = "unknown"  # Not enough history for a verdict


class TopologyEstimate(Enum):
    """Coarse regime of path variability."""

    UNDETERMINED = "undetermined"  # Estimator window not yet full
    STABLE = "stable"  # Low normalized interval variance
    VOLATILE = "volatile"  # High normalized interval variance


@dataclass(frozen=True)
class Observation:
    """One received packet of a flow."""

    sequence_number: int
    arrival_time: float


@dataclass(frozen=True)
class LossEvent:
    """
    A gap in the sequence-number stream of a flow.

    Attributes:
        expected_sequence_range: Half-open range [lo, hi) of missing sequence numbers
        observation_before: Last packet received before the gap
        observation_after: First packet received after the gap
    """

    expected_sequence_range: Tuple[int, int]
    observation_before: Observation
    observation_after: Observation

    def __post_init__(self):
        lo, hi = self.expected_sequence_range
        if hi <= lo:
            raise ValueError(f"Empty loss range [{lo}, {hi})")
        if lo != self.observation_before.sequence_number + 1:
            raise ValueError(
                f"Loss range starts at {lo} but packet before the gap "
                f"is seq={self.observation_before.sequence_number}"
            )
        if hi != self.observation_after.sequence_number:
            raise ValueError(
                f"Loss range ends at {hi} but packet after the gap "
                f"is seq={self.observation_after.sequence_number}"
            )

    @property
    def lost_count(self) -> int:
        """Number of packets missing in the gap"""
        lo, hi = self.expected_sequence_range
        return hi - lo

    @property
    def interarrival_time(self) -> float:
        """Time between the packets on either side of the gap"""
        return self.observation_after.arrival_time - self.observation_before.arrival_time

    @property
    def normalized_interval(self) -> float:
        """Inter-arrival time per sequence slot across the gap"""
        return self.interarrival_time / (self.lost_count + 1)
