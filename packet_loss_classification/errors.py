"""
Exceptions raised by the packet loss classifiers.

Insufficient history is never an error: it is reported as
Classification.UNKNOWN. Only interface misuse (bad configuration, stale or
reordered observations) surfaces as an exception.
"""


class LossClassificationError(Exception):
    """Base class for all errors raised by this package."""


class InvalidConfiguration(LossClassificationError, ValueError):
    """A classifier was constructed with an unusable parameter."""


class OutOfOrderObservation(LossClassificationError):
    """
    An observation was rejected because it does not advance the flow.

    Raised when the sequence number is not greater than the last accepted
    one (duplicate, stale or reordered packet) or when the arrival time moves
    backwards. The rejecting instance is left exactly as it was.

    Attributes:
        observation: The rejected observation
        last_observation: The last observation the instance accepted
    """

    def __init__(self, observation, last_observation):
        self.observation = observation
        self.last_observation = last_observation
        super().__init__(
            f"Rejected observation seq={observation.sequence_number} "
            f"t={observation.arrival_time}: last accepted was "
            f"seq={last_observation.sequence_number} t={last_observation.arrival_time}"
        )
