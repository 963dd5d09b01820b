"""
ZBS hybrid loss classifier.

No single scheme dominates across topologies: MBiaz and Spike do well when
the bottleneck spacing is steady, ZigZag and Trend when spacing is noisy or
shared. ZBS runs all four side by side, estimates the current path regime
and combines their verdicts with regime-dependent weights. This approximates
always trusting the scheme best suited to the current conditions without
needing ground truth.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from packet_loss_classification.config import CLASSIFIER_NAMES, ZBSConfig, validate_weights
from packet_loss_classification.detector import LossDetector
from packet_loss_classification.errors import InvalidConfiguration
from packet_loss_classification.mbiaz import MBiaz
from packet_loss_classification.models import (
    Classification,
    LossEvent,
    Observation,
    TopologyEstimate,
)
from packet_loss_classification.spike import Spike
from packet_loss_classification.topology import TopologyEstimator
from packet_loss_classification.trend import Trend
from packet_loss_classification.zigzag import ZigZag

logger = logging.getLogger(__name__)


class WeightedMajorityVote:
    """
    Regime-weighted majority vote over the base verdicts.

    UNKNOWN verdicts abstain. The side with the larger total weight wins and
    a tie goes to CONGESTION, since backing off on a wireless loss costs less
    than ignoring sustained congestion. If every classifier abstains the
    result is UNKNOWN.

    Args:
        weights: {TopologyEstimate: {classifier name: positive weight}}
    """

    def __init__(self, weights: Mapping):
        self.weights = validate_weights(weights)

    def tally(self, verdicts: Mapping[str, Classification], regime: TopologyEstimate):
        """Return (congestion weight, wireless weight) for the given verdicts."""
        row = self.weights[regime]
        congestion = sum(row[n] for n, v in verdicts.items() if v is Classification.CONGESTION)
        wireless = sum(row[n] for n, v in verdicts.items() if v is Classification.WIRELESS)
        return congestion, wireless

    def combine(
        self, verdicts: Mapping[str, Classification], regime: TopologyEstimate
    ) -> Classification:
        if all(v is Classification.UNKNOWN for v in verdicts.values()):
            return Classification.UNKNOWN
        congestion, wireless = self.tally(verdicts, regime)
        if wireless > congestion:
            return Classification.WIRELESS
        return Classification.CONGESTION


@dataclass(frozen=True)
class HybridDecision:
    """Everything that went into one hybrid verdict."""

    event: LossEvent
    regime: TopologyEstimate
    verdicts: Dict[str, Classification]
    classification: Classification


class ZBS:
    """
    Packet loss classifier based on the ZBS hybrid scheme.

    The collaborators must be fresh instances dedicated to this hybrid: ZBS
    feeds them every observation it accepts, so sharing them with another
    caller or flow would corrupt their history.

    Args:
        mbiaz, spike, zigzag, trend: Base classifiers
        estimator: Topology estimator
        policy: Object with combine(verdicts, regime) -> Classification
    """

    def __init__(
        self,
        mbiaz: MBiaz,
        spike: Spike,
        zigzag: ZigZag,
        trend: Trend,
        estimator: TopologyEstimator,
        policy,
    ):
        self._classifiers = {
            "mbiaz": mbiaz,
            "spike": spike,
            "zigzag": zigzag,
            "trend": trend,
        }
        for name, classifier in list(self._classifiers.items()) + [("estimator", estimator)]:
            if classifier.snapshot()["detector"]["last_observation"] is not None:
                raise InvalidConfiguration(f"{name} has already consumed observations")
        if not callable(getattr(policy, "combine", None)):
            raise InvalidConfiguration("policy must provide combine(verdicts, regime)")

        self.estimator = estimator
        self.policy = policy
        self._detector = LossDetector()
        self.last_decision: Optional[HybridDecision] = None

        logger.info(f"ZBS initialized with policy {type(policy).__name__}")

    @classmethod
    def from_config(cls, config: ZBSConfig):
        return cls(
            mbiaz=MBiaz(config.mbiaz),
            spike=Spike(config.spike),
            zigzag=ZigZag(config.zigzag),
            trend=Trend(config.trend),
            estimator=TopologyEstimator(config.topology),
            policy=WeightedMajorityVote(config.weights),
        )

    def classifier(self, name: str):
        """Return the base classifier registered under name."""
        return self._classifiers[name]

    def _decide(self, event, verdicts):
        regime = self.estimator.current_regime()
        classification = self.policy.combine(verdicts, regime)
        decision = HybridDecision(
            event=event, regime=regime, verdicts=dict(verdicts), classification=classification
        )
        logger.debug(
            f"ZBS: regime={regime.value}, "
            + ", ".join(f"{n}={v.value}" for n, v in verdicts.items())
            + f" -> {classification.value}"
        )
        return decision

    def classify(self, event: LossEvent) -> Classification:
        """
        Combine the base verdicts for event under the current regime.

        Reads state only; the classifiers are not advanced.
        """
        verdicts = {name: c.classify(event) for name, c in self._classifiers.items()}
        return self._decide(event, verdicts).classification

    def on_observation(self, obs: Observation) -> Optional[Tuple[LossEvent, Classification]]:
        """
        Feed one observation to every collaborator.

        The regime is read before the estimator sees obs, so a loss is judged
        by the path conditions that preceded it.

        Returns:
            (LossEvent, Classification) if obs closes a gap, else None

        Raises:
            OutOfOrderObservation: stale, duplicate or reordered observation,
                for this hybrid or any collaborator; no collaborator is touched
        """
        # Nothing is mutated unless every collaborator accepts obs
        self._detector.check(obs)
        for classifier in self._classifiers.values():
            classifier.check(obs)
        self.estimator.check(obs)

        event = self._detector.on_observation(obs)

        verdicts = {}
        for name in CLASSIFIER_NAMES:
            result = self._classifiers[name].on_observation(obs)
            if result is not None:
                verdicts[name] = result[1]

        outcome = None
        if event is not None:
            self.last_decision = self._decide(event, verdicts)
            outcome = (event, self.last_decision.classification)

        self.estimator.observe(obs)
        return outcome

    def report_observation(self, sequence_number: int, arrival_time: float):
        return self.on_observation(Observation(sequence_number, arrival_time))

    def snapshot(self) -> dict:
        state = {name: c.snapshot() for name, c in self._classifiers.items()}
        state["estimator"] = self.estimator.snapshot()
        state["detector"] = self._detector.snapshot()
        state["last_decision"] = self.last_decision
        return state
