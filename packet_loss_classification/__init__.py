"""
Packet loss classification.

Packet loss in networks happens due to congestion and wireless errors.
Depending on the reason an application might take different measures, e.g.
backing off on congestion but not on transient radio errors.

Four classifiers (MBiaz, Spike, ZigZag, Trend) each perform well under
certain conditions. ZBS, a hybrid of all four driven by a topology estimate,
gives reasonable results across a range of path types.

Theory and algorithms follow:

- Cen, Song, Pamela C. Cosman, and Geoffrey M. Voelker. "End-to-end
  differentiation of congestion and wireless losses." IEEE/ACM Transactions
  on Networking 11.5 (2003): 703-717.
- Hsiao, Hsu-Feng, et al. "A new multimedia packet loss classification
  algorithm for congestion control over wired/wireless channels." ICASSP'05,
  Vol. 2. IEEE, 2005.
"""

from packet_loss_classification.config import (
    MBiazConfig,
    SpikeConfig,
    TopologyConfig,
    TrendConfig,
    ZBSConfig,
    ZigZagConfig,
)
from packet_loss_classification.detector import LossDetector
from packet_loss_classification.errors import (
    InvalidConfiguration,
    LossClassificationError,
    OutOfOrderObservation,
)
from packet_loss_classification.flows import FlowTable
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
from packet_loss_classification.zbs import ZBS, HybridDecision, WeightedMajorityVote
from packet_loss_classification.zigzag import ZigZag

__version__ = "0.1.0"

__all__ = [
    "Classification",
    "FlowTable",
    "HybridDecision",
    "InvalidConfiguration",
    "LossClassificationError",
    "LossDetector",
    "LossEvent",
    "MBiaz",
    "MBiazConfig",
    "Observation",
    "OutOfOrderObservation",
    "Spike",
    "SpikeConfig",
    "TopologyConfig",
    "TopologyEstimate",
    "TopologyEstimator",
    "Trend",
    "TrendConfig",
    "WeightedMajorityVote",
    "ZBS",
    "ZBSConfig",
    "ZigZag",
    "ZigZagConfig",
]
