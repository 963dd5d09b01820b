"""
Per-classifier configuration.

Each classifier takes one frozen dataclass at construction. Every field is
required: a missing field is a TypeError from the dataclass itself and an
unusable value raises InvalidConfiguration from __post_init__, so a
misconfigured instance is never created.

The recommended() presets are explicit opt-ins. MBiaz uses the window limits
published with the scheme (1.0 / 1.25); the other presets are tuned for the
interval-based variants implemented here.
"""

from dataclasses import dataclass, field
from numbers import Integral, Real
from typing import Dict, Mapping

from packet_loss_classification.errors import InvalidConfiguration
from packet_loss_classification.models import TopologyEstimate

# Names under which the hybrid addresses its four base classifiers
CLASSIFIER_NAMES = ("mbiaz", "spike", "zigzag", "trend")


def _require_int(name, value, minimum):
    if isinstance(value, bool) or not isinstance(value, Integral) or value < minimum:
        raise InvalidConfiguration(f"{name} must be an integer >= {minimum}, got {value!r}")


def _require_positive(name, value):
    if isinstance(value, bool) or not isinstance(value, Real) or not value > 0:
        raise InvalidConfiguration(f"{name} must be a positive number, got {value!r}")


@dataclass(frozen=True)
class MBiazConfig:
    """
    Attributes:
        window_size (int): Qualifying intervals used to estimate the spacing floor
        lower_window_limit (float): Lower bias of the wireless band
        upper_window_limit (float): Upper bias of the wireless band
    """

    window_size: int
    lower_window_limit: float
    upper_window_limit: float

    def __post_init__(self):
        _require_int("window_size", self.window_size, 1)
        _require_positive("lower_window_limit", self.lower_window_limit)
        _require_positive("upper_window_limit", self.upper_window_limit)
        if self.lower_window_limit > self.upper_window_limit:
            raise InvalidConfiguration(
                f"lower_window_limit ({self.lower_window_limit}) must not exceed "
                f"upper_window_limit ({self.upper_window_limit})"
            )

    @classmethod
    def recommended(cls):
        return cls(window_size=32, lower_window_limit=1.0, upper_window_limit=1.25)


@dataclass(frozen=True)
class SpikeConfig:
    """
    Attributes:
        window_size (int): Non-spike intervals averaged into the baseline
        spike_start_threshold (float): Baseline multiple that starts a spike
        spike_end_threshold (float): Baseline multiple below which a spike ends
    """

    window_size: int
    spike_start_threshold: float
    spike_end_threshold: float

    def __post_init__(self):
        _require_int("window_size", self.window_size, 1)
        _require_positive("spike_start_threshold", self.spike_start_threshold)
        _require_positive("spike_end_threshold", self.spike_end_threshold)
        if self.spike_end_threshold > self.spike_start_threshold:
            raise InvalidConfiguration(
                f"spike_end_threshold ({self.spike_end_threshold}) must not exceed "
                f"spike_start_threshold ({self.spike_start_threshold})"
            )

    @classmethod
    def recommended(cls):
        return cls(window_size=16, spike_start_threshold=2.0, spike_end_threshold=1.5)


@dataclass(frozen=True)
class ZigZagConfig:
    """
    Attributes:
        window_size (int): Signs of interval differences kept
        run_length_threshold (int): Same-direction run length that must be exceeded
    """

    window_size: int
    run_length_threshold: int

    def __post_init__(self):
        _require_int("window_size", self.window_size, 1)
        _require_int("run_length_threshold", self.run_length_threshold, 1)
        if self.run_length_threshold >= self.window_size:
            raise InvalidConfiguration(
                f"run_length_threshold ({self.run_length_threshold}) must be smaller "
                f"than window_size ({self.window_size})"
            )

    @classmethod
    def recommended(cls):
        return cls(window_size=16, run_length_threshold=3)


@dataclass(frozen=True)
class TrendConfig:
    """
    Attributes:
        window_size (int): Qualifying intervals the slope is fitted over
        slope_threshold (float): Relative growth per sample that signals congestion
    """

    window_size: int
    slope_threshold: float

    def __post_init__(self):
        _require_int("window_size", self.window_size, 2)
        _require_positive("slope_threshold", self.slope_threshold)

    @classmethod
    def recommended(cls):
        return cls(window_size=16, slope_threshold=0.02)


@dataclass(frozen=True)
class TopologyConfig:
    """
    Attributes:
        window_size (int): Qualifying intervals the variance is computed over
        variance_threshold (float): Normalized variance separating the regimes
        hysteresis (float): Relative dead-band around the threshold, in [0, 1)
        min_dwell (int): Intervals that must pass between two regime switches
    """

    window_size: int
    variance_threshold: float
    hysteresis: float
    min_dwell: int

    def __post_init__(self):
        _require_int("window_size", self.window_size, 2)
        _require_positive("variance_threshold", self.variance_threshold)
        if (
            isinstance(self.hysteresis, bool)
            or not isinstance(self.hysteresis, Real)
            or not 0 <= self.hysteresis < 1
        ):
            raise InvalidConfiguration(f"hysteresis must be in [0, 1), got {self.hysteresis!r}")
        _require_int("min_dwell", self.min_dwell, 0)

    @classmethod
    def recommended(cls):
        return cls(window_size=64, variance_threshold=0.05, hysteresis=0.2, min_dwell=16)


def validate_weights(weights: Mapping) -> Dict[TopologyEstimate, Dict[str, float]]:
    """Check a regime weight table and return a plain copy of it."""
    table = {}
    for regime in TopologyEstimate:
        if regime not in weights:
            raise InvalidConfiguration(f"Missing weights for regime {regime.name}")
        row = weights[regime]
        for name in CLASSIFIER_NAMES:
            if name not in row:
                raise InvalidConfiguration(f"Missing weight for {name} in regime {regime.name}")
            _require_positive(f"weight[{regime.name}][{name}]", row[name])
        unknown = set(row) - set(CLASSIFIER_NAMES)
        if unknown:
            raise InvalidConfiguration(f"Unknown classifiers in weights: {sorted(unknown)}")
        table[regime] = {name: float(row[name]) for name in CLASSIFIER_NAMES}
    return table


RECOMMENDED_WEIGHTS = {
    TopologyEstimate.UNDETERMINED: {"mbiaz": 1.0, "spike": 1.0, "zigzag": 1.0, "trend": 1.0},
    TopologyEstimate.STABLE: {"mbiaz": 2.0, "spike": 2.0, "zigzag": 1.0, "trend": 1.0},
    TopologyEstimate.VOLATILE: {"mbiaz": 1.0, "spike": 1.0, "zigzag": 2.0, "trend": 2.0},
}


@dataclass(frozen=True)
class ZBSConfig:
    """Configuration of the hybrid classifier and everything it owns."""

    mbiaz: MBiazConfig
    spike: SpikeConfig
    zigzag: ZigZagConfig
    trend: TrendConfig
    topology: TopologyConfig
    weights: Mapping = field(hash=False)

    def __post_init__(self):
        expected = {
            "mbiaz": MBiazConfig,
            "spike": SpikeConfig,
            "zigzag": ZigZagConfig,
            "trend": TrendConfig,
            "topology": TopologyConfig,
        }
        for name, cls in expected.items():
            if not isinstance(getattr(self, name), cls):
                raise InvalidConfiguration(f"{name} must be a {cls.__name__}")
        object.__setattr__(self, "weights", validate_weights(self.weights))

    @classmethod
    def recommended(cls):
        return cls(
            mbiaz=MBiazConfig.recommended(),
            spike=SpikeConfig.recommended(),
            zigzag=ZigZagConfig.recommended(),
            trend=TrendConfig.recommended(),
            topology=TopologyConfig.recommended(),
            weights=RECOMMENDED_WEIGHTS,
        )
