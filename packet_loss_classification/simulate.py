#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Synthetic loss simulation.

Generates per-flow packet traces with known loss causes, replays them
through one ZBS hybrid per flow and reports how often each classifier
agrees with the ground truth.

Path model:
- Wireless losses are independent drops that leave packet spacing untouched
- Congestion episodes recur every congestion_period packets: spacing grows
  linearly for ramp_length packets while the bottleneck queue fills, then
  the packet at the top of the ramp is dropped and the queue drains
"""

import argparse
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

from packet_loss_classification.config import CLASSIFIER_NAMES, ZBSConfig
from packet_loss_classification.flows import FlowTable
from packet_loss_classification.models import Classification
from packet_loss_classification.zbs import ZBS

__author__ = "packet-loss-classification developers"
__copyright__ = "Copyright (c) 2026, packet-loss-classification developers"
__version__ = "0.1.0"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TracePacket:
    """A packet that reached the receiver"""

    sequence_number: int
    arrival_time: float


@dataclass
class Trace:
    """Received packets of one flow plus the true cause of every lost one"""

    packets: List[TracePacket] = field(default_factory=list)
    causes: Dict[int, Classification] = field(default_factory=dict)


def generate_trace(
    packets: int,
    base_interval: float,
    wireless_loss_rate: float,
    congestion_period: int,
    rng: np.random.Generator,
    ramp_length: int = 8,
    ramp_growth: float = 0.15,
    jitter: float = 0.02,
) -> Trace:
    """
    Generate one flow's trace.

    Args:
        packets: Number of sequence numbers sent
        base_interval: Spacing at the receiver with an empty queue (seconds)
        wireless_loss_rate: Independent drop probability per packet
        congestion_period: Packets between congestion drops (0 disables congestion)
        rng: numpy random generator, the only source of randomness
        ramp_length: Packets over which spacing grows before a congestion drop
        ramp_growth: Spacing growth per ramp packet, relative to base_interval
        jitter: Standard deviation of multiplicative spacing noise

    Returns:
        Trace: Received packets in arrival order and the cause of each loss
    """
    if congestion_period and congestion_period <= ramp_length:
        raise ValueError(
            f"congestion_period ({congestion_period}) must exceed ramp_length ({ramp_length})"
        )

    trace = Trace()
    t = 0.0
    for seq in range(packets):
        spacing = base_interval
        congested = False

        if congestion_period:
            phase = seq % congestion_period
            ramp_start = congestion_period - ramp_length
            if phase >= ramp_start:
                spacing *= 1.0 + ramp_growth * (phase - ramp_start + 1)
                congested = phase == congestion_period - 1

        spacing *= max(0.1, 1.0 + jitter * rng.standard_normal())
        t += spacing

        if congested:
            trace.causes[seq] = Classification.CONGESTION
        elif seq > 0 and rng.random() < wireless_loss_rate:
            trace.causes[seq] = Classification.WIRELESS
        else:
            trace.packets.append(TracePacket(seq, t))

    return trace


def run_simulation(
    config: ZBSConfig,
    flows: int,
    packets: int,
    base_interval: float,
    wireless_loss_rate: float,
    congestion_period: int,
    seed: int,
) -> Dict[str, Counter]:
    """
    Replay synthetic flows through per-flow ZBS classifiers.

    Observations of all flows are interleaved by arrival time, as a capture
    point in front of the receiver would see them.

    Returns:
        dict: {classifier name: Counter(correct=, incorrect=, unknown=)},
            with "zbs" for the hybrid verdict
    """
    rng = np.random.default_rng(seed)
    traces = {
        flow_id: generate_trace(packets, base_interval, wireless_loss_rate, congestion_period, rng)
        for flow_id in range(flows)
    }
    feed = sorted(
        (pkt.arrival_time, flow_id, pkt.sequence_number)
        for flow_id, trace in traces.items()
        for pkt in trace.packets
    )

    table = FlowTable(lambda: ZBS.from_config(config))
    scores = {name: Counter() for name in CLASSIFIER_NAMES + ("zbs",)}

    for arrival_time, flow_id, seq in feed:
        result = table.report_observation(flow_id, seq, arrival_time)
        if result is None:
            continue

        event, verdict = result
        truth = traces[flow_id].causes[event.expected_sequence_range[0]]
        decision = table.get(flow_id).last_decision

        for name, value in list(decision.verdicts.items()) + [("zbs", verdict)]:
            if value is Classification.UNKNOWN:
                scores[name]["unknown"] += 1
            elif value is truth:
                scores[name]["correct"] += 1
            else:
                scores[name]["incorrect"] += 1

    logger.info(
        f"Simulated {flows} flows x {packets} packets, "
        f"{sum(len(t.causes) for t in traces.values())} losses"
    )
    return scores


def format_scores(scores: Dict[str, Counter]) -> str:
    lines = [f"{'classifier':<10} {'correct':>8} {'incorrect':>10} {'unknown':>8} {'accuracy':>9}"]
    for name, counts in scores.items():
        decided = counts["correct"] + counts["incorrect"]
        accuracy = counts["correct"] / decided if decided else 0.0
        lines.append(
            f"{name:<10} {counts['correct']:>8} {counts['incorrect']:>10} "
            f"{counts['unknown']:>8} {accuracy:>9.1%}"
        )
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a synthetic packet loss classification")
    parser.add_argument("--flows", type=int, default=4, help="Number of flows, Default: 4")
    parser.add_argument(
        "--packets", type=int, default=5000, help="Packets sent per flow, Default: 5000"
    )
    parser.add_argument(
        "--interval", type=float, default=0.001, help="Base spacing in seconds, Default: 0.001"
    )
    parser.add_argument(
        "--wireless-loss", type=float, default=0.01, help="Wireless drop rate, Default: 0.01"
    )
    parser.add_argument(
        "--congestion-period",
        type=int,
        default=200,
        help="Packets between congestion drops, 0 disables, Default: 200",
    )
    parser.add_argument("--seed", type=int, default=12, help="Random seed, Default: 12")
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Verbose, Default: False",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(asctime)s] %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    scores = run_simulation(
        ZBSConfig.recommended(),
        flows=args.flows,
        packets=args.packets,
        base_interval=args.interval,
        wireless_loss_rate=args.wireless_loss,
        congestion_period=args.congestion_period,
        seed=args.seed,
    )
    print(format_scores(scores))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
