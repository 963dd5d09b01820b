"""Per-flow classifier bookkeeping."""

import logging
from typing import Callable, Dict, Hashable, List

from packet_loss_classification.models import Observation

logger = logging.getLogger(__name__)


class FlowTable:
    """
    Map of flow identifiers to dedicated classifier instances.

    Each flow gets its own instance, created lazily by factory on the first
    observation of that flow, so no rolling state is ever shared between
    flows. Removing a flow is up to the caller.

    Args:
        factory: Zero-argument callable returning a fresh classifier
    """

    def __init__(self, factory: Callable):
        self.factory = factory
        self._flows: Dict[Hashable, object] = {}

    def get(self, flow_id):
        """Retrieve or create the classifier of a flow."""
        if flow_id not in self._flows:
            logger.debug(f"Creating classifier for flow {flow_id}")
            self._flows[flow_id] = self.factory()
        return self._flows[flow_id]

    def report_observation(self, flow_id, sequence_number: int, arrival_time: float):
        """
        Route an observation to its flow's classifier.

        Returns:
            (LossEvent, Classification) if the observation closes a gap, else None

        Raises:
            OutOfOrderObservation: propagated from the flow's classifier
        """
        return self.get(flow_id).on_observation(Observation(sequence_number, arrival_time))

    def discard(self, flow_id):
        """Drop a flow and its state. Unknown flows are ignored."""
        if self._flows.pop(flow_id, None) is not None:
            logger.debug(f"Discarded classifier for flow {flow_id}")

    def flow_ids(self) -> List:
        return list(self._flows)

    def __contains__(self, flow_id):
        return flow_id in self._flows

    def __len__(self):
        return len(self._flows)
