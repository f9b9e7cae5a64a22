from consensus_sync.consensus.accumulation import MergeOutcome
from consensus_sync.models import Estimate


class EstimateStore:
    """
    Holds the local estimate (always present, starts at the baseline), the
    last received peer estimate (absent until the first receipt) and, for
    policies that keep one, the external estimate sent to peers.
    """

    def __init__(
        self,
        node_id: str,
        baseline: float,
    ) -> None:
        self._node_id = node_id
        self._baseline = baseline

        self.local = Estimate(
            source_id=node_id,
            value=baseline,
        )
        self.received: Estimate | None = None
        self.external: Estimate | None = None

    @property
    def has_received(self) -> bool:
        return self.received is not None

    def receive(self, estimate: Estimate):
        self.received = estimate.copy()

    def apply(self, outcome: MergeOutcome):
        self.local.value = outcome.local_value

        if outcome.received_value is not None and self.received is not None:
            self.received.value = outcome.received_value

        if outcome.external_value is not None:
            if self.external is None:
                self.external = Estimate(source_id=self._node_id)

            self.external.value = outcome.external_value

    def outbound(self) -> Estimate:
        if self.external is not None:
            return self.external

        return self.local

    def reset(self):
        self.local = Estimate(
            source_id=self._node_id,
            value=self._baseline,
        )
        self.received = None
        self.external = None
