from consensus_sync.models import Estimate

from .policy import AccumulationPolicy, MergeOutcome, clamp


class IncrementOnReceipt(AccumulationPolicy):
    """
    Replaces the local estimate with the received value plus one and keeps
    an external copy of the result for broadcast. Runs on acceptance only;
    the timer just re-announces.
    """

    name = "increment-on-receipt"
    merge_on_timer = False

    def merge(
        self,
        local: Estimate,
        received: Estimate | None,
        bound: float,
        baseline: float,
    ) -> MergeOutcome:
        if received is None:
            return MergeOutcome(local_value=baseline)

        if abs(local.value) >= bound:
            return MergeOutcome(local_value=local.value)

        value = clamp(received.value + 1, bound)

        return MergeOutcome(
            local_value=value,
            external_value=value,
        )
