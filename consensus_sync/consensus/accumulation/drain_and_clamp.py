from consensus_sync.models import Estimate

from .policy import AccumulationPolicy, MergeOutcome, clamp


class DrainAndClamp(AccumulationPolicy):
    """
    Adds the received value to the local estimate and drains the received
    value to zero, so each peer contribution counts exactly once. A local
    estimate already at the bound saturates to +bound.
    """

    name = "drain-and-clamp"
    merge_on_timer = True

    def merge(
        self,
        local: Estimate,
        received: Estimate | None,
        bound: float,
        baseline: float,
    ) -> MergeOutcome:
        if received is None:
            return MergeOutcome(local_value=baseline)

        if abs(local.value) < bound:
            return MergeOutcome(
                local_value=clamp(local.value + received.value, bound),
                received_value=0.0,
            )

        return MergeOutcome(local_value=bound)
