"""
Accumulation policies fold an accepted peer estimate into the local one.

Two variants are supported and selected by name through configuration:
- drain-and-clamp (default): add the peer value once, then zero it
- increment-on-receipt: overwrite with the peer value plus one

Neither is canonical; both keep the local magnitude within the bound.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from consensus_sync.models import Estimate


@dataclass(frozen=True, slots=True)
class MergeOutcome:
    """
    Result of one merge. None means "leave that estimate unchanged".
    """

    local_value: float
    received_value: float | None = None
    external_value: float | None = None


def clamp(value: float, bound: float) -> float:
    return max(-bound, min(bound, value))


class AccumulationPolicy(ABC):
    name: str = ""

    merge_on_timer: bool = True
    """Merge again on every poll timeout, not only on acceptance."""

    @abstractmethod
    def merge(
        self,
        local: Estimate,
        received: Estimate | None,
        bound: float,
        baseline: float,
    ) -> MergeOutcome:
        """
        Compute the new local estimate.

        Args:
            local: Current local estimate
            received: Last accepted peer estimate, None before the first receipt
            bound: Maximum magnitude of the local estimate
            baseline: Value used while nothing has been received

        Returns:
            MergeOutcome with |local_value| <= bound
        """
        ...
