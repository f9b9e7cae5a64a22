from dataclasses import dataclass
from enum import Enum

from consensus_sync.models import Estimate


class RejectReason(str, Enum):
    MALFORMED = "malformed"
    WRONG_TYPE = "wrong-type"
    DUPLICATE = "duplicate"
    SELF_ECHO = "self-echo"


@dataclass(frozen=True, slots=True)
class InboundResult:
    """Either an accepted estimate or the reason the datagram was dropped."""

    estimate: Estimate | None = None
    reason: RejectReason | None = None
    is_local_sender: bool = False

    @property
    def accepted(self) -> bool:
        return self.estimate is not None

    @classmethod
    def accept(cls, estimate: Estimate, is_local_sender: bool = False):
        return cls(estimate=estimate, is_local_sender=is_local_sender)

    @classmethod
    def reject(cls, reason: RejectReason):
        return cls(reason=reason)
