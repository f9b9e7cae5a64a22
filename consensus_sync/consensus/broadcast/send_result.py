from dataclasses import dataclass, field

from consensus_sync.consensus.core.errors import SendError
from consensus_sync.consensus.core.types import SendStatus
from consensus_sync.models import Destination, Estimate


@dataclass(frozen=True, slots=True)
class SendResult:
    destination: Destination
    status: SendStatus
    error: SendError | None = None


@dataclass(slots=True)
class AnnounceReport:
    """Per-destination outcome of one announce cycle."""

    estimate: Estimate
    results: list[SendResult] = field(default_factory=list)

    def _count(self, status: SendStatus) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def sent(self) -> int:
        return self._count('sent')

    @property
    def skipped(self) -> int:
        return self._count('skipped')

    @property
    def failed(self) -> int:
        return self._count('failed')

    @property
    def failures(self) -> list[SendResult]:
        return [result for result in self.results if result.status == 'failed']

    def to_message(self) -> str:
        return (
            f"Announced estimate {self.estimate.value} to {len(self.results)} "
            f"destinations (sent={self.sent}, skipped={self.skipped}, failed={self.failed})"
        )
