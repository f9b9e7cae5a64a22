"""
Counter for rejected inbound datagrams, reported periodically.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field

from .inbound_result import RejectReason


@dataclass(slots=True)
class DropCounter:
    """
    Counts inbound rejections by reason between reports.

    Increments happen on the single loop task, so no locking.
    """

    malformed: int = 0
    wrong_type: int = 0
    duplicate: int = 0
    self_echo: int = 0
    _last_reset: float = field(default_factory=time.monotonic)

    def increment(self, reason: RejectReason) -> None:
        match reason:
            case RejectReason.MALFORMED:
                self.malformed += 1
            case RejectReason.WRONG_TYPE:
                self.wrong_type += 1
            case RejectReason.DUPLICATE:
                self.duplicate += 1
            case RejectReason.SELF_ECHO:
                self.self_echo += 1

    @property
    def total(self) -> int:
        return (
            self.malformed
            + self.wrong_type
            + self.duplicate
            + self.self_echo
        )

    @property
    def interval_seconds(self) -> float:
        return time.monotonic() - self._last_reset

    def reset(self) -> DropCounterSnapshot:
        """
        Reset all counters and return a snapshot of the values before reset.
        """
        snapshot = DropCounterSnapshot(
            malformed=self.malformed,
            wrong_type=self.wrong_type,
            duplicate=self.duplicate,
            self_echo=self.self_echo,
            interval_seconds=self.interval_seconds,
        )

        self.malformed = 0
        self.wrong_type = 0
        self.duplicate = 0
        self.self_echo = 0
        self._last_reset = time.monotonic()

        return snapshot


@dataclass(frozen=True)
class DropCounterSnapshot:
    """Immutable snapshot of drop counter values."""

    malformed: int
    wrong_type: int
    duplicate: int
    self_echo: int
    interval_seconds: float

    @property
    def total(self) -> int:
        return (
            self.malformed
            + self.wrong_type
            + self.duplicate
            + self.self_echo
        )

    @property
    def has_drops(self) -> bool:
        return self.total > 0

    def to_message(self) -> str:
        return (
            f"Dropped {self.total} datagrams in {self.interval_seconds:.1f}s "
            f"(malformed={self.malformed}, wrong_type={self.wrong_type}, "
            f"duplicate={self.duplicate}, self_echo={self.self_echo})"
        )
