"""
Last-seen message timestamps per sender, for duplicate suppression.
"""

from dataclasses import dataclass, field


@dataclass(slots=True)
class TimestampTracker:
    """
    Maps sender host to the timestamp of the last message seen from it.

    Entries are overwritten, never removed. Only an exactly equal
    timestamp counts as a duplicate: an older timestamp is treated as a
    fresh message (clock jitter between peers is not corrected here).
    """

    timestamps: dict[str, float] = field(default_factory=dict)

    def observe(self, host: str, timestamp: float) -> bool:
        """
        Record a timestamp for host. Returns False, without mutating, if it
        equals the stored one.
        """
        stored = self.timestamps.get(host)
        if stored is not None and stored == timestamp:
            return False

        self.timestamps[host] = timestamp
        return True

    def get(self, host: str) -> float | None:
        return self.timestamps.get(host)

    def __len__(self) -> int:
        return len(self.timestamps)

    def __contains__(self, host: str) -> bool:
        return host in self.timestamps
