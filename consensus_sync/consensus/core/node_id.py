"""
Structured node identifier used as the source id of announced estimates.
"""

from dataclasses import dataclass, field
import time
import uuid


@dataclass(frozen=True)
class NodeId:
    """
    Format: {hostname}-{created_ms:013x}-{random:12}
    Example: buoy-3-0018a3b2c4d5e-f3a2b1c9d8e7

    Unique across restarts of the same host, so a restarted node never
    mistakes a peer for itself or vice versa.
    """

    hostname: str
    created_ms: int = field(default_factory=lambda: int(time.time() * 1000))
    random: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    def __post_init__(self):
        if not self.hostname:
            raise ValueError("hostname cannot be empty")
        if len(self.random) != 12:
            raise ValueError("random component must be 12 hex characters")

    def __str__(self) -> str:
        return f"{self.hostname}-{self.created_ms:013x}-{self.random}"

    @property
    def short(self) -> str:
        """Short form for logging: buoy-3-f3a2"""
        return f"{self.hostname}-{self.random[:4]}"
