"""
Immutable per-run configuration for the convergence engine.
"""

import ipaddress
import math
from dataclasses import dataclass, field

from .errors import ConfigurationError


ACCUMULATION_POLICY_NAMES = frozenset({
    "drain-and-clamp",
    "increment-on-receipt",
})


@dataclass(frozen=True, slots=True)
class ConsensusConfig:
    """
    Settings loaded once at startup and read-only thereafter.

    Built from Env.get_consensus_config() in production, or directly in
    tests. Validation runs on construction so an invalid config never
    reaches the engine.
    """

    node_id: str
    ports: tuple[int, ...] = (31100, 31101, 31102, 31103, 31104)

    enable_multicast: bool = True
    multicast_address: str = "224.0.75.69"
    enable_broadcast: bool = True
    enable_loopback: bool = False
    send_loopback: bool = False
    """Send to loopback destinations too, not only dispatch locally."""

    ignored_interfaces: frozenset[str] = field(default_factory=lambda: frozenset({"eth0:prv"}))

    bound: float = 10.0
    """Maximum magnitude of the local estimate."""

    baseline: float = 1.0
    """Initial measured value, used until a peer estimate is received."""

    accumulation_policy: str = "drain-and-clamp"
    poll_timeout: float = 1.0
    drop_report_interval: float = 30.0
    trace_incoming: bool = False

    def __post_init__(self):
        if not self.node_id:
            raise ConfigurationError("node_id cannot be empty")

        if len(self.ports) == 0:
            raise ConfigurationError("At least one port is required")

        for port in self.ports:
            if not 0 < port < 65536:
                raise ConfigurationError(
                    f"Port {port} is outside 1-65535",
                    port=port,
                )

        if not math.isfinite(self.bound) or self.bound <= 0:
            raise ConfigurationError(
                f"Bound must be a positive number, got {self.bound}",
                bound=self.bound,
            )

        if not math.isfinite(self.baseline) or abs(self.baseline) > self.bound:
            raise ConfigurationError(
                f"Baseline {self.baseline} exceeds bound {self.bound}",
                baseline=self.baseline,
                bound=self.bound,
            )

        if self.accumulation_policy not in ACCUMULATION_POLICY_NAMES:
            raise ConfigurationError(
                f"Unknown accumulation policy '{self.accumulation_policy}'",
                accumulation_policy=self.accumulation_policy,
            )

        if self.poll_timeout <= 0:
            raise ConfigurationError(
                f"Poll timeout must be positive, got {self.poll_timeout}",
            )

        if self.enable_multicast:
            try:
                is_multicast = ipaddress.IPv4Address(self.multicast_address).is_multicast

            except ValueError as err:
                raise ConfigurationError(
                    f"Invalid multicast address '{self.multicast_address}'",
                    cause=err,
                ) from err

            if not is_multicast:
                raise ConfigurationError(
                    f"{self.multicast_address} is not a multicast address",
                    multicast_address=self.multicast_address,
                )
