"""
Destination endpoints for one announce cycle.
"""

from typing import Callable, Iterable

from consensus_sync.consensus.core import ConsensusConfig, TransportProtocol
from consensus_sync.models import Destination

from .interfaces import (
    GLOBAL_BROADCAST_ADDRESS,
    LOOPBACK_ADDRESS,
    NetworkInterface,
    get_interfaces,
)


def discover(
    config: ConsensusConfig,
    interfaces: Iterable[NetworkInterface],
) -> list[Destination]:
    """
    Build the destination list for one announce cycle.

    Emission order is loopback, multicast, global broadcast, then one
    broadcast address per non-loopback interface. Every address is paired
    with every configured port, in port order. Interfaces sharing a
    broadcast address yield duplicate endpoints, which are kept.
    """
    destinations: list[Destination] = []

    if config.enable_loopback:
        destinations.extend(
            Destination(
                address=LOOPBACK_ADDRESS,
                port=port,
                is_local=True,
            ) for port in config.ports
        )

    if config.enable_multicast:
        destinations.extend(
            Destination(
                address=config.multicast_address,
                port=port,
            ) for port in config.ports
        )

    if config.enable_broadcast:
        destinations.extend(
            Destination(
                address=GLOBAL_BROADCAST_ADDRESS,
                port=port,
            ) for port in config.ports
        )

        for interface in interfaces:
            if interface.name in config.ignored_interfaces:
                continue

            if interface.is_loopback or not interface.has_broadcast:
                continue

            destinations.extend(
                Destination(
                    address=interface.broadcast,
                    port=port,
                ) for port in config.ports
            )

    return destinations


class EndpointDirectory:
    """
    Recomputes destinations every cycle and keeps the socket options in
    line with the enabled modes.
    """

    def __init__(
        self,
        config: ConsensusConfig,
        interfaces: Callable[[], list[NetworkInterface]] = get_interfaces,
    ) -> None:
        self._config = config
        self._interfaces = interfaces
        self.last_interfaces: list[NetworkInterface] = []

    def refresh(
        self,
        transport: TransportProtocol | None = None,
    ) -> list[Destination]:
        self.last_interfaces = self._interfaces()

        if transport is not None:
            if self._config.enable_multicast:
                transport.set_multicast_loop(False)

            if self._config.enable_broadcast:
                transport.set_broadcast(True)

        return discover(self._config, self.last_interfaces)
