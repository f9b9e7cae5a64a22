"""
Shared protocols for the convergence engine.

Components depend on these rather than on concrete logger and transport
classes so tests can substitute recording fakes.
"""

from typing import Any, Protocol, runtime_checkable

from .types import Addr


@runtime_checkable
class LoggerProtocol(Protocol):
    """
    Protocol for structured async logging.

    Implemented by consensus_sync.logging.Logger. Entries are msgspec
    models such as ServerDebug, ServerWarning or ServerError.
    """

    async def log(self, entry: Any) -> None:
        ...


@runtime_checkable
class TransportProtocol(Protocol):
    """
    Datagram transport consumed by the engine.

    The transport owns bind, multicast membership and broadcast enablement.
    """

    async def poll(self, timeout: float) -> bool:
        """Wait up to timeout seconds for a datagram. True if one is ready."""
        ...

    def read(self) -> tuple[bytes, Addr]:
        """Pop the next datagram and its sender address."""
        ...

    def write(self, data: bytes, address: str, port: int) -> bool:
        """Send one datagram. False (or an OSError) on failure."""
        ...

    def set_broadcast(self, enabled: bool) -> None:
        ...

    def set_multicast_loop(self, enabled: bool) -> None:
        ...
