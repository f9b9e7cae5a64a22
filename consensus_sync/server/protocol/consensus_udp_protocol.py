import asyncio
from collections import deque

from consensus_sync.consensus.core.types import Addr


class ConsensusUDPProtocol(asyncio.DatagramProtocol):
    """
    Queues received datagrams in arrival order for the convergence loop.
    """

    def __init__(self, max_pending: int = 1024):
        super().__init__()
        self.transport: asyncio.DatagramTransport | None = None
        self.pending: deque[tuple[bytes, Addr]] = deque(maxlen=max_pending)
        self.ready = asyncio.Event()
        self.errors: int = 0
        self.last_error: Exception | None = None

    def connection_made(self, transport: asyncio.DatagramTransport):
        self.transport = transport

    def datagram_received(self, data: bytes, addr: Addr) -> None:
        # IPv4 sockets report (host, port), keep only those two fields
        self.pending.append((data, (addr[0], addr[1])))
        self.ready.set()

    def error_received(self, exc: Exception) -> None:
        # ICMP errors from earlier sends, e.g. port unreachable on loopback
        self.errors += 1
        self.last_error = exc

    def connection_lost(self, exc: Exception | None) -> None:
        self.transport = None
        self.ready.set()
