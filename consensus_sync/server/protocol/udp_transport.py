"""
UDP socket wrapper implementing the engine's transport boundary.
"""

import asyncio
import socket
from typing import Callable

from consensus_sync.consensus.core import (
    ConsensusConfig,
    LoggerProtocol,
    NetworkError,
    NoAvailablePortError,
)
from consensus_sync.consensus.core.types import Addr
from consensus_sync.consensus.discovery import (
    ANY_ADDRESS,
    NetworkInterface,
    get_interfaces,
)
from consensus_sync.logging.consensus_logging_models import (
    ServerDebug,
    ServerFatal,
    ServerInfo,
    ServerWarning,
)

from .consensus_udp_protocol import ConsensusUDPProtocol


MULTICAST_TTL = 1


class UDPTransport:
    def __init__(
        self,
        config: ConsensusConfig,
        logger: LoggerProtocol,
        host: str = ANY_ADDRESS,
        interfaces: Callable[[], list[NetworkInterface]] = get_interfaces,
    ) -> None:
        self._config = config
        self._logger = logger
        self._host = host
        self._interfaces = interfaces

        self._loop: asyncio.AbstractEventLoop | None = None
        self._socket: socket.socket | None = None
        self._transport: asyncio.DatagramTransport | None = None
        self._protocol: ConsensusUDPProtocol | None = None
        self._port: int = 0

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def connected(self) -> bool:
        return self._transport is not None and not self._transport.is_closing()

    async def bind(self, ports: tuple[int, ...] | None = None) -> int:
        """
        Bind to the first free port, in configured order.

        Binding is attempted once per port and never retried. Raises
        NoAvailablePortError when every port fails.
        """
        if ports is None:
            ports = self._config.ports

        self._loop = asyncio.get_running_loop()

        last_error: OSError | None = None
        udp_socket: socket.socket | None = None

        for port in ports:
            candidate = socket.socket(
                socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP
            )

            try:
                candidate.bind((self._host, port))

            except OSError as err:
                candidate.close()
                last_error = err

                await self._logger.log(
                    ServerDebug(
                        message=f"Port {port} unavailable - {err}",
                        node_id=self._config.node_id,
                        node_host=self._host,
                        node_port=port,
                    )
                )
                continue

            udp_socket = candidate
            self._port = candidate.getsockname()[1]
            break

        if udp_socket is None:
            error = NoAvailablePortError(ports, cause=last_error)
            await self._logger.log(
                ServerFatal(
                    message=error.message,
                    node_id=self._config.node_id,
                    node_host=self._host,
                    node_port=0,
                )
            )
            raise error

        self._socket = udp_socket
        self._configure_socket(udp_socket)

        if self._config.enable_multicast:
            await self._join_multicast_group(udp_socket)

        udp_socket.setblocking(False)

        transport, protocol = await self._loop.create_datagram_endpoint(
            ConsensusUDPProtocol,
            sock=udp_socket,
        )

        self._transport = transport
        self._protocol = protocol

        await self._logger.log(
            ServerInfo(
                message=f"Listening for estimates on {self._host}:{self._port}",
                node_id=self._config.node_id,
                node_host=self._host,
                node_port=self._port,
            )
        )

        return self._port

    def _configure_socket(self, udp_socket: socket.socket):
        udp_socket.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, MULTICAST_TTL)
        udp_socket.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, 0)
        udp_socket.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)

    async def _join_multicast_group(self, udp_socket: socket.socket):
        group = socket.inet_aton(self._config.multicast_address)

        for interface in self._interfaces():
            if interface.name in self._config.ignored_interfaces:
                continue

            try:
                udp_socket.setsockopt(
                    socket.IPPROTO_IP,
                    socket.IP_ADD_MEMBERSHIP,
                    group + socket.inet_aton(interface.address),
                )

            except OSError as err:
                # Already joined through an alias, or the link cannot do multicast
                await self._logger.log(
                    ServerWarning(
                        message=f"Could not join {self._config.multicast_address} "
                                f"on {interface.name} ({interface.address}) - {err}",
                        node_id=self._config.node_id,
                        node_host=self._host,
                        node_port=self._port,
                    )
                )

    async def poll(self, timeout: float) -> bool:
        if self._protocol is None:
            await asyncio.sleep(timeout)
            return False

        if self._protocol.pending:
            return True

        self._protocol.ready.clear()

        try:
            await asyncio.wait_for(
                self._protocol.ready.wait(),
                timeout=timeout,
            )

        except asyncio.TimeoutError:
            return False

        return len(self._protocol.pending) > 0

    def read(self) -> tuple[bytes, Addr]:
        if self._protocol is None or not self._protocol.pending:
            raise NetworkError("No datagram ready to read")

        return self._protocol.pending.popleft()

    def write(self, data: bytes, address: str, port: int) -> bool:
        """
        Send one datagram straight through the bound socket. Socket errors
        raise OSError here instead of reaching the protocol later.
        """
        if not self.connected:
            return False

        sent = self._socket.sendto(data, (address, port))
        return sent == len(data)

    def set_broadcast(self, enabled: bool) -> None:
        if self._socket is not None and self._socket.fileno() != -1:
            self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, int(enabled))

    def set_multicast_loop(self, enabled: bool) -> None:
        if self._socket is not None and self._socket.fileno() != -1:
            self._socket.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, int(enabled))

    def close(self):
        if self._transport is not None:
            self._transport.close()

        self._transport = None
        self._protocol = None
        self._socket = None
