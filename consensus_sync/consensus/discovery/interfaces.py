"""
IPv4 interface enumeration.
"""

import ipaddress
import socket
from dataclasses import dataclass

import psutil


ANY_ADDRESS = "0.0.0.0"
LOOPBACK_ADDRESS = "127.0.0.1"
GLOBAL_BROADCAST_ADDRESS = "255.255.255.255"


@dataclass(frozen=True, slots=True)
class NetworkInterface:
    name: str
    address: str
    broadcast: str | None = None

    @property
    def is_loopback(self) -> bool:
        return ipaddress.IPv4Address(self.address).is_loopback

    @property
    def has_broadcast(self) -> bool:
        return self.broadcast is not None and self.broadcast != ANY_ADDRESS


def get_interfaces() -> list[NetworkInterface]:
    """
    Current IPv4 interfaces, one entry per address.

    Called every announce cycle since interfaces come and go (DHCP
    renewals, links going down, VPNs).
    """
    interfaces: list[NetworkInterface] = []

    for name, addresses in psutil.net_if_addrs().items():
        for address in addresses:
            if address.family != socket.AF_INET:
                continue

            interfaces.append(
                NetworkInterface(
                    name=name,
                    address=address.address,
                    broadcast=address.broadcast,
                )
            )

    return interfaces


def is_local_address(
    host: str,
    interfaces: list[NetworkInterface],
) -> bool:
    return any(interface.address == host for interface in interfaces)
