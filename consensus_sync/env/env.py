from __future__ import annotations

import socket
from typing import Callable, Dict, Literal, Union

from pydantic import BaseModel, StrictBool, StrictFloat, StrictStr

from .time_parser import TimeParser

PrimaryType = Union[str, int, float, bytes, bool]

AccumulationPolicyName = Literal["drain-and-clamp", "increment-on-receipt"]


def to_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def to_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Env(BaseModel):
    CONSENSUS_NODE_ID: StrictStr | None = None
    CONSENSUS_PORTS: StrictStr = "31100, 31101, 31102, 31103, 31104"
    CONSENSUS_ENABLE_MULTICAST: StrictBool = True
    CONSENSUS_MULTICAST_ADDRESS: StrictStr = "224.0.75.69"
    CONSENSUS_ENABLE_BROADCAST: StrictBool = True
    CONSENSUS_ENABLE_LOOPBACK: StrictBool = False
    CONSENSUS_SEND_LOOPBACK: StrictBool = False
    CONSENSUS_IGNORED_INTERFACES: StrictStr = "eth0:prv"

    # Accumulation settings
    CONSENSUS_BOUND: StrictFloat = 10.0
    CONSENSUS_BASELINE: StrictFloat = 1.0
    CONSENSUS_ACCUMULATION_POLICY: AccumulationPolicyName = "drain-and-clamp"

    # Loop settings
    CONSENSUS_POLL_TIMEOUT: StrictStr = "1s"
    CONSENSUS_DROP_REPORT_INTERVAL: StrictStr = "30s"
    CONSENSUS_TRACE_INCOMING: StrictBool = False

    # Logging settings
    CONSENSUS_LOG_LEVEL: StrictStr = "info"
    CONSENSUS_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"
    CONSENSUS_LOGS_DIRECTORY: StrictStr | None = None

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "CONSENSUS_NODE_ID": str,
            "CONSENSUS_PORTS": str,
            "CONSENSUS_ENABLE_MULTICAST": to_bool,
            "CONSENSUS_MULTICAST_ADDRESS": str,
            "CONSENSUS_ENABLE_BROADCAST": to_bool,
            "CONSENSUS_ENABLE_LOOPBACK": to_bool,
            "CONSENSUS_SEND_LOOPBACK": to_bool,
            "CONSENSUS_IGNORED_INTERFACES": str,
            "CONSENSUS_BOUND": float,
            "CONSENSUS_BASELINE": float,
            "CONSENSUS_ACCUMULATION_POLICY": str,
            "CONSENSUS_POLL_TIMEOUT": str,
            "CONSENSUS_DROP_REPORT_INTERVAL": str,
            "CONSENSUS_TRACE_INCOMING": to_bool,
            "CONSENSUS_LOG_LEVEL": str,
            "CONSENSUS_LOG_OUTPUT": str,
            "CONSENSUS_LOGS_DIRECTORY": str,
        }

    def get_consensus_config(self):
        """
        Build the immutable engine configuration from environment settings.

        Raises ConfigurationError if the settings cannot describe a runnable
        node (no ports, non-positive bound, baseline outside the bound).
        """
        from consensus_sync.consensus.core import ConsensusConfig, NodeId
        from consensus_sync.consensus.core.errors import ConfigurationError

        try:
            ports = tuple(int(port) for port in to_list(self.CONSENSUS_PORTS))

        except ValueError as err:
            raise ConfigurationError(
                f"Invalid port list '{self.CONSENSUS_PORTS}'",
                cause=err,
                setting="CONSENSUS_PORTS",
            ) from err

        try:
            poll_timeout = TimeParser(self.CONSENSUS_POLL_TIMEOUT).time
            drop_report_interval = TimeParser(self.CONSENSUS_DROP_REPORT_INTERVAL).time

        except ValueError as err:
            raise ConfigurationError(
                "Invalid interval setting",
                cause=err,
            ) from err

        node_id = self.CONSENSUS_NODE_ID
        if node_id is None:
            node_id = str(NodeId(hostname=socket.gethostname()))

        return ConsensusConfig(
            node_id=node_id,
            ports=ports,
            enable_multicast=self.CONSENSUS_ENABLE_MULTICAST,
            multicast_address=self.CONSENSUS_MULTICAST_ADDRESS,
            enable_broadcast=self.CONSENSUS_ENABLE_BROADCAST,
            enable_loopback=self.CONSENSUS_ENABLE_LOOPBACK,
            send_loopback=self.CONSENSUS_SEND_LOOPBACK,
            ignored_interfaces=frozenset(to_list(self.CONSENSUS_IGNORED_INTERFACES)),
            bound=self.CONSENSUS_BOUND,
            baseline=self.CONSENSUS_BASELINE,
            accumulation_policy=self.CONSENSUS_ACCUMULATION_POLICY,
            poll_timeout=poll_timeout,
            drop_report_interval=drop_report_interval,
            trace_incoming=self.CONSENSUS_TRACE_INCOMING,
        )

    def get_logging_config(self) -> dict:
        """Get LoggingConfig.update() arguments from environment settings."""
        return {
            "log_level": self.CONSENSUS_LOG_LEVEL,
            "log_output": self.CONSENSUS_LOG_OUTPUT,
            "log_directory": self.CONSENSUS_LOGS_DIRECTORY,
        }
