"""
State owned by one convergence loop.

Replaces module level socket and destination globals: the loop owns one
LoopContext and hands it to the filter, directory and broadcaster.
"""

import asyncio
from dataclasses import dataclass, field

from consensus_sync.codec import MessageCodec
from consensus_sync.consensus.core import ConsensusConfig, TransportProtocol
from consensus_sync.consensus.core.types import EstimateConsumer
from consensus_sync.consensus.discovery import ANY_ADDRESS, EndpointDirectory
from consensus_sync.consensus.estimates import EstimateStore
from consensus_sync.consensus.inbound.drop_counter import DropCounter
from consensus_sync.consensus.inbound.timestamp_tracker import TimestampTracker
from consensus_sync.models import Destination, Estimate


@dataclass(slots=True)
class LoopContext:
    config: ConsensusConfig
    transport: TransportProtocol
    codec: MessageCodec = field(default_factory=MessageCodec)
    store: EstimateStore | None = None
    directory: EndpointDirectory | None = None
    tracker: TimestampTracker = field(default_factory=TimestampTracker)
    drops: DropCounter = field(default_factory=DropCounter)
    consumers: list[EstimateConsumer] = field(default_factory=list)
    destinations: list[Destination] = field(default_factory=list)
    host: str = ANY_ADDRESS
    port: int = 0

    def __post_init__(self):
        if self.store is None:
            self.store = EstimateStore(
                self.config.node_id,
                self.config.baseline,
            )

        if self.directory is None:
            self.directory = EndpointDirectory(self.config)

    @property
    def node_id(self) -> str:
        return self.config.node_id

    def log_fields(self) -> dict:
        """Identity fields shared by every Server* log entry."""
        return {
            "node_id": self.config.node_id,
            "node_host": self.host,
            "node_port": self.port,
        }

    async def dispatch(self, estimate: Estimate) -> list[Exception]:
        """
        Hand a copy of the estimate to every internal consumer.

        Consumers may be plain or async callables. A failing consumer does
        not stop delivery to the others; its error is returned for logging.
        """
        errors: list[Exception] = []

        for consumer in list(self.consumers):
            try:
                result = consumer(estimate.copy())
                if asyncio.iscoroutine(result):
                    await result

            except Exception as err:
                errors.append(err)

        return errors
