"""
Host surface for one gossip convergence node.

Lifecycle: initialize() binds the socket and builds the loop, run() drives
the loop until stop() is called, shutdown() releases the socket and flushes
logs.
"""

import asyncio
from typing import Callable

from consensus_sync.consensus.core import (
    ConsensusConfig,
    LoggerProtocol,
    TransportProtocol,
)
from consensus_sync.consensus.core.types import EstimateConsumer
from consensus_sync.consensus.discovery import (
    EndpointDirectory,
    NetworkInterface,
    get_interfaces,
)
from consensus_sync.consensus.loop import ConvergenceLoop, LoopContext
from consensus_sync.env import Env
from consensus_sync.logging import Logger, LoggingConfig
from consensus_sync.logging.consensus_logging_models import ServerDebug, ServerInfo
from consensus_sync.models import Estimate
from consensus_sync.server import UDPTransport


class ConsensusNode:
    def __init__(
        self,
        env: Env | None = None,
        config: ConsensusConfig | None = None,
        logger: LoggerProtocol | None = None,
        transport: TransportProtocol | None = None,
        interfaces: Callable[[], list[NetworkInterface]] = get_interfaces,
    ) -> None:
        if env is None:
            env = Env()

        if config is None:
            config = env.get_consensus_config()

        if logger is None:
            LoggingConfig().update(**env.get_logging_config())
            logger = Logger()

        if transport is None:
            transport = UDPTransport(
                config,
                logger,
                interfaces=interfaces,
            )

        self._env = env
        self._config = config
        self._logger = logger
        self._transport = transport
        self._interfaces = interfaces

        self._context: LoopContext | None = None
        self._loop: ConvergenceLoop | None = None
        self._pending_consumers: list[EstimateConsumer] = []
        self._initialized = False

    @property
    def config(self) -> ConsensusConfig:
        return self._config

    @property
    def node_id(self) -> str:
        return self._config.node_id

    @property
    def port(self) -> int:
        return getattr(self._transport, 'port', 0)

    @property
    def local_estimate(self) -> Estimate | None:
        if self._context is None:
            return None

        return self._context.store.local.copy()

    @property
    def received_estimate(self) -> Estimate | None:
        if self._context is None or self._context.store.received is None:
            return None

        return self._context.store.received.copy()

    @property
    def loop(self) -> ConvergenceLoop | None:
        return self._loop

    async def initialize(self):
        """
        Bind to the first available port and build the convergence loop.

        Raises NoAvailablePortError if no configured port can be bound.
        """
        if self._initialized:
            return

        bind = getattr(self._transport, 'bind', None)
        if bind is not None:
            await bind(self._config.ports)

        self._context = LoopContext(
            config=self._config,
            transport=self._transport,
            directory=EndpointDirectory(
                self._config,
                interfaces=self._interfaces,
            ),
            host=getattr(self._transport, 'host', '0.0.0.0'),
            port=self.port,
        )

        self._loop = ConvergenceLoop(self._context, self._logger)

        for consumer in self._pending_consumers:
            self._loop.subscribe(consumer)

        self._pending_consumers.clear()
        self._initialized = True

        await self._logger.log(
            ServerInfo(
                message=f"Node {self._config.node_id} initialized with "
                        f"{self._loop.policy.name} accumulation (bound={self._config.bound}, "
                        f"baseline={self._config.baseline})",
                **self._context.log_fields(),
            )
        )

    async def run(self):
        """Run the convergence loop. Returns once stop() is observed."""
        if not self._initialized:
            await self.initialize()

        await self._loop.run()

    async def on_configuration_changed(self):
        """
        Configuration is read-only after initialize(), so there is nothing
        to apply.
        """
        if self._context is not None:
            await self._logger.log(
                ServerDebug(
                    message="Configuration change ignored, settings are fixed after initialize",
                    **self._context.log_fields(),
                )
            )

    def stop(self):
        if self._loop is not None:
            self._loop.stop()

    async def shutdown(self, run_task: asyncio.Task | None = None):
        self.stop()

        if run_task is not None and not run_task.done():
            await run_task

        close = getattr(self._transport, 'close', None)
        if close is not None:
            close()

        if self._context is not None:
            await self._logger.log(
                ServerInfo(
                    message=f"Node {self._config.node_id} stopped",
                    **self._context.log_fields(),
                )
            )

        if isinstance(self._logger, Logger):
            await self._logger.close()

        self._initialized = False

    def consume(self, estimate: Estimate):
        """
        Take an estimate published by another in-process component as the
        received estimate. No duplicate or self-echo checks apply.
        """
        if self._context is None:
            raise RuntimeError("Node must be initialized before consuming estimates")

        self._context.store.receive(estimate)

    def subscribe(self, consumer: EstimateConsumer):
        if self._loop is None:
            self._pending_consumers.append(consumer)
            return

        self._loop.subscribe(consumer)
