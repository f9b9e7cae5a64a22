"""
Cooperative send/receive loop for one node.

Alternates between waiting for an inbound datagram (bounded by the poll
timeout) and announcing. All state is touched from this one task, so a
merge followed by its broadcast is never interleaved with inbound work.
"""

import asyncio
import time

from consensus_sync.consensus.accumulation import AccumulationPolicy, get_policy
from consensus_sync.consensus.broadcast import AnnounceReport, GossipBroadcaster
from consensus_sync.consensus.core.protocols import LoggerProtocol
from consensus_sync.consensus.core.types import Addr, EstimateConsumer, LoopState
from consensus_sync.consensus.inbound import InboundFilter, InboundResult
from consensus_sync.logging.consensus_logging_models import (
    ServerDebug,
    ServerError,
    ServerInfo,
)

from .loop_context import LoopContext


class ConvergenceLoop:
    def __init__(
        self,
        context: LoopContext,
        logger: LoggerProtocol,
        policy: AccumulationPolicy | None = None,
    ) -> None:
        if policy is None:
            policy = get_policy(context.config.accumulation_policy)

        self._context = context
        self._logger = logger
        self._policy = policy

        self._filter = InboundFilter(context, logger)
        self._broadcaster = GossipBroadcaster(context, logger)

        self._stop_event = asyncio.Event()
        self._state: LoopState = 'stopped'
        self._last_drop_report = time.monotonic()

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def policy(self) -> AccumulationPolicy:
        return self._policy

    @property
    def context(self) -> LoopContext:
        return self._context

    def subscribe(self, consumer: EstimateConsumer):
        self._context.consumers.append(consumer)

    def stop(self):
        """
        Request a stop. The loop exits after the current wait or datagram,
        so latency is bounded by one poll timeout.
        """
        self._stop_event.set()

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    async def run(self):
        self._stop_event.clear()
        self._last_drop_report = time.monotonic()

        try:
            await self.merge()
            await self.announce()

            while not self._stop_event.is_set():
                try:
                    self._state = 'waiting'
                    ready = await self._context.transport.poll(
                        self._context.config.poll_timeout,
                    )

                    if self._stop_event.is_set():
                        break

                    if ready:
                        data, sender = self._context.transport.read()
                        await self.process_datagram(data, sender)

                    else:
                        await self.periodic()

                    await self._report_drops()

                except asyncio.CancelledError:
                    break

                except Exception as err:
                    await self._logger.log(
                        ServerError(
                            message=f"Convergence cycle failed - {err}",
                            **self._context.log_fields(),
                        )
                    )

        finally:
            self._state = 'stopped'

    async def process_datagram(
        self,
        data: bytes,
        sender: Addr,
    ) -> InboundResult:
        result = await self._filter.accept(data, sender)

        if result.accepted:
            await self.merge()
            await self.announce()

        return result

    async def periodic(self):
        if self._policy.merge_on_timer:
            await self.merge()

        await self.announce()

    async def merge(self):
        store = self._context.store
        outcome = self._policy.merge(
            store.local,
            store.received,
            self._context.config.bound,
            self._context.config.baseline,
        )

        store.apply(outcome)

        await self._logger.log(
            ServerDebug(
                message=f"Merged local estimate to {store.local.value} ({self._policy.name})",
                **self._context.log_fields(),
            )
        )

    async def announce(self) -> AnnounceReport:
        self._state = 'announcing'

        self._context.destinations = self._context.directory.refresh(
            self._context.transport,
        )

        report = await self._broadcaster.announce(
            self._context.store.outbound(),
            self._context.destinations,
        )

        await self._logger.log(
            ServerDebug(
                message=report.to_message(),
                **self._context.log_fields(),
            )
        )

        return report

    async def _report_drops(self):
        interval = self._context.config.drop_report_interval
        if time.monotonic() - self._last_drop_report < interval:
            return

        self._last_drop_report = time.monotonic()
        snapshot = self._context.drops.reset()

        if snapshot.has_drops:
            await self._logger.log(
                ServerInfo(
                    message=snapshot.to_message(),
                    **self._context.log_fields(),
                )
            )
