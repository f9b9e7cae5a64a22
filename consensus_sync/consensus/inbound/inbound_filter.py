import asyncio
import sys
from typing import TYPE_CHECKING

from consensus_sync.consensus.core.errors import MalformedMessageError
from consensus_sync.consensus.core.protocols import LoggerProtocol
from consensus_sync.consensus.core.types import Addr
from consensus_sync.consensus.discovery import is_local_address
from consensus_sync.logging.consensus_logging_models import (
    ServerDebug,
    ServerError,
    ServerWarning,
)
from consensus_sync.models import Estimate

from .inbound_result import InboundResult, RejectReason

if TYPE_CHECKING:
    from consensus_sync.consensus.loop.loop_context import LoopContext


class InboundFilter:
    """
    Decides whether an inbound datagram becomes the new received estimate.

    Checks run in order: decode, type, duplicate timestamp, self-echo. The
    sender's timestamp record is updated before the self-echo check, so an
    echoed message still advances the record for its address.
    """

    def __init__(
        self,
        context: 'LoopContext',
        logger: LoggerProtocol,
    ) -> None:
        self._context = context
        self._logger = logger

    async def accept(
        self,
        data: bytes,
        sender: Addr,
    ) -> InboundResult:
        host, port = sender

        try:
            type_name, message = self._context.codec.decode_frame(data)

        except MalformedMessageError as err:
            return await self._reject(
                RejectReason.MALFORMED,
                ServerWarning(
                    message=f"Dropped malformed datagram from {host}:{port} - {err.message}",
                    **self._context.log_fields(),
                ),
            )

        if not isinstance(message, Estimate):
            return await self._reject(
                RejectReason.WRONG_TYPE,
                ServerWarning(
                    message=f"Dropped {type_name} "
                            f"from {host}:{port} - expected Estimate",
                    **self._context.log_fields(),
                ),
            )

        if not self._context.tracker.observe(host, message.timestamp):
            return await self._reject(
                RejectReason.DUPLICATE,
                ServerDebug(
                    message=f"Dropped duplicate estimate from {host} at timestamp {message.timestamp}",
                    **self._context.log_fields(),
                ),
            )

        if message.source_id == self._context.node_id:
            return await self._reject(
                RejectReason.SELF_ECHO,
                ServerWarning(
                    message=f"Dropped own estimate echoed back from {host}:{port}",
                    **self._context.log_fields(),
                ),
            )

        is_local_sender = is_local_address(
            host,
            self._context.directory.last_interfaces,
        )

        self._context.store.receive(message)

        if self._context.config.trace_incoming:
            await self._trace(message)

        for err in await self._context.dispatch(message):
            await self._logger.log(
                ServerError(
                    message=f"Estimate consumer failed - {err}",
                    **self._context.log_fields(),
                )
            )

        await self._logger.log(
            ServerDebug(
                message=f"Accepted estimate {message.value} from {message.source_id} "
                        f"at {host}:{port} (local sender: {is_local_sender})",
                **self._context.log_fields(),
            )
        )

        return InboundResult.accept(
            message,
            is_local_sender=is_local_sender,
        )

    async def _reject(
        self,
        reason: RejectReason,
        entry: ServerDebug | ServerWarning,
    ):
        self._context.drops.increment(reason)
        await self._logger.log(entry)

        return InboundResult.reject(reason)

    async def _trace(self, estimate: Estimate):
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None,
            _write_trace,
            estimate.to_text(),
        )


def _write_trace(text: str):
    sys.stderr.write(text + "\n")
    sys.stderr.flush()
