from typing import TYPE_CHECKING, Iterable

from consensus_sync.consensus.core.errors import SendError
from consensus_sync.consensus.core.protocols import LoggerProtocol
from consensus_sync.logging.consensus_logging_models import ServerError
from consensus_sync.models import Destination, Estimate

from .send_result import AnnounceReport, SendResult

if TYPE_CHECKING:
    from consensus_sync.consensus.loop.loop_context import LoopContext


class GossipBroadcaster:
    """
    Fans one estimate out to every destination, best effort.

    A failed send is recorded in the returned report and the remaining
    destinations are still attempted. Loopback destinations are only
    written to the socket when send_loopback is set; the owning node always
    gets exactly one local copy through dispatch.
    """

    def __init__(
        self,
        context: 'LoopContext',
        logger: LoggerProtocol,
    ) -> None:
        self._context = context
        self._logger = logger

    async def announce(
        self,
        estimate: Estimate,
        destinations: Iterable[Destination],
    ) -> AnnounceReport:
        estimate.stamp()
        data = self._context.codec.encode(estimate)

        for err in await self._context.dispatch(estimate):
            await self._logger.log(
                ServerError(
                    message=f"Estimate consumer failed - {err}",
                    **self._context.log_fields(),
                )
            )

        report = AnnounceReport(estimate=estimate.copy())

        for destination in destinations:
            report.results.append(
                self._send(data, destination)
            )

        return report

    def _send(
        self,
        data: bytes,
        destination: Destination,
    ) -> SendResult:
        if destination.is_local and not self._context.config.send_loopback:
            return SendResult(
                destination=destination,
                status='skipped',
            )

        try:
            sent = self._context.transport.write(
                data,
                destination.address,
                destination.port,
            )

        except OSError as err:
            return SendResult(
                destination=destination,
                status='failed',
                error=SendError(destination.address, destination.port, cause=err),
            )

        if not sent:
            return SendResult(
                destination=destination,
                status='failed',
                error=SendError(destination.address, destination.port),
            )

        return SendResult(
            destination=destination,
            status='sent',
        )
