"""
Tests for the inbound filter.

Covers:
- Each rejection reason and its log level
- Step ordering (timestamp record updated before the self-echo check)
- Acceptance side effects: received estimate, consumers, trace output
- Sender locality
"""

import pytest

from consensus_sync.codec import MessageCodec
from consensus_sync.consensus.discovery import EndpointDirectory, NetworkInterface
from consensus_sync.consensus.inbound import InboundFilter, RejectReason
from consensus_sync.consensus.loop import LoopContext
from consensus_sync.logging.models import LogLevel
from consensus_sync.models import Estimate, Message

from tests.mocks import (
    NODE_ID,
    FakeTransport,
    RecordingLogger,
    encode_estimate,
    make_config,
)


class Heartbeat(Message, kw_only=True):
    beat: int = 0


def build_filter(
    interfaces: list[NetworkInterface] | None = None,
    **overrides,
):
    config = make_config(**overrides)
    logger = RecordingLogger()
    context = LoopContext(
        config=config,
        transport=FakeTransport(),
        directory=EndpointDirectory(config, interfaces=lambda: interfaces or []),
    )
    context.directory.refresh()

    return InboundFilter(context, logger), context, logger


class TestInboundFilterRejections:
    """Rejected datagrams never change the received estimate."""

    @pytest.mark.asyncio
    async def test_malformed_datagram(self) -> None:
        inbound, context, logger = build_filter()

        result = await inbound.accept(b"definitely not zstd", ("10.0.0.9", 31100))

        assert result.accepted is False
        assert result.reason == RejectReason.MALFORMED
        assert context.store.received is None
        assert context.drops.malformed == 1
        assert logger.has("malformed", LogLevel.WARN)
        assert "10.0.0.9" not in context.tracker

    @pytest.mark.asyncio
    async def test_wrong_message_type(self) -> None:
        inbound, context, logger = build_filter()
        data = MessageCodec(models=[Heartbeat]).encode(
            Heartbeat(source_id="node-b", timestamp=5.0, beat=3)
        )

        result = await inbound.accept(data, ("10.0.0.9", 31100))

        assert result.reason == RejectReason.WRONG_TYPE
        assert context.store.received is None
        assert logger.has("Dropped Heartbeat from 10.0.0.9:31100", LogLevel.WARN)
        assert "10.0.0.9" not in context.tracker

    @pytest.mark.asyncio
    async def test_duplicate_timestamp(self) -> None:
        inbound, context, logger = build_filter()
        data = encode_estimate(3.0, timestamp=100.0)

        first = await inbound.accept(data, ("10.0.0.9", 31100))
        second = await inbound.accept(data, ("10.0.0.9", 31100))

        assert first.accepted is True
        assert second.reason == RejectReason.DUPLICATE
        assert context.drops.duplicate == 1
        assert logger.has("duplicate", LogLevel.DEBUG)

    @pytest.mark.asyncio
    async def test_duplicate_key_ignores_sender_port(self) -> None:
        inbound, _, _ = build_filter()
        data = encode_estimate(3.0, timestamp=100.0)

        await inbound.accept(data, ("10.0.0.9", 31100))
        result = await inbound.accept(data, ("10.0.0.9", 31104))

        assert result.reason == RejectReason.DUPLICATE

    @pytest.mark.asyncio
    async def test_self_echo(self) -> None:
        inbound, context, logger = build_filter()
        data = encode_estimate(9.0, source_id=NODE_ID)

        result = await inbound.accept(data, ("10.0.0.5", 31100))

        assert result.reason == RejectReason.SELF_ECHO
        assert context.store.received is None
        assert logger.has("echoed", LogLevel.WARN)

    @pytest.mark.asyncio
    async def test_self_echo_still_records_timestamp(self) -> None:
        """The record is updated before the self-echo check."""
        inbound, context, _ = build_filter()

        await inbound.accept(
            encode_estimate(9.0, timestamp=42.0, source_id=NODE_ID),
            ("10.0.0.5", 31100),
        )
        result = await inbound.accept(
            encode_estimate(2.0, timestamp=42.0, source_id="node-b"),
            ("10.0.0.5", 31100),
        )

        assert context.tracker.get("10.0.0.5") == 42.0
        assert result.reason == RejectReason.DUPLICATE


class TestInboundFilterAcceptance:
    """Accepted estimates become the received estimate."""

    @pytest.mark.asyncio
    async def test_accept_sets_received(self) -> None:
        inbound, context, _ = build_filter()

        result = await inbound.accept(
            encode_estimate(3.0, timestamp=100.0),
            ("10.0.0.9", 31100),
        )

        assert result.accepted is True
        assert result.reason is None
        assert result.estimate.value == 3.0
        assert context.store.received.value == 3.0
        assert context.store.received.source_id == "node-b"

    @pytest.mark.asyncio
    async def test_new_timestamp_from_known_sender_is_accepted(self) -> None:
        inbound, context, _ = build_filter()

        await inbound.accept(encode_estimate(3.0, timestamp=100.0), ("10.0.0.9", 31100))
        result = await inbound.accept(encode_estimate(5.0, timestamp=101.0), ("10.0.0.9", 31100))

        assert result.accepted is True
        assert context.store.received.value == 5.0
        assert context.tracker.get("10.0.0.9") == 101.0

    @pytest.mark.asyncio
    async def test_consumers_receive_copy(self) -> None:
        inbound, context, _ = build_filter()
        seen: list[Estimate] = []
        context.consumers.append(seen.append)

        await inbound.accept(encode_estimate(3.0), ("10.0.0.9", 31100))

        assert len(seen) == 1
        assert seen[0].value == 3.0
        assert seen[0] is not context.store.received

    @pytest.mark.asyncio
    async def test_failing_consumer_is_logged(self) -> None:
        inbound, context, logger = build_filter()

        def broken(estimate: Estimate):
            raise ValueError("consumer exploded")

        context.consumers.append(broken)

        result = await inbound.accept(encode_estimate(3.0), ("10.0.0.9", 31100))

        assert result.accepted is True
        assert logger.has("consumer exploded", LogLevel.ERROR)

    @pytest.mark.asyncio
    async def test_local_sender_is_detected(self) -> None:
        inbound, _, logger = build_filter(
            interfaces=[
                NetworkInterface(name="eth0", address="10.0.0.5", broadcast="10.0.0.255"),
            ],
        )

        local = await inbound.accept(encode_estimate(1.0, timestamp=1.0), ("10.0.0.5", 31100))
        remote = await inbound.accept(encode_estimate(1.0, timestamp=2.0), ("10.0.0.9", 31100))

        assert local.is_local_sender is True
        assert remote.is_local_sender is False
        assert logger.has("local sender: True", LogLevel.DEBUG)

    @pytest.mark.asyncio
    async def test_trace_writes_estimate_to_stderr(self, capsys) -> None:
        inbound, _, _ = build_filter(trace_incoming=True)

        await inbound.accept(encode_estimate(3.5), ("10.0.0.9", 31100))

        captured = capsys.readouterr()
        assert "Estimate" in captured.err
        assert "value: 3.5" in captured.err

    @pytest.mark.asyncio
    async def test_no_trace_by_default(self, capsys) -> None:
        inbound, _, _ = build_filter()

        await inbound.accept(encode_estimate(3.5), ("10.0.0.9", 31100))

        assert "value: 3.5" not in capsys.readouterr().err
