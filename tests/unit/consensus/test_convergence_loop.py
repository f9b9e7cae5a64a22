"""
Tests for the convergence loop.

Covers:
- Baseline hold without peers, single peer contribution and saturation
- Duplicate idempotence and self-echo immunity
- Receipt-driven propagation and periodic re-announce per policy
- Stop latency, per-cycle error recovery, drop reports
"""

import asyncio

import pytest

from consensus_sync.consensus.discovery import EndpointDirectory
from consensus_sync.consensus.inbound import RejectReason
from consensus_sync.consensus.loop import ConvergenceLoop, LoopContext
from consensus_sync.logging.models import LogLevel
from consensus_sync.models import Estimate

from tests.mocks import (
    NODE_ID,
    FakeTransport,
    RecordingLogger,
    encode_estimate,
    make_config,
)


def build_loop(**overrides):
    transport = FakeTransport()
    logger = RecordingLogger()
    config = make_config(**overrides)
    context = LoopContext(
        config=config,
        transport=transport,
        directory=EndpointDirectory(config, interfaces=lambda: []),
    )

    return ConvergenceLoop(context, logger), context, transport, logger


async def start(loop: ConvergenceLoop):
    await loop.merge()
    await loop.announce()


async def run_until(loop: ConvergenceLoop, condition, timeout: float = 2.0):
    task = asyncio.create_task(loop.run())

    async def wait():
        while not condition():
            await asyncio.sleep(0.005)

    try:
        await asyncio.wait_for(wait(), timeout=timeout)

    finally:
        loop.stop()
        await asyncio.wait_for(task, timeout=timeout)


class TestDrainAndClampConvergence:
    """Drain-and-clamp behaviour end to end with baseline 1 and bound 10."""

    @pytest.mark.asyncio
    async def test_no_peer_holds_baseline(self) -> None:
        loop, context, _, _ = build_loop(baseline=1.0, bound=10.0)
        await start(loop)

        for _ in range(20):
            await loop.periodic()
            assert context.store.local.value == 1.0

    @pytest.mark.asyncio
    async def test_single_peer_estimate_is_drained_into_local(self) -> None:
        loop, context, _, _ = build_loop(baseline=1.0, bound=10.0)
        await start(loop)

        result = await loop.process_datagram(
            encode_estimate(3.0, timestamp=100.0),
            ("10.0.0.9", 31100),
        )

        assert result.accepted is True
        assert context.store.local.value == 4.0

        for _ in range(5):
            await loop.periodic()
            assert context.store.local.value == 4.0

    @pytest.mark.asyncio
    async def test_saturated_local_clamps_to_bound(self) -> None:
        loop, context, _, _ = build_loop(baseline=1.0, bound=10.0)
        await start(loop)
        context.store.local.value = 10.0

        await loop.process_datagram(
            encode_estimate(-7.0, timestamp=100.0),
            ("10.0.0.9", 31100),
        )

        assert context.store.local.value == 10.0

    @pytest.mark.asyncio
    async def test_run_holds_baseline_over_many_cycles(self) -> None:
        loop, context, transport, _ = build_loop(baseline=1.0, enable_loopback=True)

        await run_until(loop, lambda: len(transport.sent) >= 30)

        assert context.store.local.value == 1.0


class TestInboundPath:
    @pytest.mark.asyncio
    async def test_duplicate_delivery_merges_once(self) -> None:
        loop, context, _, _ = build_loop()
        await start(loop)
        data = encode_estimate(3.0, timestamp=100.0)

        await loop.process_datagram(data, ("10.0.0.9", 31100))
        second = await loop.process_datagram(data, ("10.0.0.9", 31100))

        assert second.reason == RejectReason.DUPLICATE
        assert context.store.local.value == 4.0

    @pytest.mark.asyncio
    async def test_self_echo_never_changes_local(self) -> None:
        loop, context, _, _ = build_loop()
        await start(loop)

        for timestamp, value in enumerate([9.0, -9.0, 1e6, 0.0]):
            result = await loop.process_datagram(
                encode_estimate(value, timestamp=float(timestamp), source_id=NODE_ID),
                ("10.0.0.5", 31100),
            )
            assert result.reason == RejectReason.SELF_ECHO
            assert context.store.local.value == 1.0

    @pytest.mark.asyncio
    async def test_acceptance_triggers_announce(self) -> None:
        loop, _, transport, _ = build_loop(enable_broadcast=False)
        await start(loop)
        before = len(transport.sent)

        await loop.process_datagram(encode_estimate(3.0), ("10.0.0.9", 31100))

        assert len(transport.sent) == before + 1

    @pytest.mark.asyncio
    async def test_rejection_does_not_announce(self) -> None:
        loop, _, transport, _ = build_loop()
        await start(loop)
        before = len(transport.sent)

        await loop.process_datagram(b"junk", ("10.0.0.9", 31100))

        assert len(transport.sent) == before

    @pytest.mark.asyncio
    async def test_run_processes_queued_datagram(self) -> None:
        loop, context, transport, _ = build_loop()
        accepted: list[Estimate] = []
        loop.subscribe(
            lambda estimate: accepted.append(estimate)
            if estimate.source_id == "node-b" else None
        )
        transport.deliver(encode_estimate(2.0, timestamp=50.0))

        await run_until(loop, lambda: len(accepted) > 0)

        assert context.store.local.value == 3.0


class TestIncrementPolicy:
    @pytest.mark.asyncio
    async def test_timer_reannounces_without_merging(self) -> None:
        loop, context, transport, _ = build_loop(
            accumulation_policy="increment-on-receipt",
            enable_broadcast=False,
        )
        await start(loop)

        await loop.process_datagram(encode_estimate(3.0), ("10.0.0.9", 31100))
        assert context.store.local.value == 4.0
        assert context.store.external.value == 4.0

        sent_before = len(transport.sent)
        await loop.periodic()

        assert context.store.local.value == 4.0
        assert len(transport.sent) == sent_before + 1

    @pytest.mark.asyncio
    async def test_external_estimate_is_announced(self) -> None:
        loop, context, _, _ = build_loop(accumulation_policy="increment-on-receipt")
        announced: list[Estimate] = []
        loop.subscribe(announced.append)
        await start(loop)

        await loop.process_datagram(encode_estimate(5.0), ("10.0.0.9", 31100))

        assert announced[-1].value == 6.0
        assert announced[-1].source_id == NODE_ID


class TestLoopLifecycle:
    @pytest.mark.asyncio
    async def test_stop_latency_is_bounded_by_poll_timeout(self) -> None:
        loop, _, _, _ = build_loop(poll_timeout=0.05)
        task = asyncio.create_task(loop.run())
        await asyncio.sleep(0.1)

        loop.stop()

        await asyncio.wait_for(task, timeout=0.5)
        assert loop.state == 'stopped'

    @pytest.mark.asyncio
    async def test_initial_announce_uses_baseline(self) -> None:
        loop, _, _, _ = build_loop(baseline=2.5)
        announced: list[Estimate] = []
        loop.subscribe(announced.append)

        await run_until(loop, lambda: len(announced) > 0)

        assert announced[0].value == 2.5

    @pytest.mark.asyncio
    async def test_cycle_error_is_logged_and_loop_continues(self) -> None:
        loop, context, transport, logger = build_loop()
        transport.read_errors = 1
        transport.deliver(encode_estimate(2.0))

        await run_until(loop, lambda: context.store.received is not None)

        assert logger.has("simulated read failure", LogLevel.ERROR)

    @pytest.mark.asyncio
    async def test_drop_report_is_logged(self) -> None:
        loop, _, transport, logger = build_loop(drop_report_interval=0.0)
        transport.deliver(b"junk")

        await run_until(loop, lambda: logger.has("Dropped 1 datagrams", LogLevel.INFO))

    @pytest.mark.asyncio
    async def test_cancel_stops_loop(self) -> None:
        loop, _, _, _ = build_loop()
        task = asyncio.create_task(loop.run())
        await asyncio.sleep(0.03)

        task.cancel()
        await asyncio.wait_for(asyncio.gather(task, return_exceptions=True), timeout=0.5)

        assert loop.state == 'stopped'
