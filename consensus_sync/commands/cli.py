import asyncio
import signal

import click
import uvloop

from consensus_sync.consensus.core.errors import ConsensusError
from consensus_sync.env import Env, load_env
from consensus_sync.nodes import ConsensusNode


@click.group(help="Gossip convergence node commands.")
def main():
    pass


@main.command(help="Run a node until interrupted.")
@click.option("--env-file", default=".env", type=str, help="Path to a dotenv file.")
@click.option("--log-level", default=None, type=str, help="Set log level.")
@click.option(
    "--policy",
    default=None,
    type=click.Choice(["drain-and-clamp", "increment-on-receipt"]),
    help="Accumulation policy.",
)
@click.option(
    "--port",
    "ports",
    multiple=True,
    type=int,
    help="Candidate port, repeatable. Tried in order.",
)
@click.option("--baseline", default=None, type=float, help="Initial measured value.")
@click.option("--bound", default=None, type=float, help="Maximum estimate magnitude.")
@click.option("--loopback/--no-loopback", default=None, help="Announce to 127.0.0.1.")
@click.option(
    "--trace-incoming",
    is_flag=True,
    default=False,
    help="Print accepted estimates to stderr.",
)
def run(
    env_file: str,
    log_level: str | None,
    policy: str | None,
    ports: tuple[int, ...],
    baseline: float | None,
    bound: float | None,
    loopback: bool | None,
    trace_incoming: bool,
):
    overrides = {}

    if log_level:
        overrides["CONSENSUS_LOG_LEVEL"] = log_level

    if policy:
        overrides["CONSENSUS_ACCUMULATION_POLICY"] = policy

    if ports:
        overrides["CONSENSUS_PORTS"] = ", ".join(str(port) for port in ports)

    if baseline is not None:
        overrides["CONSENSUS_BASELINE"] = baseline

    if bound is not None:
        overrides["CONSENSUS_BOUND"] = bound

    if loopback is not None:
        overrides["CONSENSUS_ENABLE_LOOPBACK"] = loopback

    if trace_incoming:
        overrides["CONSENSUS_TRACE_INCOMING"] = True

    env = load_env(
        Env,
        env_file=env_file,
        override=Env(**overrides),
    )

    try:
        node = ConsensusNode(env)
        uvloop.run(run_node(node))

    except ConsensusError as err:
        raise click.ClickException(str(err)) from err


async def run_node(node: ConsensusNode):
    loop = asyncio.get_running_loop()

    for signame in ("SIGINT", "SIGTERM"):
        loop.add_signal_handler(
            getattr(signal, signame),
            node.stop,
        )

    await node.initialize()

    try:
        await node.run()

    finally:
        await node.shutdown()
