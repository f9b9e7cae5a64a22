"""
Type definitions for the convergence engine.
"""

from typing import Awaitable, Callable, Literal, Union

from consensus_sync.models import Estimate

# Sender address as reported by the transport
Addr = tuple[str, int]

# Outcome of one destination send
SendStatus = Literal['sent', 'skipped', 'failed']

# Loop states
LoopState = Literal['announcing', 'waiting', 'stopped']

# Internal consumer of accepted or announced estimates
EstimateConsumer = Callable[[Estimate], Union[None, Awaitable[None]]]
