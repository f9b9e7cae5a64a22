from consensus_sync.consensus.core.errors import ConfigurationError

from .drain_and_clamp import DrainAndClamp
from .increment_on_receipt import IncrementOnReceipt
from .policy import AccumulationPolicy


DEFAULT_POLICY = DrainAndClamp.name

POLICIES: dict[str, type[AccumulationPolicy]] = {
    DrainAndClamp.name: DrainAndClamp,
    IncrementOnReceipt.name: IncrementOnReceipt,
}


def get_policy(name: str | None = None) -> AccumulationPolicy:
    if name is None:
        name = DEFAULT_POLICY

    policy = POLICIES.get(name)
    if policy is None:
        raise ConfigurationError(
            f"Unknown accumulation policy '{name}'",
            accumulation_policy=name,
            available=sorted(POLICIES),
        )

    return policy()
