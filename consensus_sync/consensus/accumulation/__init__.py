from .drain_and_clamp import DrainAndClamp as DrainAndClamp
from .increment_on_receipt import IncrementOnReceipt as IncrementOnReceipt
from .policy import (
    AccumulationPolicy as AccumulationPolicy,
    MergeOutcome as MergeOutcome,
    clamp as clamp,
)
from .registry import (
    DEFAULT_POLICY as DEFAULT_POLICY,
    POLICIES as POLICIES,
    get_policy as get_policy,
)
