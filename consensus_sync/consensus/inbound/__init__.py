from .drop_counter import (
    DropCounter as DropCounter,
    DropCounterSnapshot as DropCounterSnapshot,
)
from .inbound_filter import InboundFilter as InboundFilter
from .inbound_result import (
    InboundResult as InboundResult,
    RejectReason as RejectReason,
)
from .timestamp_tracker import TimestampTracker as TimestampTracker
