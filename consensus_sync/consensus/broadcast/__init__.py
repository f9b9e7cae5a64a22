from .broadcaster import GossipBroadcaster as GossipBroadcaster
from .send_result import (
    AnnounceReport as AnnounceReport,
    SendResult as SendResult,
)
