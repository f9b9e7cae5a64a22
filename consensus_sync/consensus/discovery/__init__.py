from .endpoint_directory import (
    EndpointDirectory as EndpointDirectory,
    discover as discover,
)
from .interfaces import (
    ANY_ADDRESS as ANY_ADDRESS,
    GLOBAL_BROADCAST_ADDRESS as GLOBAL_BROADCAST_ADDRESS,
    LOOPBACK_ADDRESS as LOOPBACK_ADDRESS,
    NetworkInterface as NetworkInterface,
    get_interfaces as get_interfaces,
    is_local_address as is_local_address,
)
