from .config import ConsensusConfig as ConsensusConfig
from .errors import (
    ConfigurationError as ConfigurationError,
    ConsensusError as ConsensusError,
    ErrorCategory as ErrorCategory,
    ErrorSeverity as ErrorSeverity,
    MalformedMessageError as MalformedMessageError,
    MessageTooLargeError as MessageTooLargeError,
    NetworkError as NetworkError,
    NoAvailablePortError as NoAvailablePortError,
    ProtocolError as ProtocolError,
    SendError as SendError,
)
from .node_id import NodeId as NodeId
from .protocols import (
    LoggerProtocol as LoggerProtocol,
    TransportProtocol as TransportProtocol,
)
