from .consensus_udp_protocol import ConsensusUDPProtocol as ConsensusUDPProtocol
from .udp_transport import UDPTransport as UDPTransport
