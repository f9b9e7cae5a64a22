from .protocol import UDPTransport as UDPTransport
