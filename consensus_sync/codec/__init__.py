from .message_codec import (
    FRAME_SEPARATOR as FRAME_SEPARATOR,
    MAX_DATAGRAM_SIZE as MAX_DATAGRAM_SIZE,
    MessageCodec as MessageCodec,
)
