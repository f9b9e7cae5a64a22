"""
Tests for MessageCodec framing.

Covers:
- Encoded frames decode to the same estimate
- Unknown type names decode to the bare Message header
- Malformed input: bad compression, missing separator, invalid payload
- Size limits and non-finite values
"""

import pytest
import zstandard

from consensus_sync.codec import FRAME_SEPARATOR, MessageCodec
from consensus_sync.consensus.core import MalformedMessageError, MessageTooLargeError
from consensus_sync.models import Estimate, Message


def compress(frame: bytes) -> bytes:
    return zstandard.ZstdCompressor().compress(frame)


class TestMessageCodec:
    def test_estimate_survives_encoding(self) -> None:
        codec = MessageCodec()
        estimate = Estimate(source_id="node-b", timestamp=1700000000.25, value=-3.5)

        decoded = codec.decode(codec.encode(estimate))

        assert isinstance(decoded, Estimate)
        assert decoded == estimate

    def test_frame_layout(self) -> None:
        data = MessageCodec().encode(Estimate(source_id="node-b", value=1.0))

        frame = zstandard.ZstdDecompressor().decompress(data)

        assert frame.startswith(b"Estimate" + FRAME_SEPARATOR)

    def test_unknown_type_decodes_as_message(self) -> None:
        data = compress(b'Heartbeat' + FRAME_SEPARATOR + b'{"source_id": "node-b", "timestamp": 3.0, "beat": 1}')

        decoded = MessageCodec().decode(data)

        assert type(decoded) is Message
        assert decoded.message_type == b"Message"
        assert decoded.source_id == "node-b"

    def test_decode_frame_keeps_wire_type_name(self) -> None:
        data = compress(b'Heartbeat' + FRAME_SEPARATOR + b'{"source_id": "node-b", "timestamp": 3.0}')

        type_name, decoded = MessageCodec().decode_frame(data)

        assert type_name == "Heartbeat"
        assert type(decoded) is Message

    def test_register_model(self) -> None:
        class Heartbeat(Message, kw_only=True):
            beat: int = 0

        codec = MessageCodec()
        codec.register(Heartbeat)

        decoded = codec.decode(codec.encode(Heartbeat(source_id="node-b", beat=4)))

        assert isinstance(decoded, Heartbeat)
        assert decoded.beat == 4


class TestMalformedInput:
    def test_not_compressed(self) -> None:
        with pytest.raises(MalformedMessageError):
            MessageCodec().decode(b"Estimate<|/|{}")

    def test_missing_separator(self) -> None:
        with pytest.raises(MalformedMessageError) as error:
            MessageCodec().decode(compress(b'Estimate{"value": 1.0}'))

        assert "separator" in error.value.message

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedMessageError):
            MessageCodec().decode(compress(b"Estimate" + FRAME_SEPARATOR + b"{not json"))

    def test_wrong_field_type(self) -> None:
        with pytest.raises(MalformedMessageError):
            MessageCodec().decode(
                compress(b"Estimate" + FRAME_SEPARATOR + b'{"value": "three"}')
            )

    def test_non_finite_value(self) -> None:
        codec = MessageCodec()

        with pytest.raises(MalformedMessageError):
            codec.decode(codec.encode(Estimate(source_id="node-b", value=float("nan"))))

    def test_oversized_datagram(self) -> None:
        with pytest.raises(MalformedMessageError):
            MessageCodec(max_size=8).decode(b"x" * 9)

    def test_oversized_encode(self) -> None:
        codec = MessageCodec(max_size=16)

        with pytest.raises(MessageTooLargeError) as error:
            codec.encode(Estimate(source_id="node-" + "b" * 200, value=1.0))

        assert error.value.context["max_size"] == 16
