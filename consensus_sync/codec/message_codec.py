import math

import msgspec
import orjson
import zstandard

from consensus_sync.consensus.core.errors import (
    MalformedMessageError,
    MessageTooLargeError,
)
from consensus_sync.models import Estimate, Message


# Datagram buffers on both ends are 4 KiB.
MAX_DATAGRAM_SIZE = 4096

FRAME_SEPARATOR = b'<|/|'


class MessageCodec:
    """
    Frames messages as `type-name<|/|json-payload`, zstd compressed.

    Type names missing from the registry decode into the bare Message
    header so callers can tell "wrong type" apart from "undecodable".
    """

    def __init__(
        self,
        models: list[type[Message]] | None = None,
        max_size: int = MAX_DATAGRAM_SIZE,
    ) -> None:
        if models is None:
            models = [Estimate]

        self._models: dict[bytes, type[Message]] = {
            model.__name__.encode(): model for model in models
        }
        self._max_size = max_size

        self._compressor = zstandard.ZstdCompressor()
        self._decompressor = zstandard.ZstdDecompressor()

    def register(self, model: type[Message]):
        self._models[model.__name__.encode()] = model

    def encode(self, message: Message) -> bytes:
        payload = orjson.dumps(
            msgspec.structs.asdict(message)
        )

        data = self._compressor.compress(
            message.message_type + FRAME_SEPARATOR + payload
        )

        if len(data) > self._max_size:
            raise MessageTooLargeError(len(data), self._max_size)

        return data

    def decode(self, data: bytes) -> Message:
        return self.decode_frame(data)[1]

    def decode_frame(self, data: bytes) -> tuple[str, Message]:
        """
        Decode a datagram and return the type name it was framed with
        alongside the message. The name is the one on the wire, even when
        it is not registered and the message is the bare header.
        """
        if len(data) > self._max_size:
            raise MalformedMessageError(data, "datagram exceeds maximum size")

        try:
            frame = self._decompressor.decompress(
                data,
                max_output_size=self._max_size * 16,
            )

        except zstandard.ZstdError as err:
            raise MalformedMessageError(data, "decompression failed", cause=err) from err

        message_type, separator, payload = frame.partition(FRAME_SEPARATOR)
        if not separator:
            raise MalformedMessageError(data, "missing frame separator")

        model = self._models.get(message_type, Message)

        try:
            message = msgspec.convert(
                orjson.loads(payload),
                type=model,
            )

        except (orjson.JSONDecodeError, msgspec.ValidationError) as err:
            raise MalformedMessageError(data, "invalid payload", cause=err) from err

        if isinstance(message, Estimate) and not (
            math.isfinite(message.value) and math.isfinite(message.timestamp)
        ):
            raise MalformedMessageError(data, "non-finite estimate")

        return message_type.decode(errors="replace"), message
