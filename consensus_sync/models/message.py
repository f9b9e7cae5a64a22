import time

import msgspec


class Message(msgspec.Struct, kw_only=True):
    source_id: str = ""
    timestamp: float = 0.0

    @property
    def message_type(self) -> bytes:
        return self.__class__.__name__.encode()

    def stamp(self):
        self.timestamp = time.time()
        return self

    def copy(self):
        return msgspec.structs.replace(self)

    def to_text(self) -> str:
        fields = "\n".join(
            f"  {name}: {value}"
            for name, value in msgspec.structs.asdict(self).items()
        )

        return f"{self.__class__.__name__}\n{fields}"
