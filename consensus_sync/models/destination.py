import msgspec


class Destination(msgspec.Struct, frozen=True):
    address: str
    port: int
    is_local: bool = False
