from .message import Message


class Estimate(Message, kw_only=True):
    value: float = 0.0
