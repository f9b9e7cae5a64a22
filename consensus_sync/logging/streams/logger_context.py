from .logger_stream import LoggerStream


class LoggerContext:
    """
    Named stream plus its defaults. Used as an async context manager; a
    nested context keeps its stream open on exit so the node can reuse it
    across log calls.
    """

    def __init__(
        self,
        name: str,
        template: str | None = None,
        path: str | None = None,
        nested: bool = False,
    ) -> None:
        self.name = name
        self.path = path
        self.nested = nested
        self.stream = LoggerStream(
            name=name,
            template=template,
            path=path,
        )

    async def __aenter__(self) -> LoggerStream:
        await self.stream.initialize()
        return self.stream

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if not self.nested:
            await self.stream.close()
