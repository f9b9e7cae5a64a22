from __future__ import annotations

import asyncio
import sys
from typing import Callable, TypeVar

from consensus_sync.logging.models import Entry, Log

from .logger_context import LoggerContext

T = TypeVar('T', bound=Entry)

DEFAULT_LOGGER = 'consensus'


class Logger:
    """
    Entry point for structured logging. Implements LoggerProtocol, so
    engine components can take either this or a recording fake.

    Each name maps to one long-lived LoggerContext; contexts opened through
    log() are nested and stay open until close().
    """

    def __init__(self) -> None:
        self._contexts: dict[str, LoggerContext] = {}

    def __getitem__(self, name: str) -> LoggerContext:
        return self.context(name=name)

    def context(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
        nested: bool = True,
    ) -> LoggerContext:
        name = name or DEFAULT_LOGGER

        context = self._contexts.get(name)
        if context is not None and path and context.path != path:
            context.stream.abort()
            context = None

        if context is None:
            context = LoggerContext(
                name,
                template=template,
                path=path,
                nested=nested,
            )
            self._contexts[name] = context

        return context

    async def log(
        self,
        entry: T,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        record = _with_caller(entry, sys._getframe(1))

        async with self.context(name=name) as stream:
            await stream.log(
                record,
                template=template,
                path=path,
                filter=filter,
            )

    async def batch(
        self,
        *entries: T,
        name: str | None = None,
    ):
        frame = sys._getframe(1)

        async with self.context(name=name) as stream:
            await asyncio.gather(*[
                stream.log(_with_caller(entry, frame)) for entry in entries
            ])

    async def close(self):
        await asyncio.gather(*[
            context.stream.close() for context in self._contexts.values()
        ])

    def abort(self):
        for context in self._contexts.values():
            context.stream.abort()


def _with_caller(entry: T, frame) -> Log[T]:
    code = frame.f_code

    return Log(
        entry=entry,
        filename=code.co_filename,
        function_name=code.co_name,
        line_number=frame.f_lineno,
    )
