import contextvars
from typing import Literal

from consensus_sync.logging.models import LogLevel, LogLevelName
from .stream_type import StreamType


LogOutput = Literal['stdout', 'stderr']

_level = contextvars.ContextVar("_level", default=LogLevel.INFO)
_output = contextvars.ContextVar("_output", default=StreamType.STDERR)
_directory = contextvars.ContextVar("_directory", default=None)
_all_disabled = contextvars.ContextVar("_all_disabled", default=False)
_disabled_names = contextvars.ContextVar("_disabled_names", default=frozenset())


class LoggingConfig:
    """
    Process-wide logging settings. Every instance reads and writes the
    same context variables, so any component may construct its own.
    """

    def update(
        self,
        log_directory: str | None = None,
        log_level: LogLevelName | None = None,
        log_output: LogOutput | None = None,
    ):
        if log_level:
            _level.set(LogLevel.to_level(log_level))

        if log_output:
            _output.set(StreamType(log_output))

        if log_directory:
            _directory.set(log_directory)

    def disable(self, logger_name: str | None = None):
        if logger_name is None:
            _all_disabled.set(True)

        else:
            _disabled_names.set(_disabled_names.get() | {logger_name})

    def enable(self, logger_name: str | None = None):
        if logger_name is None:
            _all_disabled.set(False)

        else:
            _disabled_names.set(_disabled_names.get() - {logger_name})

    def enabled(self, logger_name: str, log_level: LogLevel) -> bool:
        if _all_disabled.get() or logger_name in _disabled_names.get():
            return False

        return log_level.rank >= _level.get().rank

    def reset(self):
        _level.set(LogLevel.INFO)
        _output.set(StreamType.STDERR)
        _directory.set(None)
        _all_disabled.set(False)
        _disabled_names.set(frozenset())

    @property
    def disabled(self) -> bool:
        return _all_disabled.get()

    @property
    def level(self) -> LogLevel:
        return _level.get()

    @property
    def output(self) -> StreamType:
        return _output.get()

    @property
    def directory(self) -> str | None:
        return _directory.get()
