import asyncio
import io
import pathlib
import sys
from collections import defaultdict
from typing import Callable, TypeVar

import msgspec

from consensus_sync.logging.config import LoggingConfig, StreamType
from consensus_sync.logging.models import Entry, Log


T = TypeVar('T', bound=Entry)

DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
ERROR_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - log write failed: {error}"


class LoggerStream:
    """
    Writes entries either to the console, rendered through a template, or
    as JSON lines to a log file.

    The destination is picked per call: an explicit path, then the
    stream's own path, then the configured log directory. With none of
    those set, entries go to the configured console stream.
    """

    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
    ) -> None:
        self._name = name or "default"
        self._template = template or DEFAULT_TEMPLATE
        self._path = path

        self._config = LoggingConfig()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._init_lock = asyncio.Lock()
        self._initialized = False

        self._files: dict[str, io.BufferedWriter] = {}
        self._file_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._streams: dict[StreamType, io.TextIOBase] = {}

    @property
    def name(self) -> str:
        return self._name

    async def initialize(self):
        async with self._init_lock:
            if self._initialized:
                return

            self._loop = asyncio.get_running_loop()
            self._streams = {
                StreamType.STDOUT: sys.stdout,
                StreamType.STDERR: sys.stderr,
            }
            self._initialized = True

    async def open_file(self, path: str) -> str:
        if not self._initialized:
            await self.initialize()

        logfile_path = self._resolve(path)

        async with self._file_locks[logfile_path]:
            if logfile_path not in self._files:
                self._files[logfile_path] = await self._loop.run_in_executor(
                    None,
                    _open_append,
                    logfile_path,
                )

        return logfile_path

    async def log(
        self,
        entry: T | Log[T],
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if not self._initialized:
            await self.initialize()

        record = entry if isinstance(entry, Log) else self._with_caller(entry)

        if not self._config.enabled(self._name, record.entry.level):
            return

        if filter and filter(record.entry) is False:
            return

        path = path or self._path or self._config.directory

        try:
            if path:
                await self._write_file(record, path)

            else:
                await self._write_console(record, template or self._template)

        except Exception as err:
            await self._write_error(record, err)

    async def close(self):
        for logfile_path in list(self._files):
            async with self._file_locks[logfile_path]:
                logfile = self._files.pop(logfile_path)
                await self._loop.run_in_executor(None, logfile.close)

        for stream in self._streams.values():
            if not stream.closed:
                stream.flush()

        self._initialized = False

    def abort(self):
        for logfile in self._files.values():
            if not logfile.closed:
                logfile.close()

        self._files.clear()

    def _resolve(self, path: str) -> str:
        """
        Map a file or directory path to a .json log file. A directory gets
        one file per stream name.
        """
        logfile = pathlib.Path(path)
        if not logfile.suffix:
            logfile = logfile / f"{self._name}.json"

        if logfile.suffix != ".json":
            raise ValueError(f"Log file {logfile} must be a .json file")

        return str(logfile.absolute())

    async def _write_console(self, record: Log[T], template: str):
        line = record.entry.to_template(template, context=_context_of(record))
        stream = self._streams[self._config.output]

        await self._loop.run_in_executor(
            None,
            _write_line,
            stream,
            line,
        )

    async def _write_file(self, record: Log[T], path: str):
        logfile_path = await self.open_file(path)
        data = msgspec.json.encode(record) + b"\n"

        async with self._file_locks[logfile_path]:
            await self._loop.run_in_executor(
                None,
                _write_bytes,
                self._files[logfile_path],
                data,
            )

    async def _write_error(self, record: Log[T], error: Exception):
        stderr = self._streams.get(StreamType.STDERR, sys.stderr)
        if stderr.closed:
            return

        context = _context_of(record)
        context["error"] = str(error)

        await self._loop.run_in_executor(
            None,
            _write_line,
            stderr,
            record.entry.to_template(ERROR_TEMPLATE, context=context),
        )

    def _with_caller(self, entry: T) -> Log[T]:
        # Frame of whoever awaited log()
        frame = sys._getframe(2)

        return Log(
            entry=entry,
            filename=frame.f_code.co_filename,
            function_name=frame.f_code.co_name,
            line_number=frame.f_lineno,
        )


def _context_of(record: Log) -> dict:
    return {
        "filename": record.filename,
        "function_name": record.function_name,
        "line_number": record.line_number,
        "thread_id": record.thread_id,
        "timestamp": record.timestamp,
    }


def _open_append(logfile_path: str) -> io.BufferedWriter:
    resolved = pathlib.Path(logfile_path)
    resolved.parent.mkdir(parents=True, exist_ok=True)

    return open(resolved, "ab")


def _write_line(stream: io.TextIOBase, line: str):
    if not stream.closed:
        stream.write(line + "\n")
        stream.flush()


def _write_bytes(logfile: io.BufferedWriter, data: bytes):
    if not logfile.closed:
        logfile.write(data)
        logfile.flush()
