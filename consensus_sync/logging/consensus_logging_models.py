from .models import Entry, LogLevel


class ServerTrace(Entry, kw_only=True):
    node_id: str
    node_host: str
    node_port: int
    level: LogLevel = LogLevel.TRACE


class ServerDebug(Entry, kw_only=True):
    node_id: str
    node_host: str
    node_port: int
    level: LogLevel = LogLevel.DEBUG


class ServerInfo(Entry, kw_only=True):
    node_id: str
    node_host: str
    node_port: int
    level: LogLevel = LogLevel.INFO


class ServerWarning(Entry, kw_only=True):
    node_id: str
    node_host: str
    node_port: int
    level: LogLevel = LogLevel.WARN


class ServerError(Entry, kw_only=True):
    node_id: str
    node_host: str
    node_port: int
    level: LogLevel = LogLevel.ERROR


class ServerFatal(Entry, kw_only=True):
    node_id: str
    node_host: str
    node_port: int
    level: LogLevel = LogLevel.FATAL
