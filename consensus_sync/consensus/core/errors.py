"""
Consensus Error Hierarchy

Categorized exceptions for the convergence engine. Errors are classified by:
- Category: What kind of error (network, protocol, configuration, internal)
- Severity: How serious (transient, degraded, fatal)

Only FATAL errors escape to the host. Everything else is converted to a
rejection or a failed send result at the boundary where it occurs.
"""

from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Any


class ErrorSeverity(Enum):
    """How serious is this error?"""

    TRANSIENT = auto()
    """Dropped datagram or failed send, the next cycle is unaffected."""

    DEGRADED = auto()
    """The node keeps running with reduced reach (e.g. a failed multicast join)."""

    FATAL = auto()
    """The node cannot run."""


class ErrorCategory(Enum):
    """What kind of error is this?"""

    NETWORK = auto()
    """Bind, send and socket option failures."""

    PROTOCOL = auto()
    """Malformed or oversized messages."""

    CONFIGURATION = auto()
    """Settings that cannot describe a runnable node."""

    INTERNAL = auto()
    """Bugs and unexpected exceptions."""


@dataclass
class ConsensusError(Exception):
    """
    Base exception for convergence engine errors.

    All errors carry:
    - message: Human-readable description
    - category: What kind of error
    - severity: How serious
    - context: Additional debugging info
    - cause: Original exception if wrapping
    """

    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    context: dict[str, Any] = field(default_factory=dict)
    cause: BaseException | None = None

    def __str__(self) -> str:
        ctx = f" {self.context}" if self.context else ""
        cause = ""
        if self.cause:
            cause_str = str(self.cause)
            cause_type = type(self.cause).__name__
            if cause_str:
                cause = f" (caused by {cause_type}: {cause_str})"
            else:
                cause = f" (caused by {cause_type})"
        return f"[{self.category.name}/{self.severity.name}] {self.message}{ctx}{cause}"

    def __hash__(self) -> int:
        return id(self)

    @property
    def is_fatal(self) -> bool:
        return self.severity == ErrorSeverity.FATAL

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'category': self.category.name,
            'severity': self.severity.name,
            'context': self.context,
            'cause': str(self.cause) if self.cause else None,
        }


# =============================================================================
# Configuration Errors - always fatal
# =============================================================================

class ConfigurationError(ConsensusError):
    """Settings rejected at startup."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        **context: Any,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.FATAL,
            context=context,
            cause=cause,
        )


# =============================================================================
# Network Errors
# =============================================================================

class NetworkError(ConsensusError):
    """Socket level failures."""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.TRANSIENT,
        cause: BaseException | None = None,
        **context: Any,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=severity,
            context=context,
            cause=cause,
        )


class NoAvailablePortError(NetworkError):
    """Every configured port failed to bind."""

    def __init__(
        self,
        ports: tuple[int, ...],
        cause: BaseException | None = None,
    ):
        super().__init__(
            message="no available ports to listen to advertisements",
            severity=ErrorSeverity.FATAL,
            cause=cause,
            ports=list(ports),
        )


class SendError(NetworkError):
    """A datagram could not be handed to the transport."""

    def __init__(
        self,
        address: str,
        port: int,
        cause: BaseException | None = None,
    ):
        super().__init__(
            message=f"Send to {address}:{port} failed",
            cause=cause,
            address=address,
            port=port,
        )


# =============================================================================
# Protocol Errors
# =============================================================================

class ProtocolError(ConsensusError):
    """Messages that cannot be handled."""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.TRANSIENT,
        cause: BaseException | None = None,
        **context: Any,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.PROTOCOL,
            severity=severity,
            context=context,
            cause=cause,
        )


class MalformedMessageError(ProtocolError):
    """Received datagram could not be decoded."""

    def __init__(
        self,
        raw_data: bytes,
        reason: str,
        cause: BaseException | None = None,
    ):
        preview = raw_data[:100].hex()
        super().__init__(
            message=f"Malformed message: {reason}",
            cause=cause,
            raw_preview=preview,
            raw_length=len(raw_data),
        )


class MessageTooLargeError(ProtocolError):
    """Encoded message does not fit in one datagram."""

    def __init__(self, size: int, max_size: int):
        super().__init__(
            message=f"Encoded message is {size} bytes, limit is {max_size}",
            size=size,
            max_size=max_size,
        )
