"""
Shared fixtures for unit and integration tests.
"""

import tempfile
from typing import Generator

import pytest

from consensus_sync.codec import MessageCodec
from consensus_sync.consensus.core import ConsensusConfig
from consensus_sync.consensus.discovery import NetworkInterface
from consensus_sync.logging import LoggingConfig
from consensus_sync.logging.models import Entry, LogLevel

from tests.mocks import FakeTransport, RecordingLogger, make_config


@pytest.fixture
def config() -> ConsensusConfig:
    return make_config()


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def codec() -> MessageCodec:
    return MessageCodec()


@pytest.fixture
def interfaces() -> list[NetworkInterface]:
    return [
        NetworkInterface(name="lo", address="127.0.0.1", broadcast=None),
        NetworkInterface(name="eth0", address="10.0.0.5", broadcast="10.0.0.255"),
    ]


@pytest.fixture
def temp_log_directory() -> Generator[str, None, None]:
    with tempfile.TemporaryDirectory() as temp_directory:
        yield temp_directory


@pytest.fixture
def sample_entry() -> Entry:
    return Entry(
        message="Test log message",
        level=LogLevel.INFO,
    )


@pytest.fixture
def reset_logging_config() -> Generator[None, None, None]:
    """Restore global logging state around tests that change it."""
    LoggingConfig().reset()
    yield
    LoggingConfig().reset()
