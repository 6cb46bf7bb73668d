"""
Pytest configuration for batcher tests.
"""

import pytest

from ..observability import RecordingEventSink
from .fakes import EchoCodec, FakeTransport


@pytest.fixture
def codec():
    return EchoCodec()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def sink():
    return RecordingEventSink()
