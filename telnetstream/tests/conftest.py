"""Pytest configuration and fixtures."""
# 3rd party
import pytest

# local
from telnetstream import ByteStreamHandler
from telnetstream.tests.accessories import MockByteStream, RecordingNotifier


@pytest.fixture
def stream():
    """An empty :class:`MockByteStream`."""
    return MockByteStream()


@pytest.fixture
def notifier():
    """A :class:`RecordingNotifier`."""
    return RecordingNotifier()


@pytest.fixture
def handler(stream, notifier):
    """A :class:`ByteStreamHandler` over fixtures ``stream`` and ``notifier``."""
    return ByteStreamHandler(stream, notifier=notifier)
