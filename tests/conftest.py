"""Shared pytest fixtures for all tests."""

import logging

import pytest

from cli.config import Config
from common.logging_config import SensitiveDataFilter
from storage.memory_client import InMemoryStorageClient


class RecordingSink:
    """
    Fake write capability that records every requested write size.

    Args:
        short_on_call: 1-based call number that accepts one byte less than requested
        accept: Optional callable (call_number, length) -> accepted bytes
    """

    def __init__(self, short_on_call=None, accept=None):
        self.sizes = []
        self.payloads = []
        self.short_on_call = short_on_call
        self.accept = accept

    def write(self, data):
        self.sizes.append(len(data))
        self.payloads.append(bytes(data))
        call = len(self.sizes)
        if self.accept is not None:
            return self.accept(call, len(data))
        if call == self.short_on_call:
            return len(data) - 1
        return len(data)


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove handlers installed by setup_logging between tests."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)
    for handler in list(root.handlers):
        if any(isinstance(f, SensitiveDataFilter) for f in handler.filters):
            root.removeHandler(handler)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .chunkwrite directory
    """
    config_dir = tmp_path / '.chunkwrite'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def make_sink():
    """Factory for RecordingSink fakes."""
    return RecordingSink


@pytest.fixture
def memory_client():
    """
    In-memory store with volume 'vol1' and bucket 'bucket1'.
    """
    client = InMemoryStorageClient()
    client.create_bucket('vol1', 'bucket1')
    return client
