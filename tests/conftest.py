"""Shared fixtures"""

import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(__file__))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from mock_transport import MockTransport, create_mock_device_transport


@pytest.fixture
def mock_transport() -> MockTransport:
    return create_mock_device_transport()


@pytest.fixture
def empty_transport() -> MockTransport:
    return MockTransport()
