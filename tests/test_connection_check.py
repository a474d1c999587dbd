"""
Connection Check Script Tests
"""

import pytest
import sys
import os
from unittest.mock import AsyncMock, MagicMock

sys.path.insert(0, os.path.dirname(__file__))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from linx_remote.device import Device
from linx_remote.connection import ConnectionHandler
from linx_remote.scripts.connection_check import check_device
from mock_transport import failing_transport


class TestCheckDevice:
    """check_device 테스트"""

    @pytest.mark.asyncio
    async def test_all_checks_pass(self, mock_transport):
        device = Device('http://mock', ConnectionHandler(mock_transport))

        assert await check_device(device) is True
        assert len(mock_transport.binary_requests) == 5

    @pytest.mark.asyncio
    async def test_failure_reported(self):
        device = Device('http://mock', ConnectionHandler(failing_transport('TX Error')))
        assert await check_device(device) is False

    @pytest.mark.asyncio
    async def test_commands_called_one_at_a_time(self):
        """앞 명령이 예외를 던지면 뒤 명령은 호출되지 않음"""
        device = MagicMock()
        device.sync = AsyncMock(side_effect=RuntimeError('boom'))
        device.get_device_id = AsyncMock()

        with pytest.raises(RuntimeError):
            await check_device(device)

        device.sync.assert_awaited_once()
        device.get_device_id.assert_not_called()
