"""
LINX Agent

JSON 제어 채널(/config)로 디바이스를 조회/선택/해제하는 세션 관리자

요청 형식:
    {"agent": [{"command": "<name>", ...}]}
응답 형식:
    {"agent": [{"statusCode": 0, ...}, ...]}

상태 전이:
    IDLE -> DEVICES_ENUMERATED -> DEVICE_ACTIVE -> IDLE (release)
"""

import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from .connection import ConnectionHandler
from .device import Device
from .config import LinxConfig
from .transport import ReturnType
from .exceptions import AgentProtocolError

logger = logging.getLogger(__name__)


AGENT_ENDPOINT = '/config'


class AgentState(Enum):
    """에이전트 세션 상태"""
    IDLE = 'IDLE'
    DEVICES_ENUMERATED = 'DEVICES_ENUMERATED'
    DEVICE_ACTIVE = 'DEVICE_ACTIVE'


def normalize_address(address: str) -> str:
    """스킴이 없으면 'http://' 추가"""
    if address.startswith('http://') or address.startswith('https://'):
        return address
    return 'http://' + address


def build_agent_command(command: str, **fields: Any) -> Dict[str, Any]:
    """에이전트 JSON 명령 envelope 생성"""
    entry: Dict[str, Any] = {'command': command}
    entry.update(fields)
    return {'agent': [entry]}


def validate_agent_response(text: str) -> Dict[str, Any]:
    """
    에이전트 응답 검증

    유효 조건:
    - JSON 파싱 성공
    - 'agent' 필드가 리스트
    - 모든 요소의 statusCode == 0

    Returns:
        파싱된 응답 객체

    Raises:
        AgentProtocolError: 조건 불충족 시 (context에 파싱 객체 또는 예외)
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise AgentProtocolError(f"Invalid JSON from agent: {e}", context=e) from e

    if not isinstance(data, dict) or not isinstance(data.get('agent'), list):
        raise AgentProtocolError("Agent response missing 'agent' array", context=data)

    for entry in data['agent']:
        if not isinstance(entry, dict):
            raise AgentProtocolError("Agent reported a nonzero status code", context=data)
        status = entry.get('statusCode')
        # JSON false는 0으로 취급하지 않음
        if isinstance(status, bool) or status != 0:
            raise AgentProtocolError("Agent reported a nonzero status code", context=data)

    return data


class Agent:
    """
    에이전트 세션

    사용 예:
        async with Agent('192.168.1.10') as agent:
            devices = await agent.enumerate_devices()
            await agent.set_active_device('dev1')
            result = await agent.active_device.get_device_name()
            await agent.release_active_device()
    """

    def __init__(self, agent_address: str, connection: Optional[ConnectionHandler] = None):
        """
        Args:
            agent_address: 에이전트 주소 (스킴 생략 시 http://)
            connection: ConnectionHandler (없으면 HTTP 기본값으로 생성)
        """
        self.agent_address = normalize_address(agent_address)
        self.connection = connection or ConnectionHandler()
        self.devices: List[Device] = []
        self.active_device_index: Optional[int] = None
        self.state = AgentState.IDLE

    @classmethod
    def from_config(cls, config: LinxConfig) -> 'Agent':
        return cls(config.address, ConnectionHandler.from_config(config))

    @property
    def active_device(self) -> Optional[Device]:
        """현재 활성 디바이스 (없으면 None)"""
        if self.active_device_index is None:
            return None
        return self.devices[self.active_device_index]

    async def _send(self, command: Dict[str, Any]) -> Dict[str, Any]:
        """JSON 명령 전송 후 응답 검증"""
        name = command['agent'][0]['command']
        logger.debug(f"Agent command {name} -> {self.agent_address}{AGENT_ENDPOINT}")

        text = await self.connection.write_read(
            self.agent_address, AGENT_ENDPOINT, json.dumps(command), ReturnType.JSON
        )

        try:
            return validate_agent_response(text)
        except AgentProtocolError as e:
            logger.warning(f"Agent command {name} failed: {e}")
            raise

    async def enumerate_devices(self) -> Dict[str, Any]:
        """연결 가능한 디바이스 목록 조회"""
        data = await self._send(build_agent_command('enumerateDevices'))
        if self.state is AgentState.IDLE:
            self.state = AgentState.DEVICES_ENUMERATED
        return data

    async def get_agent_info(self) -> Dict[str, Any]:
        return await self._send(build_agent_command('getInfo'))

    async def get_active_device(self) -> Dict[str, Any]:
        """에이전트 측 활성 디바이스 조회"""
        return await self._send(build_agent_command('getActiveDevice'))

    async def set_active_device(self, device_id: str) -> Dict[str, Any]:
        """
        디바이스 활성화

        성공 시 에이전트 주소에 묶인 Device를 생성해 devices에 추가하고 활성 디바이스로 지정.
        바이너리 채널과 JSON 채널은 같은 주소와 ConnectionHandler를 사용.

        Raises:
            AgentProtocolError: 에이전트가 실패를 보고했을 때 (devices 변화 없음)
            TransportError: 전송 실패 시
        """
        data = await self._send(build_agent_command('setActiveDevice', device=device_id))

        self.devices.append(Device(self.agent_address, self.connection, owns_connection=False))
        self.active_device_index = len(self.devices) - 1
        self.state = AgentState.DEVICE_ACTIVE
        logger.info(f"Device {device_id} active at {self.agent_address} (index {self.active_device_index})")
        return data

    async def release_active_device(self) -> Dict[str, Any]:
        """
        활성 디바이스 해제

        devices 목록은 유지 (추가만 가능), 활성 인덱스만 해제
        """
        data = await self._send(build_agent_command('releaseActiveDevice'))

        if self.active_device_index is not None:
            logger.info(f"Released active device (index {self.active_device_index})")
        self.active_device_index = None
        self.state = AgentState.IDLE
        return data

    async def close(self) -> None:
        await self.connection.close()

    async def __aenter__(self) -> 'Agent':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
