"""
Connection Handler

활성 Transport 1개를 보관하고 교환 요청을 위임
- 프로토콜 지식 없음
- 교환 진행 중에는 Transport 교체 불가
"""

import logging
from typing import Optional

from .transport import GenericTransport, ReturnType, Payload
from .http_transport import HttpTransport
from .serial_transport import SerialTransport
from .config import LinxConfig, TRANSPORT_SERIAL
from .exceptions import ConnectionBusyError

logger = logging.getLogger(__name__)


class ConnectionHandler:
    """
    Transport 선택/교체 및 위임

    사용 예:
        handler = ConnectionHandler()              # 기본값: HTTP
        handler.set_transport(SerialTransport('/dev/ttyACM0'))
        raw = await handler.write_read(address, '/', frame, ReturnType.BINARY)
    """

    def __init__(self, transport: Optional[GenericTransport] = None):
        self._transport: GenericTransport = transport or HttpTransport()
        self._in_flight = 0

    @classmethod
    def from_config(cls, config: LinxConfig) -> 'ConnectionHandler':
        """설정에 맞는 Transport로 생성"""
        if config.transport == TRANSPORT_SERIAL:
            transport: GenericTransport = SerialTransport(
                port=config.serial_port,
                baudrate=config.serial_baudrate,
                timeout=config.timeout
            )
        else:
            transport = HttpTransport(timeout=config.timeout)
        return cls(transport)

    @property
    def transport(self) -> GenericTransport:
        return self._transport

    @property
    def transport_type(self) -> str:
        """활성 Transport 종류 ('http', 'serial', 또는 클래스 이름)"""
        if isinstance(self._transport, HttpTransport):
            return 'http'
        if isinstance(self._transport, SerialTransport):
            return 'serial'
        return type(self._transport).__name__

    @property
    def is_busy(self) -> bool:
        """교환 진행 중 여부"""
        return self._in_flight > 0

    def set_transport(self, transport: GenericTransport) -> None:
        """
        활성 Transport 교체

        Raises:
            ConnectionBusyError: 교환이 진행 중일 때
        """
        if self.is_busy:
            raise ConnectionBusyError(
                f"Cannot replace transport while {self._in_flight} exchange(s) in flight"
            )
        self._transport = transport
        logger.info(f"Transport set to {self.transport_type}")

    def set_http_transport(self, timeout: Optional[float] = None) -> None:
        """HTTP Transport로 교체"""
        if timeout is None:
            self.set_transport(HttpTransport())
        else:
            self.set_transport(HttpTransport(timeout=timeout))

    async def write_read(
        self,
        address: str,
        endpoint: str,
        payload: Payload,
        return_type: ReturnType
    ) -> Payload:
        """활성 Transport로 교환 1회 위임"""
        self._in_flight += 1
        try:
            return await self._transport.write_read(address, endpoint, payload, return_type)
        finally:
            self._in_flight -= 1

    async def close(self) -> None:
        """활성 Transport 리소스 정리"""
        await self._transport.close()
