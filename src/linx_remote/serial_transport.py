"""
Serial Transport

시리얼 포트(USB CDC 등)로 바이너리 프레임을 교환하는 전송 구현
- 프레임 길이는 응답의 두 번째 바이트(Length)로 판단
- 블로킹 I/O는 기본 executor에서 실행
- JSON 제어 채널은 지원하지 않음
"""

import asyncio
import logging
import threading
from typing import List, Optional

import serial
import serial.tools.list_ports

from .transport import GenericTransport, ReturnType, Payload
from .protocol import SYNC_BYTE
from .exceptions import TransportError, TransportTimeoutError

logger = logging.getLogger(__name__)


# Default serial settings (8N1)
DEFAULT_BAUDRATE = 115200
DEFAULT_TIMEOUT = 1.0        # seconds
DEFAULT_WRITE_TIMEOUT = 1.0  # seconds


class SerialTransport(GenericTransport):
    """
    시리얼 전송 구현

    사용 예:
        transport = SerialTransport(port='/dev/ttyACM0')
        frame = await transport.write_read('', '/', request, ReturnType.BINARY)
        await transport.close()

    port를 생략하면 write_read의 address를 포트 이름으로 사용
    """

    def __init__(
        self,
        port: Optional[str] = None,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = DEFAULT_TIMEOUT,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT
    ):
        """
        Args:
            port: 시리얼 포트 이름
                  - Windows: 'COM3', 'COM4', ...
                  - Linux: '/dev/ttyACM0', '/dev/ttyUSB0', ...
            baudrate: 보레이트 (기본값: 115200)
            timeout: 읽기 타임아웃 (초)
            write_timeout: 쓰기 타임아웃 (초)
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.write_timeout = write_timeout

        self._serial: Optional[serial.Serial] = None
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._serial is not None and self._serial.is_open

    def _open(self, port: str) -> None:
        if self.is_connected:
            return

        try:
            self._serial = serial.Serial(
                port=port,
                baudrate=self.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self.timeout,
                write_timeout=self.write_timeout
            )
            logger.info(f"Connected to {port} at {self.baudrate} baud")
        except serial.SerialException as e:
            raise TransportError(f"Failed to connect to {port}: {e}") from e

    def _exchange(self, port: str, frame: bytes) -> bytes:
        """프레임 1개 전송 후 응답 프레임 1개 수신 (블로킹)"""
        with self._lock:
            self._open(port)

            try:
                self._serial.reset_input_buffer()
                self._serial.write(frame)
                self._serial.flush()
                logger.debug(f"TX ({len(frame)} bytes): {frame.hex(' ').upper()}")

                header = self._serial.read(2)
                if not header:
                    raise TransportTimeoutError("No response received (timeout)")

                data = bytearray(header)
                if len(header) == 2 and header[0] == SYNC_BYTE and header[1] > 2:
                    remaining = header[1] - 2
                    data.extend(self._serial.read(remaining))
                    if len(data) < header[1]:
                        logger.warning(
                            f"Partial frame received before timeout: "
                            f"{len(data)}/{header[1]} bytes"
                        )

                logger.debug(f"RX ({len(data)} bytes): {bytes(data).hex(' ').upper()}")
                return bytes(data)

            except serial.SerialTimeoutException as e:
                raise TransportTimeoutError("Write timeout") from e
            except serial.SerialException as e:
                raise TransportError(f"Serial exchange failed: {e}") from e

    async def write_read(
        self,
        address: str,
        endpoint: str,
        payload: Payload,
        return_type: ReturnType
    ) -> Payload:
        if ReturnType(return_type) is not ReturnType.BINARY:
            raise TransportError("Serial transport supports binary exchanges only")

        port = self.port or address
        if not port:
            raise TransportError("No serial port configured")

        frame = payload.encode('latin-1') if isinstance(payload, str) else bytes(payload)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._exchange, port, frame)

    def _close(self) -> None:
        with self._lock:
            if self._serial is not None:
                try:
                    if self._serial.is_open:
                        self._serial.close()
                        logger.info(f"Disconnected from {self._serial.port}")
                except serial.SerialException as e:
                    logger.error(f"Error closing serial port: {e}")
                finally:
                    self._serial = None

    async def close(self) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._close)

    @staticmethod
    def list_ports() -> List[str]:
        """사용 가능한 시리얼 포트 목록"""
        return [port.device for port in serial.tools.list_ports.comports()]
