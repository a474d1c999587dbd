"""
LINX Binary Packet Protocol

요청 프레임 구조:
| 0xFF | Length | Seq (2B) | Command (2B) | Params (0~nB) | Checksum (1B) |

응답 프레임 구조:
| 0xFF | Length | Seq (2B) | Status | Payload (0~nB) | Checksum (1B) |

- Length: 체크섬을 포함한 전체 프레임 길이 (1 byte, 최대 255)
- Seq, Command: big-endian 16-bit
- Checksum: 마지막 바이트를 제외한 모든 바이트의 합 mod 256
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List

from .exceptions import (
    InvalidSyncError, InvalidLengthError, InvalidChecksumError, ResponseError
)


# Protocol constants
SYNC_BYTE = 0xFF
HEADER_SIZE = 6               # SYNC + LEN + SEQ(2) + CMD(2)
MIN_FRAME_SIZE = HEADER_SIZE + 1
MAX_FRAME_SIZE = 0xFF         # 길이 필드가 1바이트
PAYLOAD_OFFSET = 5            # SYNC + LEN + SEQ(2) + STATUS
SEQUENCE_MODULO = 0x10000


class Command(IntEnum):
    """명령 코드 (펌웨어 명령 테이블과 일치해야 함)"""
    # Device
    SYNC = 0
    GET_DEVICE_ID = 3
    GET_API_VERSION = 4
    GET_MAX_BAUD_RATE = 5
    SET_BAUD_RATE = 6
    SERVO_GET_CHANNELS = 8
    SET_DEVICE_USER_ID = 18
    GET_DEVICE_USER_ID = 19
    GET_DEVICE_NAME = 36

    # Digital
    DIGITAL_WRITE = 65
    DIGITAL_READ = 66
    DIGITAL_WRITE_SQUARE_WAVE = 67

    # Analog
    ANALOG_READ = 100
    ANALOG_WRITE = 101

    # PWM
    PWM_SET_FREQUENCY = 130
    PWM_SET_DUTY_CYCLE = 131

    # UART
    UART_OPEN = 192
    UART_SET_BAUD_RATE = 192  # Open과 같은 코드 (펌웨어 확인 전까지 유지)
    UART_GET_BYTES_AVAILABLE = 194
    UART_READ = 195
    UART_WRITE = 196
    UART_CLOSE = 197

    # I2C
    I2C_OPEN = 224
    I2C_SET_SPEED = 225
    I2C_WRITE = 226
    I2C_READ = 227
    I2C_CLOSE = 228

    # SPI
    SPI_OPEN = 256
    SPI_SET_BIT_ORDER = 257
    SPI_SET_CLOCK_FREQUENCY = 258
    SPI_SET_MODE = 259
    SPI_WRITE_READ = 263

    # Servo
    SERVO_OPEN = 320
    SERVO_SET_PULSE_WIDTH = 321
    SERVO_CLOSE = 322


class BitOrder(IntEnum):
    """SPI 비트 순서"""
    LSB_FIRST = 0
    MSB_FIRST = 1


class CsLogicLevel(IntEnum):
    """SPI Chip Select 활성 레벨"""
    ACTIVE_LOW = 0
    ACTIVE_HIGH = 1


class EofConfig(IntEnum):
    """I2C 전송 종료 조건"""
    DEFAULT = 0
    RESTART = 1
    RESTART_NO_STOP = 2
    NO_STOP = 3


def calculate_checksum(frame: bytes) -> int:
    """
    체크섬 계산

    요청 생성과 응답 검증에 동일하게 사용:
    - 마지막 바이트(체크섬 자리) 제외
    - 나머지 바이트 합의 하위 8비트

    Args:
        frame: 체크섬 자리를 포함한 전체 프레임

    Returns:
        체크섬 값 (1 byte)
    """
    return sum(frame[:-1]) & 0xFF


def number_to_bytes(value: int, size: int) -> bytes:
    """
    정수를 big-endian 바이트열로 변환 (바이트별 하위 8비트만 사용)

    Args:
        value: 변환할 정수
        size: 출력 바이트 수

    Returns:
        size 길이의 바이트열
    """
    return bytes((value >> (8 * (size - 1 - i))) & 0xFF for i in range(size))


def bytes_to_number(data: bytes) -> int:
    """big-endian 바이트열을 정수로 변환"""
    value = 0
    for byte in data:
        value = (value << 8) | byte
    return value


def build_request_frame(sequence: int, command: int, params: bytes = b'') -> bytes:
    """
    요청 프레임 생성

    Args:
        sequence: 패킷 번호 (16-bit, 초과분은 절삭)
        command: 명령 코드 (16-bit)
        params: 명령별 파라미터

    Returns:
        완성된 TX 프레임 (체크섬 포함)

    Raises:
        ValueError: 프레임이 255바이트를 초과할 때
    """
    size = MIN_FRAME_SIZE + len(params)
    if size > MAX_FRAME_SIZE:
        raise ValueError(
            f"Frame too large: {size} bytes (max {MAX_FRAME_SIZE}), "
            f"command {int(command)} with {len(params)} parameter bytes"
        )

    frame = bytearray(size)
    frame[0] = SYNC_BYTE
    frame[1] = size
    frame[2:4] = number_to_bytes(sequence, 2)
    frame[4:6] = number_to_bytes(int(command), 2)
    frame[HEADER_SIZE:HEADER_SIZE + len(params)] = params
    frame[-1] = calculate_checksum(frame)

    return bytes(frame)


@dataclass
class ResponseFrame:
    """수신 응답 프레임"""
    raw: bytes

    @property
    def length(self) -> int:
        return self.raw[1]

    @property
    def sequence(self) -> int:
        return bytes_to_number(self.raw[2:4])

    @property
    def status(self) -> int:
        return self.raw[4] if len(self.raw) > PAYLOAD_OFFSET else 0

    @property
    def payload(self) -> bytes:
        """상태 바이트 이후 ~ 체크섬 이전"""
        return self.raw[PAYLOAD_OFFSET:-1]

    def byte_at(self, offset: int) -> int:
        """
        프레임 기준 offset 위치의 1바이트

        Raises:
            ResponseError: 체크섬 이전에 해당 바이트가 없을 때
        """
        return self.uint_at(offset, 1)

    def uint_at(self, offset: int, size: int) -> int:
        """
        프레임 기준 offset부터 size 바이트를 big-endian 정수로 읽기

        Raises:
            ResponseError: 체크섬 이전에 바이트가 부족할 때
        """
        end = offset + size
        if end > len(self.raw) - 1:
            raise ResponseError(
                f"Response too short: need bytes {offset}..{end - 1}, "
                f"frame is {len(self.raw)} bytes"
            )
        return bytes_to_number(self.raw[offset:end])

    def data_bytes(self) -> List[int]:
        """Length - 6 개의 데이터 바이트 (offset 5부터)"""
        count = max(self.length - HEADER_SIZE, 0)
        return list(self.raw[PAYLOAD_OFFSET:PAYLOAD_OFFSET + count])

    @classmethod
    def parse(cls, raw: bytes) -> 'ResponseFrame':
        """
        RX 프레임 검증 및 파싱

        검증 순서 (하나라도 실패하면 해당 교환 종료):
        1. 비어 있지 않고 첫 바이트가 0xFF
        2. 수신 길이 == Length 바이트
        3. 체크섬 일치

        Raises:
            InvalidSyncError, InvalidLengthError, InvalidChecksumError
        """
        raw = bytes(raw)

        if not raw or raw[0] != SYNC_BYTE:
            got = f"0x{raw[0]:02X}" if raw else "empty response"
            raise InvalidSyncError(f"Invalid first byte: expected 0xFF, got {got}")

        if len(raw) < 2 or len(raw) != raw[1]:
            declared = raw[1] if len(raw) >= 2 else None
            raise InvalidLengthError(
                f"Invalid packet size: header says {declared}, received {len(raw)} bytes"
            )

        expected = calculate_checksum(raw)
        if expected != raw[-1]:
            raise InvalidChecksumError(
                f"Invalid checksum: expected 0x{expected:02X}, got 0x{raw[-1]:02X}"
            )

        return cls(raw=raw)


def build_response_frame(sequence: int, status: int = 0, payload: bytes = b'') -> bytes:
    """
    응답 프레임 생성 (시뮬레이터/테스트용)

    Args:
        sequence: 패킷 번호
        status: 상태 바이트
        payload: 상태 이후 데이터

    Returns:
        완성된 응답 프레임 (체크섬 포함)
    """
    size = PAYLOAD_OFFSET + len(payload) + 1
    if size > MAX_FRAME_SIZE:
        raise ValueError(f"Frame too large: {size} bytes (max {MAX_FRAME_SIZE})")

    frame = bytearray(size)
    frame[0] = SYNC_BYTE
    frame[1] = size
    frame[2:4] = number_to_bytes(sequence, 2)
    frame[4] = status & 0xFF
    frame[PAYLOAD_OFFSET:PAYLOAD_OFFSET + len(payload)] = payload
    frame[-1] = calculate_checksum(frame)

    return bytes(frame)
