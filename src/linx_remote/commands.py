"""
LINX Command Table

명령별 파라미터 인코더 / 응답 디코더 정의
- 인코더: 인자 -> 파라미터 바이트열 (로컬 검증 실패 시 CommandArgumentError)
- 디코더: ResponseFrame -> 결과 필드 dict (페이로드 부족 시 ResponseError)

대부분의 응답 데이터는 offset 5부터 시작 (offset 4 = 상태 바이트)
예외: Device SET_BAUD_RATE는 offset 4부터 읽음 (기존 펌웨어와 동일하게 유지)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, Optional, Sequence, Type, Union

from .protocol import (
    Command, BitOrder, CsLogicLevel, EofConfig, ResponseFrame,
    PAYLOAD_OFFSET, number_to_bytes
)
from .results import (
    CommandResult, DeviceIdResult, ApiVersionResult, BaudRateResult,
    ActualBaudResult, UserIdResult, DeviceNameResult, ValueResult,
    ValuesResult, ChannelsResult, FrequencyResult, DataResult,
    BytesAvailableResult
)
from .exceptions import CommandArgumentError


SPI_MODE_MIN = 0
SPI_MODE_MAX = 3
I2C_ADDRESS_MASK = 0x7F


@dataclass(frozen=True)
class CommandDescriptor:
    """명령 하나의 코드, 인코더, 디코더, 결과 타입"""
    name: str
    code: int
    encode: Callable[..., bytes]
    decode: Callable[[ResponseFrame], Dict[str, Any]]
    result_type: Type[CommandResult] = CommandResult


# ---------------------------------------------------------------------------
# Parameter helpers
# ---------------------------------------------------------------------------

def _byte_list(values: Sequence[int]) -> bytes:
    return bytes(int(v) & 0xFF for v in values)


def _require_same_length(
    first: Sequence[Any], second: Sequence[Any],
    first_name: str, second_name: str
) -> None:
    if len(first) != len(second):
        raise CommandArgumentError(
            f"Invalid write: {len(first)} {first_name} but {len(second)} {second_name}"
        )


def _count_byte(num_items: Optional[int], items: Sequence[Any]) -> int:
    return (len(items) if num_items is None else num_items) & 0xFF


def to_enum(enum_cls: Type[IntEnum], value: Union[IntEnum, int, str], what: str) -> IntEnum:
    """
    enum 멤버, 정수 값, 또는 이름 문자열을 enum으로 변환

    이름 비교 시 대소문자와 '_'는 무시 ('msbFirst', 'MSB_FIRST' 모두 허용)

    Raises:
        CommandArgumentError: 해당하는 멤버가 없을 때
    """
    if isinstance(value, enum_cls):
        return value

    if isinstance(value, str):
        key = value.replace('_', '').lower()
        for member in enum_cls:
            if member.name.replace('_', '').lower() == key:
                return member
    else:
        try:
            return enum_cls(value)
        except ValueError:
            pass

    choices = ', '.join(f"{m.name}={m.value}" for m in enum_cls)
    raise CommandArgumentError(f"Invalid {what}: {value!r} (expected one of {choices})")


# ---------------------------------------------------------------------------
# Encoders
# ---------------------------------------------------------------------------

def encode_none() -> bytes:
    return b''


def encode_u32(value: int) -> bytes:
    return number_to_bytes(value, 4)


def encode_user_id(user_id: int) -> bytes:
    return number_to_bytes(user_id, 2)


def encode_pin(pin: int) -> bytes:
    return _byte_list([pin])


def encode_pins(pins: Sequence[int]) -> bytes:
    return _byte_list(pins)


def encode_channel(channel: int) -> bytes:
    return _byte_list([channel])


def encode_channel_u32(channel: int, value: int) -> bytes:
    """channel + 4바이트 값 (SPI 클럭, I2C 속도, UART 보레이트)"""
    return _byte_list([channel]) + number_to_bytes(value, 4)


def encode_channel_data(channel: int, data: Sequence[int]) -> bytes:
    return _byte_list([channel]) + _byte_list(data)


def encode_digital_write(
    pins: Sequence[int], values: Sequence[Any], num_pins: Optional[int] = None
) -> bytes:
    """count + pins[] + values[] (값은 참이면 1, 아니면 0)"""
    _require_same_length(pins, values, 'pins', 'values')
    return (
        bytes([_count_byte(num_pins, pins)])
        + _byte_list(pins)
        + bytes(1 if v else 0 for v in values)
    )


def encode_pin_values(
    pins: Sequence[int], values: Sequence[int], num_pins: Optional[int] = None
) -> bytes:
    """count + pins[] + values[] (값은 1바이트, analog write / PWM duty cycle)"""
    _require_same_length(pins, values, 'pins', 'values')
    return bytes([_count_byte(num_pins, pins)]) + _byte_list(pins) + _byte_list(values)


def encode_square_wave(channel: int, frequency: int, duration: Optional[int] = None) -> bytes:
    """channel + frequency(4B) + duration(4B, 생략 시 0)"""
    typed_duration = b'\x00' * 4 if duration is None else number_to_bytes(duration, 4)
    return _byte_list([channel]) + number_to_bytes(frequency, 4) + typed_duration


def encode_servo_pulse_width(
    channels: Sequence[int], values: Sequence[int], num_channels: Optional[int] = None
) -> bytes:
    """count + channels[] + values[] (값마다 2바이트 big-endian)"""
    _require_same_length(channels, values, 'channels', 'values')
    widths = b''.join(number_to_bytes(v, 2) for v in values)
    return bytes([_count_byte(num_channels, channels)]) + _byte_list(channels) + widths


def encode_pwm_frequency(
    pins: Sequence[int], frequencies: Sequence[int], num_pins: Optional[int] = None
) -> bytes:
    """count + pins[] + frequencies[] (핀마다 4바이트 big-endian)"""
    _require_same_length(pins, frequencies, 'pins', 'frequencies')
    typed_frequencies = b''.join(number_to_bytes(f, 4) for f in frequencies)
    return bytes([_count_byte(num_pins, pins)]) + _byte_list(pins) + typed_frequencies


def encode_spi_bit_order(channel: int, bit_order: Union[BitOrder, int, str]) -> bytes:
    order = to_enum(BitOrder, bit_order, 'SPI bit order')
    return _byte_list([channel, order])


def encode_spi_mode(channel: int, mode: int) -> bytes:
    if not SPI_MODE_MIN <= mode <= SPI_MODE_MAX:
        raise CommandArgumentError(
            f"SPI Mode Must Be Between {SPI_MODE_MIN} and {SPI_MODE_MAX} (got {mode})"
        )
    return _byte_list([channel, mode])


def encode_spi_write_read(
    channel: int, frame_size: int, cs_pin: int,
    cs_logic_level: Union[CsLogicLevel, int, str], data: Sequence[int]
) -> bytes:
    """channel + frame_size + cs_pin + cs_level + data[]"""
    level = to_enum(CsLogicLevel, cs_logic_level, 'CS logic level')
    return _byte_list([channel, frame_size, cs_pin, level]) + _byte_list(data)


def encode_i2c_read(
    channel: int, slave_address: int, num_bytes: int, timeout: int,
    eof_config: Union[EofConfig, int, str] = EofConfig.DEFAULT
) -> bytes:
    """channel + addr(7-bit) + num_bytes + timeout(2B) + eof_config"""
    eof = to_enum(EofConfig, eof_config, 'I2C EOF config')
    return (
        _byte_list([channel, slave_address & I2C_ADDRESS_MASK, num_bytes])
        + number_to_bytes(timeout, 2)
        + bytes([eof])
    )


def encode_i2c_write(
    channel: int, slave_address: int,
    eof_config: Union[EofConfig, int, str], data: Sequence[int]
) -> bytes:
    """channel + addr(7-bit) + eof_config + data[]"""
    eof = to_enum(EofConfig, eof_config, 'I2C EOF config')
    return _byte_list([channel, slave_address & I2C_ADDRESS_MASK, eof]) + _byte_list(data)


def encode_uart_read(channel: int, num_bytes: int) -> bytes:
    return _byte_list([channel, num_bytes])


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def decode_status(frame: ResponseFrame) -> Dict[str, Any]:
    return {}


def decode_device_id(frame: ResponseFrame) -> Dict[str, Any]:
    return {
        'device_family': frame.byte_at(PAYLOAD_OFFSET),
        'device_id': frame.byte_at(PAYLOAD_OFFSET + 1),
    }


def decode_api_version(frame: ResponseFrame) -> Dict[str, Any]:
    return {
        'major': frame.byte_at(PAYLOAD_OFFSET),
        'minor': frame.byte_at(PAYLOAD_OFFSET + 1),
        'subminor': frame.byte_at(PAYLOAD_OFFSET + 2),
        'build': frame.byte_at(PAYLOAD_OFFSET + 3),
    }


def decode_max_baud_rate(frame: ResponseFrame) -> Dict[str, Any]:
    return {'baud_rate': frame.uint_at(PAYLOAD_OFFSET, 4)}


def decode_set_baud_rate(frame: ResponseFrame) -> Dict[str, Any]:
    # 기존 펌웨어 응답 기준: 상태 바이트 위치(offset 4)부터 읽음
    return {'actual_baud': frame.uint_at(PAYLOAD_OFFSET - 1, 4)}


def decode_user_id(frame: ResponseFrame) -> Dict[str, Any]:
    return {'user_id': frame.uint_at(PAYLOAD_OFFSET, 2)}


def decode_device_name(frame: ResponseFrame) -> Dict[str, Any]:
    raw_name = frame.raw[PAYLOAD_OFFSET:len(frame.raw) - 2]
    return {'device_name': raw_name.decode('ascii', errors='replace')}


def decode_value(frame: ResponseFrame) -> Dict[str, Any]:
    return {'value': frame.byte_at(PAYLOAD_OFFSET)}


def decode_values(frame: ResponseFrame) -> Dict[str, Any]:
    return {'values': frame.data_bytes()}


def decode_channels(frame: ResponseFrame) -> Dict[str, Any]:
    return {'channels': frame.data_bytes()}


def decode_data(frame: ResponseFrame) -> Dict[str, Any]:
    return {'data': frame.data_bytes()}


def decode_actual_frequency(frame: ResponseFrame) -> Dict[str, Any]:
    return {'actual_frequency': frame.uint_at(PAYLOAD_OFFSET, 4)}


def decode_actual_baud(frame: ResponseFrame) -> Dict[str, Any]:
    return {'actual_baud': frame.uint_at(PAYLOAD_OFFSET, 4)}


def decode_num_bytes(frame: ResponseFrame) -> Dict[str, Any]:
    return {'num_bytes': frame.byte_at(PAYLOAD_OFFSET)}


# ---------------------------------------------------------------------------
# Command table
# ---------------------------------------------------------------------------

def _descriptor(
    name: str, code: int, encode: Callable[..., bytes],
    decode: Callable[[ResponseFrame], Dict[str, Any]] = decode_status,
    result_type: Type[CommandResult] = CommandResult
) -> CommandDescriptor:
    return CommandDescriptor(name, int(code), encode, decode, result_type)


_TABLE = [
    # Device
    _descriptor('sync', Command.SYNC, encode_none),
    _descriptor('get_device_id', Command.GET_DEVICE_ID, encode_none,
                decode_device_id, DeviceIdResult),
    _descriptor('get_linx_api_version', Command.GET_API_VERSION, encode_none,
                decode_api_version, ApiVersionResult),
    _descriptor('get_max_baud_rate', Command.GET_MAX_BAUD_RATE, encode_none,
                decode_max_baud_rate, BaudRateResult),
    _descriptor('set_baud_rate', Command.SET_BAUD_RATE, encode_u32,
                decode_set_baud_rate, ActualBaudResult),
    _descriptor('set_device_user_id', Command.SET_DEVICE_USER_ID, encode_user_id),
    _descriptor('get_device_user_id', Command.GET_DEVICE_USER_ID, encode_none,
                decode_user_id, UserIdResult),
    _descriptor('get_device_name', Command.GET_DEVICE_NAME, encode_none,
                decode_device_name, DeviceNameResult),

    # Digital
    _descriptor('digital_write_advanced', Command.DIGITAL_WRITE, encode_digital_write),
    _descriptor('digital_read', Command.DIGITAL_READ, encode_pin,
                decode_value, ValueResult),
    _descriptor('digital_read_advanced', Command.DIGITAL_READ, encode_pins,
                decode_values, ValuesResult),
    _descriptor('digital_write_square_wave', Command.DIGITAL_WRITE_SQUARE_WAVE,
                encode_square_wave),

    # Analog
    _descriptor('analog_read', Command.ANALOG_READ, encode_pin,
                decode_value, ValueResult),
    _descriptor('analog_read_advanced', Command.ANALOG_READ, encode_pins,
                decode_values, ValuesResult),
    _descriptor('analog_write_advanced', Command.ANALOG_WRITE, encode_pin_values),

    # Servo
    _descriptor('servo_get_channels', Command.SERVO_GET_CHANNELS, encode_none,
                decode_channels, ChannelsResult),
    _descriptor('servo_open', Command.SERVO_OPEN, encode_pins),
    _descriptor('servo_set_pulse_width_advanced', Command.SERVO_SET_PULSE_WIDTH,
                encode_servo_pulse_width),
    _descriptor('servo_close', Command.SERVO_CLOSE, encode_pins),

    # SPI
    _descriptor('spi_open', Command.SPI_OPEN, encode_channel),
    _descriptor('spi_set_bit_order', Command.SPI_SET_BIT_ORDER, encode_spi_bit_order),
    _descriptor('spi_set_clock_frequency', Command.SPI_SET_CLOCK_FREQUENCY,
                encode_channel_u32, decode_actual_frequency, FrequencyResult),
    _descriptor('spi_set_mode', Command.SPI_SET_MODE, encode_spi_mode),
    _descriptor('spi_write_read_advanced', Command.SPI_WRITE_READ,
                encode_spi_write_read, decode_data, DataResult),

    # I2C
    _descriptor('i2c_open', Command.I2C_OPEN, encode_channel),
    _descriptor('i2c_set_speed', Command.I2C_SET_SPEED, encode_channel_u32,
                decode_actual_frequency, FrequencyResult),
    _descriptor('i2c_read', Command.I2C_READ, encode_i2c_read,
                decode_data, DataResult),
    _descriptor('i2c_write', Command.I2C_WRITE, encode_i2c_write),
    _descriptor('i2c_close', Command.I2C_CLOSE, encode_channel),

    # PWM
    _descriptor('pwm_set_duty_cycle_advanced', Command.PWM_SET_DUTY_CYCLE,
                encode_pin_values),
    _descriptor('pwm_set_frequency_advanced', Command.PWM_SET_FREQUENCY,
                encode_pwm_frequency),

    # UART
    _descriptor('uart_open', Command.UART_OPEN, encode_channel_u32,
                decode_actual_baud, ActualBaudResult),
    _descriptor('uart_set_baud_rate', Command.UART_SET_BAUD_RATE, encode_channel_u32,
                decode_actual_baud, ActualBaudResult),
    _descriptor('uart_get_bytes_available', Command.UART_GET_BYTES_AVAILABLE,
                encode_channel, decode_num_bytes, BytesAvailableResult),
    _descriptor('uart_read', Command.UART_READ, encode_uart_read,
                decode_data, DataResult),
    _descriptor('uart_write', Command.UART_WRITE, encode_channel_data),
    _descriptor('uart_close', Command.UART_CLOSE, encode_channel),
]

COMMANDS: Dict[str, CommandDescriptor] = {d.name: d for d in _TABLE}
