"""
LINX Device

주소 1개에 묶인 바이너리 프로토콜 세션
- 패킷 번호(sequence) 관리: 0부터 시작, 전송마다 1 증가, 65536에서 순환
- 명령마다 메서드 1개 (COMMANDS 테이블 + Transport 조합)
- 모든 명령은 결과 객체 반환 (실패 시 status_code = 1)

동시성:
    같은 Device에 대한 명령은 asyncio.Lock으로 직렬화됨.
    응답의 패킷 번호는 요청과 대조하지 않음 (프로토콜이 상관관계를 보장하지 않음).
"""

import asyncio
import logging
from typing import Any, Optional, Sequence, Union

from .commands import COMMANDS, CommandDescriptor
from .connection import ConnectionHandler
from .protocol import (
    BitOrder, CsLogicLevel, EofConfig, ResponseFrame,
    build_request_frame, SEQUENCE_MODULO
)
from .transport import ReturnType
from .results import (
    CommandResult, DeviceIdResult, ApiVersionResult, BaudRateResult,
    ActualBaudResult, UserIdResult, DeviceNameResult, ValueResult,
    ValuesResult, ChannelsResult, FrequencyResult, DataResult,
    BytesAvailableResult
)
from .exceptions import CommandArgumentError, ProtocolError, TransportError

logger = logging.getLogger(__name__)


DEVICE_ENDPOINT = '/'


class Device:
    """
    LINX 디바이스 세션

    사용 예:
        device = Device('http://192.168.1.10')
        result = await device.digital_write(13, True)
        if not result.ok:
            print(result.message)

        reading = await device.analog_read(0)
        print(reading.value)
    """

    def __init__(
        self,
        address: str,
        connection: Optional[ConnectionHandler] = None,
        owns_connection: bool = True
    ):
        """
        Args:
            address: 디바이스 주소
            connection: 공유할 ConnectionHandler (없으면 HTTP 기본값으로 생성)
            owns_connection: False면 close()가 connection을 닫지 않음 (Agent 소유 디바이스)
        """
        self.address = address
        self.connection = connection or ConnectionHandler()
        self.owns_connection = owns_connection
        self._sequence = 0
        self._lock = asyncio.Lock()

    @property
    def sequence(self) -> int:
        """다음 요청에 사용할 패킷 번호"""
        return self._sequence

    def _next_sequence(self) -> int:
        sequence = self._sequence
        self._sequence = (self._sequence + 1) % SEQUENCE_MODULO
        return sequence

    async def execute(self, command: Union[str, CommandDescriptor], *args: Any, **kwargs: Any) -> CommandResult:
        """
        명령 실행 공통 경로

        1. 파라미터 인코딩 (로컬 검증 실패 시 전송 없이 실패 결과)
        2. 요청 프레임 생성 및 교환
        3. 응답 프레임 검증 후 명령별 디코딩

        Args:
            command: COMMANDS 키 또는 CommandDescriptor
            *args, **kwargs: 명령별 인자

        Returns:
            명령별 결과 객체

        Raises:
            ValueError: 파라미터가 한 프레임에 들어가지 않을 때
        """
        descriptor = COMMANDS[command] if isinstance(command, str) else command

        try:
            params = descriptor.encode(*args, **kwargs)
        except CommandArgumentError as e:
            logger.warning(f"{descriptor.name} rejected: {e}")
            return descriptor.result_type.failure(e)

        async with self._lock:
            packet = build_request_frame(self._sequence, descriptor.code, params)
            self._next_sequence()
            logger.debug(f"Sending {descriptor.name} ({descriptor.code}): {packet.hex(' ').upper()}")

            try:
                raw = await self.connection.write_read(
                    self.address, DEVICE_ENDPOINT, packet, ReturnType.BINARY
                )
                frame = ResponseFrame.parse(raw)
                fields = descriptor.decode(frame)
            except (TransportError, ProtocolError) as e:
                logger.error(f"{descriptor.name} failed: {e}")
                return descriptor.result_type.failure(e)

        logger.debug(f"Response: {frame.raw.hex(' ').upper()}")
        return descriptor.result_type(**fields)

    # ---------------------------------------------------------------------
    # Device
    # ---------------------------------------------------------------------

    async def sync(self) -> CommandResult:
        """동기화 (명령 0)"""
        return await self.execute('sync')

    async def get_device_id(self) -> DeviceIdResult:
        """디바이스 family / id 조회"""
        return await self.execute('get_device_id')

    async def get_linx_api_version(self) -> ApiVersionResult:
        """펌웨어 LINX API 버전 (major.minor.subminor.build)"""
        return await self.execute('get_linx_api_version')

    async def get_max_baud_rate(self) -> BaudRateResult:
        return await self.execute('get_max_baud_rate')

    async def set_baud_rate(self, baud_rate: int) -> ActualBaudResult:
        """
        디바이스 통신 보레이트 설정

        응답의 actual_baud는 offset 4부터 읽음 (기존 펌웨어 응답 형식)
        """
        return await self.execute('set_baud_rate', baud_rate)

    async def set_device_user_id(self, user_id: int) -> CommandResult:
        return await self.execute('set_device_user_id', user_id)

    async def get_device_user_id(self) -> UserIdResult:
        return await self.execute('get_device_user_id')

    async def get_device_name(self) -> DeviceNameResult:
        return await self.execute('get_device_name')

    # ---------------------------------------------------------------------
    # Digital
    # ---------------------------------------------------------------------

    async def digital_write(self, pin: int, value: Any) -> CommandResult:
        """단일 핀 디지털 출력"""
        return await self.digital_write_advanced([pin], [value])

    async def digital_write_advanced(
        self,
        pins: Sequence[int],
        values: Sequence[Any],
        num_pins: Optional[int] = None
    ) -> CommandResult:
        """
        다중 핀 디지털 출력

        Args:
            pins: 핀 번호 목록
            values: 출력 값 목록 (참이면 HIGH)
            num_pins: 프레임의 count 바이트 (기본값: len(pins))

        pins와 values 길이가 다르면 전송 없이 실패 결과 반환
        """
        return await self.execute('digital_write_advanced', pins, values, num_pins)

    async def digital_read(self, pin: int) -> ValueResult:
        return await self.execute('digital_read', pin)

    async def digital_read_advanced(self, pins: Sequence[int]) -> ValuesResult:
        return await self.execute('digital_read_advanced', pins)

    async def digital_write_square_wave(
        self,
        channel: int,
        frequency: int,
        duration: Optional[int] = None
    ) -> CommandResult:
        """
        구형파 출력

        Args:
            channel: 채널 번호
            frequency: 주파수 (Hz)
            duration: 지속 시간 (ms, None이면 0 = 계속)
        """
        return await self.execute('digital_write_square_wave', channel, frequency, duration)

    # ---------------------------------------------------------------------
    # Analog
    # ---------------------------------------------------------------------

    async def analog_read(self, pin: int) -> ValueResult:
        return await self.execute('analog_read', pin)

    async def analog_read_advanced(self, pins: Sequence[int]) -> ValuesResult:
        return await self.execute('analog_read_advanced', pins)

    async def analog_write(self, pin: int, value: int) -> CommandResult:
        return await self.analog_write_advanced([pin], [value])

    async def analog_write_advanced(
        self,
        pins: Sequence[int],
        values: Sequence[int],
        num_pins: Optional[int] = None
    ) -> CommandResult:
        return await self.execute('analog_write_advanced', pins, values, num_pins)

    # ---------------------------------------------------------------------
    # Servo
    # ---------------------------------------------------------------------

    async def servo_get_channels(self) -> ChannelsResult:
        """사용 가능한 서보 채널 목록"""
        return await self.execute('servo_get_channels')

    async def servo_open(self, channels: Sequence[int]) -> CommandResult:
        return await self.execute('servo_open', channels)

    async def servo_set_pulse_width(self, channel: int, value: int) -> CommandResult:
        return await self.servo_set_pulse_width_advanced([channel], [value])

    async def servo_set_pulse_width_advanced(
        self,
        channels: Sequence[int],
        values: Sequence[int],
        num_channels: Optional[int] = None
    ) -> CommandResult:
        """
        다중 채널 펄스 폭 설정

        Args:
            channels: 채널 번호 목록
            values: 펄스 폭 목록 (각 2바이트 big-endian으로 전송)
            num_channels: 프레임의 count 바이트 (기본값: len(channels))
        """
        return await self.execute('servo_set_pulse_width_advanced', channels, values, num_channels)

    async def servo_close(self, channels: Sequence[int]) -> CommandResult:
        return await self.execute('servo_close', channels)

    # ---------------------------------------------------------------------
    # SPI
    # ---------------------------------------------------------------------

    async def spi_open(self, channel: int) -> CommandResult:
        return await self.execute('spi_open', channel)

    async def spi_set_bit_order(
        self,
        channel: int,
        bit_order: Union[BitOrder, int, str]
    ) -> CommandResult:
        """bit_order: BitOrder, 0/1, 또는 'lsbFirst' / 'msbFirst'"""
        return await self.execute('spi_set_bit_order', channel, bit_order)

    async def spi_set_clock_frequency(self, channel: int, target_frequency: int) -> FrequencyResult:
        return await self.execute('spi_set_clock_frequency', channel, target_frequency)

    async def spi_set_mode(self, channel: int, mode: int) -> CommandResult:
        """SPI 모드 설정 (0~3 외의 값은 전송 없이 실패)"""
        return await self.execute('spi_set_mode', channel, mode)

    async def spi_write_read(
        self,
        channel: int,
        cs_pin: int,
        cs_logic_level: Union[CsLogicLevel, int, str],
        data: Sequence[int]
    ) -> DataResult:
        """frame_size = len(data)로 spi_write_read_advanced 호출"""
        return await self.spi_write_read_advanced(channel, len(data), cs_pin, cs_logic_level, data)

    async def spi_write_read_advanced(
        self,
        channel: int,
        frame_size: int,
        cs_pin: int,
        cs_logic_level: Union[CsLogicLevel, int, str],
        data: Sequence[int]
    ) -> DataResult:
        return await self.execute(
            'spi_write_read_advanced', channel, frame_size, cs_pin, cs_logic_level, data
        )

    # ---------------------------------------------------------------------
    # I2C
    # ---------------------------------------------------------------------

    async def i2c_open(self, channel: int) -> CommandResult:
        return await self.execute('i2c_open', channel)

    async def i2c_set_speed(self, channel: int, frequency: int) -> FrequencyResult:
        return await self.execute('i2c_set_speed', channel, frequency)

    async def i2c_read(
        self,
        channel: int,
        slave_address: int,
        num_bytes: int,
        timeout: int,
        eof_config: Union[EofConfig, int, str] = EofConfig.DEFAULT
    ) -> DataResult:
        """
        I2C 읽기

        Args:
            channel: I2C 채널
            slave_address: 7-bit 슬레이브 주소 (상위 비트는 버림)
            num_bytes: 읽을 바이트 수
            timeout: 타임아웃 (ms, 2바이트)
            eof_config: 전송 종료 조건 (EofConfig)
        """
        return await self.execute('i2c_read', channel, slave_address, num_bytes, timeout, eof_config)

    async def i2c_write(
        self,
        channel: int,
        slave_address: int,
        eof_config: Union[EofConfig, int, str],
        data: Sequence[int]
    ) -> CommandResult:
        return await self.execute('i2c_write', channel, slave_address, eof_config, data)

    async def i2c_close(self, channel: int) -> CommandResult:
        return await self.execute('i2c_close', channel)

    # ---------------------------------------------------------------------
    # PWM
    # ---------------------------------------------------------------------

    async def pwm_set_duty_cycle(self, pin: int, duty_cycle: int) -> CommandResult:
        return await self.pwm_set_duty_cycle_advanced([pin], [duty_cycle])

    async def pwm_set_duty_cycle_advanced(
        self,
        pins: Sequence[int],
        duty_cycles: Sequence[int],
        num_pins: Optional[int] = None
    ) -> CommandResult:
        return await self.execute('pwm_set_duty_cycle_advanced', pins, duty_cycles, num_pins)

    async def pwm_set_frequency_advanced(
        self,
        pins: Sequence[int],
        frequencies: Sequence[int],
        num_pins: Optional[int] = None
    ) -> CommandResult:
        """핀마다 4바이트 주파수 설정"""
        return await self.execute('pwm_set_frequency_advanced', pins, frequencies, num_pins)

    # ---------------------------------------------------------------------
    # UART
    # ---------------------------------------------------------------------

    async def uart_open(self, channel: int, baud: int) -> ActualBaudResult:
        return await self.execute('uart_open', channel, baud)

    async def uart_set_baud_rate(self, channel: int, baud: int) -> ActualBaudResult:
        """UART 보레이트 변경 (펌웨어 명령 코드는 uart_open과 동일한 192)"""
        return await self.execute('uart_set_baud_rate', channel, baud)

    async def uart_get_bytes_available(self, channel: int) -> BytesAvailableResult:
        return await self.execute('uart_get_bytes_available', channel)

    async def uart_read(self, channel: int, num_bytes: int) -> DataResult:
        return await self.execute('uart_read', channel, num_bytes)

    async def uart_write(self, channel: int, data: Sequence[int]) -> CommandResult:
        return await self.execute('uart_write', channel, data)

    async def uart_close(self, channel: int) -> CommandResult:
        return await self.execute('uart_close', channel)

    async def close(self) -> None:
        """
        Transport 리소스 정리

        owns_connection이 False면 아무것도 하지 않음 (공유 connection은 소유자가 닫음)
        """
        if self.owns_connection:
            await self.connection.close()

    async def __aenter__(self) -> 'Device':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"Device(address={self.address!r}, sequence={self._sequence})"
