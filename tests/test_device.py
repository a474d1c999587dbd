"""
Device Unit Tests

디바이스 세션 테스트:
- 패킷 번호 증가/순환
- 명령별 요청 프레임과 결과 파싱
- 로컬 인자 검증 (전송 없이 실패)
- 전송/프레임 오류의 결과 정규화
"""

import asyncio
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(__file__))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from linx_remote.device import Device
from linx_remote.connection import ConnectionHandler
from linx_remote.protocol import (
    Command, EofConfig, build_response_frame, bytes_to_number
)
from linx_remote.exceptions import (
    InvalidChecksumError, InvalidSyncError, TransportError, CommandArgumentError
)
import httpx

from linx_remote.http_transport import HttpTransport
from mock_transport import MockTransport, failing_transport


def make_device(transport: MockTransport) -> Device:
    return Device('http://mock', ConnectionHandler(transport))


def sent_sequence(frame: bytes) -> int:
    return bytes_to_number(frame[2:4])


def sent_command(frame: bytes) -> int:
    return bytes_to_number(frame[4:6])


class TestSequence:
    """패킷 번호 테스트"""

    @pytest.mark.asyncio
    async def test_sequence_starts_at_zero_and_increments(self, mock_transport):
        device = make_device(mock_transport)

        for _ in range(5):
            await device.sync()

        assert [sent_sequence(f) for f in mock_transport.binary_requests] == [0, 1, 2, 3, 4]
        assert device.sequence == 5

    @pytest.mark.asyncio
    async def test_sequence_wraps(self, mock_transport):
        device = make_device(mock_transport)
        device._sequence = 0xFFFF

        await device.sync()
        await device.sync()

        assert [sent_sequence(f) for f in mock_transport.binary_requests] == [0xFFFF, 0]

    @pytest.mark.asyncio
    async def test_rejected_command_does_not_consume_sequence(self, mock_transport):
        device = make_device(mock_transport)

        await device.spi_set_mode(0, 4)
        await device.sync()

        assert sent_sequence(mock_transport.binary_requests[0]) == 0

    @pytest.mark.asyncio
    async def test_failed_exchange_consumes_sequence(self):
        transport = failing_transport()
        device = make_device(transport)

        await device.sync()
        await device.sync()

        assert [sent_sequence(f) for f in transport.binary_requests] == [0, 1]

    @pytest.mark.asyncio
    async def test_concurrent_calls_are_serialized(self, mock_transport):
        """동시 호출도 요청 순서대로 번호 부여, 응답이 섞이지 않음"""
        device = make_device(mock_transport)

        results = await asyncio.gather(*(device.get_device_id() for _ in range(10)))

        assert all(r.ok for r in results)
        assert sorted(sent_sequence(f) for f in mock_transport.binary_requests) == list(range(10))


class TestDeviceCommands:
    """Device 그룹 명령 테스트"""

    @pytest.mark.asyncio
    async def test_sync(self, mock_transport):
        device = make_device(mock_transport)
        result = await device.sync()

        assert result.ok
        assert result.message == 'ok'
        assert mock_transport.binary_requests[0] == bytes([0xFF, 7, 0, 0, 0, 0, 6])

    @pytest.mark.asyncio
    async def test_requests_go_to_root_endpoint(self, mock_transport):
        device = make_device(mock_transport)
        await device.sync()

        address, endpoint, _, _ = mock_transport.requests[0]
        assert address == 'http://mock'
        assert endpoint == '/'

    @pytest.mark.asyncio
    async def test_get_device_id(self, mock_transport):
        result = await make_device(mock_transport).get_device_id()

        assert result.device_family == 0x02
        assert result.device_id == 0x07

    @pytest.mark.asyncio
    async def test_get_linx_api_version(self, mock_transport):
        result = await make_device(mock_transport).get_linx_api_version()

        assert (result.major, result.minor, result.subminor, result.build) == (3, 0, 1, 12)
        assert result.version == '3.0.1.12'

    @pytest.mark.asyncio
    async def test_get_max_baud_rate(self, mock_transport):
        result = await make_device(mock_transport).get_max_baud_rate()
        assert result.baud_rate == 115200

    @pytest.mark.asyncio
    async def test_set_baud_rate(self, mock_transport):
        # offset 4부터 읽으므로 상태 바이트가 값의 최상위 바이트
        mock_transport.set_binary_handler(
            lambda req: build_response_frame(0, 0x00, bytes([0x01, 0xC2, 0x00, 0x00]))
        )
        device = make_device(mock_transport)

        result = await device.set_baud_rate(115200)

        assert result.actual_baud == 115200
        assert mock_transport.binary_requests[0][6:10] == bytes([0x00, 0x01, 0xC2, 0x00])

    @pytest.mark.asyncio
    async def test_device_user_id(self, mock_transport):
        device = make_device(mock_transport)

        assert (await device.set_device_user_id(0x1234)).ok
        assert mock_transport.binary_requests[0][6:8] == bytes([0x12, 0x34])

        result = await device.get_device_user_id()
        assert result.user_id == 0x1234

    @pytest.mark.asyncio
    async def test_get_device_name(self, mock_transport):
        result = await make_device(mock_transport).get_device_name()
        assert result.device_name == 'LINX Board'


class TestPeripheralCommands:
    """Digital / Analog / Servo / SPI / I2C / PWM / UART 테스트"""

    @pytest.mark.asyncio
    async def test_digital_write(self, mock_transport):
        device = make_device(mock_transport)
        result = await device.digital_write(13, True)

        frame = mock_transport.binary_requests[0]
        assert result.ok
        assert sent_command(frame) == Command.DIGITAL_WRITE
        assert frame[6:9] == bytes([1, 13, 1])

    @pytest.mark.asyncio
    async def test_digital_read_advanced(self, mock_transport):
        mock_transport.set_payload(Command.DIGITAL_READ, bytes([1, 0, 1]))
        device = make_device(mock_transport)

        result = await device.digital_read_advanced([2, 3, 4])

        assert result.values == [1, 0, 1]
        assert mock_transport.binary_requests[0][6:9] == bytes([2, 3, 4])

    @pytest.mark.asyncio
    async def test_digital_read(self, mock_transport):
        mock_transport.set_payload(Command.DIGITAL_READ, bytes([1]))
        result = await make_device(mock_transport).digital_read(3)
        assert result.value == 1

    @pytest.mark.asyncio
    async def test_analog_read(self, mock_transport):
        mock_transport.set_payload(Command.ANALOG_READ, bytes([200, 17]))
        device = make_device(mock_transport)

        single = await device.analog_read(0)
        multi = await device.analog_read_advanced([0, 1])

        assert single.value == 200
        assert multi.values == [200, 17]

    @pytest.mark.asyncio
    async def test_analog_write(self, mock_transport):
        device = make_device(mock_transport)
        await device.analog_write(5, 128)

        assert mock_transport.binary_requests[0][4:9] == bytes([0, 101, 1, 5, 128])

    @pytest.mark.asyncio
    async def test_square_wave(self, mock_transport):
        device = make_device(mock_transport)
        await device.digital_write_square_wave(2, 1000)

        frame = mock_transport.binary_requests[0]
        assert frame[1] == 16
        assert frame[6:15] == bytes([2, 0, 0, 0x03, 0xE8, 0, 0, 0, 0])

    @pytest.mark.asyncio
    async def test_servo(self, mock_transport):
        device = make_device(mock_transport)

        channels = await device.servo_get_channels()
        assert channels.channels == [3, 5, 6, 9]

        assert (await device.servo_open([3, 5])).ok
        assert (await device.servo_set_pulse_width(3, 1500)).ok
        assert (await device.servo_close([3, 5])).ok

        codes = [sent_command(f) for f in mock_transport.binary_requests]
        assert codes == [8, 320, 321, 322]
        assert mock_transport.binary_requests[2][6:10] == bytes([1, 3, 0x05, 0xDC])

    @pytest.mark.asyncio
    async def test_spi(self, mock_transport):
        mock_transport.set_payload(Command.SPI_SET_CLOCK_FREQUENCY, (4000000).to_bytes(4, 'big'))
        device = make_device(mock_transport)

        assert (await device.spi_open(0)).ok
        assert (await device.spi_set_bit_order(0, 'msbFirst')).ok
        freq = await device.spi_set_clock_frequency(0, 4000000)
        assert (await device.spi_set_mode(0, 3)).ok

        assert freq.actual_frequency == 4000000
        codes = [sent_command(f) for f in mock_transport.binary_requests]
        assert codes == [256, 257, 258, 259]

    @pytest.mark.asyncio
    async def test_spi_write_read(self, mock_transport):
        mock_transport.set_payload(Command.SPI_WRITE_READ, bytes([0x11, 0x22]))
        device = make_device(mock_transport)

        result = await device.spi_write_read(0, 10, 'activeLow', [0xAA, 0xBB])

        assert result.data == [0x11, 0x22]
        assert mock_transport.binary_requests[0][6:12] == bytes([0, 2, 10, 0, 0xAA, 0xBB])

    @pytest.mark.asyncio
    async def test_i2c(self, mock_transport):
        mock_transport.set_payload(Command.I2C_READ, bytes([0x0C, 0x80]))
        mock_transport.set_payload(Command.I2C_SET_SPEED, (400000).to_bytes(4, 'big'))
        device = make_device(mock_transport)

        assert (await device.i2c_open(1)).ok
        speed = await device.i2c_set_speed(1, 400000)
        write = await device.i2c_write(1, 0x48, EofConfig.DEFAULT, [0x00])
        read = await device.i2c_read(1, 0x48, 2, 100, EofConfig.RESTART)
        assert (await device.i2c_close(1)).ok

        assert speed.actual_frequency == 400000
        assert write.ok
        assert read.data == [0x0C, 0x80]
        codes = [sent_command(f) for f in mock_transport.binary_requests]
        assert codes == [224, 225, 226, 227, 228]

    @pytest.mark.asyncio
    async def test_pwm(self, mock_transport):
        device = make_device(mock_transport)

        assert (await device.pwm_set_duty_cycle(3, 127)).ok
        assert (await device.pwm_set_frequency_advanced([3, 5], [500, 1000])).ok

        duty, freq = mock_transport.binary_requests
        assert duty[6:9] == bytes([1, 3, 127])
        assert freq[1] == 7 + 11
        assert freq[6:17] == bytes([2, 3, 5, 0, 0, 0x01, 0xF4, 0, 0, 0x03, 0xE8])

    @pytest.mark.asyncio
    async def test_uart(self, mock_transport):
        mock_transport.set_payload(Command.UART_OPEN, (9600).to_bytes(4, 'big'))
        mock_transport.set_payload(Command.UART_GET_BYTES_AVAILABLE, bytes([3]))
        mock_transport.set_payload(Command.UART_READ, b'abc')
        device = make_device(mock_transport)

        opened = await device.uart_open(0, 9600)
        changed = await device.uart_set_baud_rate(0, 9600)
        available = await device.uart_get_bytes_available(0)
        read = await device.uart_read(0, available.num_bytes)
        assert (await device.uart_write(0, [0x68, 0x69])).ok
        assert (await device.uart_close(0)).ok

        assert opened.actual_baud == 9600
        assert changed.actual_baud == 9600
        assert read.data == [0x61, 0x62, 0x63]
        codes = [sent_command(f) for f in mock_transport.binary_requests]
        assert codes == [192, 192, 194, 195, 196, 197]


class TestLocalRejection:
    """전송 없이 실패해야 하는 명령"""

    @pytest.mark.asyncio
    async def test_digital_write_length_mismatch(self, mock_transport):
        result = await make_device(mock_transport).digital_write_advanced([1, 2], [True])

        assert result.status_code == 1
        assert isinstance(result.error, CommandArgumentError)
        assert mock_transport.requests == []

    @pytest.mark.asyncio
    async def test_spi_mode_out_of_range(self, mock_transport):
        result = await make_device(mock_transport).spi_set_mode(0, 4)

        assert result.status_code == 1
        assert 'SPI Mode Must Be Between 0 and 3' in result.message
        assert mock_transport.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize('method, args', [
        ('analog_write_advanced', ([1], [1, 2])),
        ('servo_set_pulse_width_advanced', ([1, 2], [1500])),
        ('pwm_set_duty_cycle_advanced', ([1], [])),
        ('pwm_set_frequency_advanced', ([1, 2], [100])),
    ])
    async def test_other_mismatches(self, mock_transport, method, args):
        result = await getattr(make_device(mock_transport), method)(*args)

        assert not result.ok
        assert mock_transport.requests == []

    @pytest.mark.asyncio
    async def test_oversized_payload_is_fatal(self, mock_transport):
        with pytest.raises(ValueError):
            await make_device(mock_transport).uart_write(0, [0] * 300)


class TestFailureNormalization:
    """전송/프레임 오류 -> status_code 1 결과"""

    @pytest.mark.asyncio
    async def test_transport_error(self):
        result = await make_device(failing_transport('HTTP Timeout')).get_device_id()

        assert result.status_code == 1
        assert result.message == 'HTTP Timeout'
        assert isinstance(result.error, TransportError)
        assert result.device_family is None
        assert result.device_id is None

    @pytest.mark.asyncio
    async def test_invalid_checksum(self, mock_transport):
        raw = bytearray(build_response_frame(0, 0, bytes([1, 2])))
        raw[-1] ^= 0x01
        mock_transport.set_raw_response(bytes(raw))

        result = await make_device(mock_transport).get_device_id()

        assert isinstance(result.error, InvalidChecksumError)
        assert result.device_id is None

    @pytest.mark.asyncio
    async def test_invalid_sync(self, mock_transport):
        mock_transport.set_raw_response(b'')
        result = await make_device(mock_transport).sync()
        assert isinstance(result.error, InvalidSyncError)

    @pytest.mark.asyncio
    async def test_short_payload(self, mock_transport):
        mock_transport.set_raw_response(build_response_frame(0, 0, b''))
        result = await make_device(mock_transport).get_max_baud_rate()

        assert not result.ok
        assert result.baud_rate is None

    @pytest.mark.asyncio
    async def test_no_retry(self):
        transport = failing_transport()
        await make_device(transport).sync()
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_invalid_url_returns_failure(self):
        """잘못된 주소는 예외 대신 실패 결과"""
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        device = Device('http://[::1', ConnectionHandler(HttpTransport(client=client)))

        result = await device.sync()

        assert not result.ok
        assert result.status_code == 1
        assert isinstance(result.error, TransportError)
        await client.aclose()


class TestDeviceLifecycle:
    """close / context manager 테스트"""

    @pytest.mark.asyncio
    async def test_owned_connection_closed(self, mock_transport):
        async with make_device(mock_transport) as device:
            await device.sync()
        assert mock_transport.closed

    @pytest.mark.asyncio
    async def test_shared_connection_left_open(self, mock_transport):
        device = Device('http://mock', ConnectionHandler(mock_transport), owns_connection=False)

        async with device:
            await device.sync()

        assert not mock_transport.closed
