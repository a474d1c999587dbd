"""
LINX Remote Client Library

LINX 바이너리 프로토콜 기반 원격 I/O 디바이스 클라이언트
- Digital / Analog / PWM 핀
- Servo, SPI, I2C, UART 주변장치
- JSON 에이전트를 통한 디바이스 조회/선택

사용 예:
    import asyncio
    from linx_remote import Agent

    async def main():
        async with Agent('192.168.1.10') as agent:
            await agent.enumerate_devices()
            await agent.set_active_device('dev1')

            device = agent.active_device
            await device.digital_write(13, True)
            reading = await device.analog_read(0)
            print(reading.value)

    asyncio.run(main())
"""

__version__ = '1.0.0'

# Core classes
from .agent import Agent, AgentState
from .device import Device
from .connection import ConnectionHandler

# Transports
from .transport import GenericTransport, ReturnType
from .http_transport import HttpTransport
from .serial_transport import SerialTransport

# Protocol
from .protocol import (
    Command, BitOrder, CsLogicLevel, EofConfig, ResponseFrame,
    calculate_checksum, build_request_frame, build_response_frame,
    number_to_bytes, bytes_to_number, SYNC_BYTE
)
from .commands import COMMANDS, CommandDescriptor

# Results
from .results import (
    CommandResult,
    DeviceIdResult,
    ApiVersionResult,
    BaudRateResult,
    ActualBaudResult,
    UserIdResult,
    DeviceNameResult,
    ValueResult,
    ValuesResult,
    ChannelsResult,
    FrequencyResult,
    DataResult,
    BytesAvailableResult,
)

# Config
from .config import LinxConfig, load_config

# Exceptions
from .exceptions import (
    LinxError,
    ProtocolError,
    InvalidSyncError,
    InvalidLengthError,
    InvalidChecksumError,
    ResponseError,
    TransportError,
    TransportTimeoutError,
    ConnectionBusyError,
    CommandArgumentError,
    AgentProtocolError,
    ConfigError,
)

__all__ = [
    # Version
    '__version__',

    # Core
    'Agent',
    'AgentState',
    'Device',
    'ConnectionHandler',

    # Transports
    'GenericTransport',
    'ReturnType',
    'HttpTransport',
    'SerialTransport',

    # Protocol
    'Command',
    'BitOrder',
    'CsLogicLevel',
    'EofConfig',
    'ResponseFrame',
    'calculate_checksum',
    'build_request_frame',
    'build_response_frame',
    'number_to_bytes',
    'bytes_to_number',
    'SYNC_BYTE',
    'COMMANDS',
    'CommandDescriptor',

    # Results
    'CommandResult',
    'DeviceIdResult',
    'ApiVersionResult',
    'BaudRateResult',
    'ActualBaudResult',
    'UserIdResult',
    'DeviceNameResult',
    'ValueResult',
    'ValuesResult',
    'ChannelsResult',
    'FrequencyResult',
    'DataResult',
    'BytesAvailableResult',

    # Config
    'LinxConfig',
    'load_config',

    # Exceptions
    'LinxError',
    'ProtocolError',
    'InvalidSyncError',
    'InvalidLengthError',
    'InvalidChecksumError',
    'ResponseError',
    'TransportError',
    'TransportTimeoutError',
    'ConnectionBusyError',
    'CommandArgumentError',
    'AgentProtocolError',
    'ConfigError',
]
