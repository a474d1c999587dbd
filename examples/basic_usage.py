"""
LINX Remote Basic Usage Example

LINX 원격 디바이스 라이브러리 기본 사용 예제
"""

import sys
import asyncio
import logging

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def example_with_agent(address: str, device_id: str):
    """
    Agent를 통한 예제 (권장)

    에이전트가 디바이스를 찾아 활성화하고, 같은 주소로 바이너리 명령을 전송합니다.
    """
    from linx_remote import Agent, AgentProtocolError

    print(f"\n{'='*50}")
    print("LINX Agent Example")
    print(f"Agent: {address}")
    print(f"{'='*50}\n")

    async with Agent(address) as agent:
        devices = await agent.enumerate_devices()
        print(f"[Devices] {devices['agent']}")

        try:
            await agent.set_active_device(device_id)
        except AgentProtocolError as e:
            print(f"Failed to activate {device_id}: {e} ({e.context})")
            return

        device = agent.active_device

        # ===== 디바이스 정보 =====
        print("\n[Device Info]")
        version = await device.get_linx_api_version()
        print(f"  LINX API: {version.version}")
        name = await device.get_device_name()
        print(f"  Name: {name.device_name}")

        # ===== Digital / Analog =====
        print("\n[Digital / Analog]")
        result = await device.digital_write_advanced([12, 13], [True, False])
        print(f"  Digital write: {result}")
        values = await device.analog_read_advanced([0, 1, 2])
        print(f"  Analog values: {values.values}")

        # ===== 로컬 검증 실패 (전송 없음) =====
        bad = await device.spi_set_mode(0, 7)
        print(f"  SPI mode 7: {bad.message}")

        await agent.release_active_device()


async def example_serial(port: str):
    """
    시리얼 직접 연결 예제

    에이전트 없이 USB 시리얼 포트의 디바이스에 바로 명령을 전송합니다.
    """
    from linx_remote import Device, ConnectionHandler, SerialTransport, EofConfig

    async with Device(port, ConnectionHandler(SerialTransport())) as device:
        # ===== I2C 센서 읽기 =====
        print("\n[I2C]")
        await device.i2c_open(0)
        await device.i2c_write(0, 0x48, EofConfig.DEFAULT, [0x00])
        reading = await device.i2c_read(0, 0x48, 2, 100)
        if reading.ok:
            print(f"  Raw: {reading.data}")
        else:
            print(f"  Read failed: {reading.message}")
        await device.i2c_close(0)

        # ===== UART 루프백 =====
        print("\n[UART]")
        opened = await device.uart_open(1, 9600)
        print(f"  Actual baud: {opened.actual_baud}")
        await device.uart_write(1, list(b'hello'))
        available = await device.uart_get_bytes_available(1)
        if available.ok and available.num_bytes:
            data = await device.uart_read(1, available.num_bytes)
            print(f"  Received: {bytes(data.data or [])!r}")
        await device.uart_close(1)


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='LINX Remote Usage Examples')
    parser.add_argument('--address', '-a', default='192.168.1.10', help='Agent address')
    parser.add_argument('--device', '-d', default='dev1', help='Device ID')
    parser.add_argument('--port', '-p', help='Serial port for the direct example')
    args = parser.parse_args()

    if args.port:
        asyncio.run(example_serial(args.port))
    else:
        asyncio.run(example_with_agent(args.address, args.device))

    sys.exit(0)
