import asyncio

from linx_remote import Agent


async def main():
    # Agent 경유 (권장)
    async with Agent('192.168.1.10') as agent:
        await agent.enumerate_devices()
        await agent.set_active_device('dev1')
        device = agent.active_device

        # Digital 출력
        await device.digital_write(13, True)

        # Analog 읽기
        reading = await device.analog_read(0)
        print(f"A0: {reading.value}")

        # 디바이스 정보
        name = await device.get_device_name()
        print(f"Device Name: {name.device_name}")

        await agent.release_active_device()


asyncio.run(main())
