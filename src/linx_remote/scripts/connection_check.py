#!/usr/bin/env python3
"""
LINX Device Connection Check Script

하드웨어 연결 확인을 위한 스크립트
- 에이전트 경유(HTTP) 또는 디바이스 직접 연결(시리얼)
"""

import sys
import asyncio
import argparse
import logging
from typing import Optional

from linx_remote import (
    Agent, Device, ConnectionHandler, SerialTransport,
    LinxConfig, load_config, LinxError, TransportError
)

logger = logging.getLogger(__name__)


async def check_device(device: Device, verbose: bool = False) -> bool:
    """
    디바이스 기본 명령 확인

    Args:
        device: 활성 Device
        verbose: 상세 출력 여부

    Returns:
        모든 명령 성공 시 True
    """
    checks = [
        ("Sync", device.sync),
        ("Device ID", device.get_device_id),
        ("API Version", device.get_linx_api_version),
        ("Device Name", device.get_device_name),
        ("Max Baud Rate", device.get_max_baud_rate),
    ]

    all_ok = True
    for label, command in checks:
        print(f"[TEST] {label}")
        result = await command()
        if result.ok:
            print(f"  [OK] {result!r}" if verbose else f"  [OK] {result}")
        else:
            print(f"  [FAIL] {result.message}")
            all_ok = False

    return all_ok


async def check_connection(config: LinxConfig, device_id: Optional[str], verbose: bool = False) -> bool:
    """
    연결 확인

    Args:
        config: 연결 설정
        device_id: 에이전트에서 활성화할 디바이스 ID (HTTP 전용)
        verbose: 상세 출력 여부
    """
    print(f"\n{'='*60}")
    print("LINX Connection Check")
    print(f"{'='*60}")
    print(f"Transport: {config.transport}")
    print(f"Address:   {config.address or config.serial_port}")
    print(f"{'='*60}\n")

    try:
        if config.transport == 'serial':
            async with Device(config.address, ConnectionHandler.from_config(config)) as device:
                ok = await check_device(device, verbose)
        else:
            async with Agent.from_config(config) as agent:
                info = await agent.get_agent_info()
                print(f"[OK] Agent: {info['agent']}")

                devices = await agent.enumerate_devices()
                print(f"[OK] Devices: {devices['agent']}")

                if not device_id:
                    print("\n[INFO] No --device given, skipping device checks")
                    return True

                await agent.set_active_device(device_id)
                ok = await check_device(agent.active_device, verbose)
                await agent.release_active_device()

    except TransportError as e:
        print(f"\n[FAIL] Transport error: {e}")
        print("\nPossible causes:")
        print("  - Wrong address or port name")
        print("  - Agent not running")
        print("  - Device not connected")
        return False

    except LinxError as e:
        print(f"\n[FAIL] LINX error: {e}")
        return False

    print(f"\n{'='*60}")
    print("[SUCCESS] All checks passed!" if ok else "[FAIL] Some checks failed")
    print(f"{'='*60}\n")
    return ok


def list_ports():
    """사용 가능한 포트 목록 출력"""
    ports = SerialTransport.list_ports()

    print("\nAvailable Serial Ports:")
    print("-" * 30)

    if ports:
        for port in ports:
            print(f"  {port}")
    else:
        print("  (No serial ports found)")

    print()


def main():
    """메인 함수"""
    parser = argparse.ArgumentParser(
        description='LINX Device Connection Check',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --address 192.168.1.10 --device dev1   # Through the agent
  %(prog)s --port /dev/ttyACM0                    # Direct serial device
  %(prog)s --config linx.yaml                     # Settings from YAML
  %(prog)s --list                                 # List serial ports
        """
    )

    parser.add_argument('--address', '-a', type=str, help='Agent address (e.g., 192.168.1.10)')
    parser.add_argument('--device', '-d', type=str, help='Device ID to activate through the agent')
    parser.add_argument('--port', '-p', type=str, help='Serial port name (e.g., COM3, /dev/ttyACM0)')
    parser.add_argument('--config', '-c', type=str, help='YAML config file')
    parser.add_argument('--list', '-l', action='store_true', help='List available serial ports')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.list:
        list_ports()
        return 0

    try:
        if args.config:
            config = load_config(args.config)
        elif args.port:
            config = LinxConfig(transport='serial', serial_port=args.port)
        elif args.address:
            config = LinxConfig(address=args.address)
        else:
            parser.print_help()
            print("\nError: Please specify --address, --port, --config or --list")
            return 1
    except LinxError as e:
        print(f"Error: {e}")
        return 1

    success = asyncio.run(check_connection(config, args.device, args.verbose))
    return 0 if success else 1


if __name__ == '__main__':
    sys.exit(main())
