"""
Configuration

YAML 설정 파일 예:
    address: 192.168.1.10
    transport: http        # http | serial
    timeout: 5.0
    serial:
      port: /dev/ttyACM0
      baudrate: 115200
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


TRANSPORT_HTTP = 'http'
TRANSPORT_SERIAL = 'serial'
TRANSPORTS = (TRANSPORT_HTTP, TRANSPORT_SERIAL)


@dataclass
class LinxConfig:
    """연결 설정"""
    address: str = ''
    transport: str = TRANSPORT_HTTP
    timeout: float = 5.0
    serial_port: Optional[str] = None
    serial_baudrate: int = 115200

    def __post_init__(self):
        if self.transport not in TRANSPORTS:
            raise ConfigError(
                f"Unknown transport: {self.transport!r} (expected one of {', '.join(TRANSPORTS)})"
            )
        if self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive: {self.timeout}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LinxConfig':
        """
        dict에서 설정 생성

        Raises:
            ConfigError: 값 형식 오류 시
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

        serial_section = data.get('serial') or {}
        if not isinstance(serial_section, dict):
            raise ConfigError("'serial' section must be a mapping")

        try:
            return cls(
                address=str(data.get('address', '')),
                transport=str(data.get('transport', TRANSPORT_HTTP)).lower(),
                timeout=float(data.get('timeout', 5.0)),
                serial_port=serial_section.get('port'),
                serial_baudrate=int(serial_section.get('baudrate', 115200)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config value: {e}") from e


def load_config(path: Union[str, Path]) -> LinxConfig:
    """
    YAML 설정 파일 로드

    Args:
        path: 설정 파일 경로

    Returns:
        LinxConfig

    Raises:
        ConfigError: 파일 읽기/파싱 실패 시
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8'))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    config = LinxConfig.from_dict(data or {})
    logger.info(f"Loaded config from {path}: {config.transport} {config.address}")
    return config
