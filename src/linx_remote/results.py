"""
Command Result Types

모든 디바이스 명령은 예외 대신 결과 객체를 반환:
- 성공: status_code = 0, message = 'ok', 명령별 필드 채움
- 실패: status_code = 1, message = 오류 내용, 명령별 필드 None
"""

from dataclasses import dataclass
from typing import List, Optional


STATUS_OK = 0
STATUS_FAILED = 1


@dataclass
class CommandResult:
    """명령 결과 (상태만 반환하는 명령)"""
    status_code: int = STATUS_OK
    message: str = 'ok'
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status_code == STATUS_OK

    @classmethod
    def failure(cls, error: Exception) -> 'CommandResult':
        """실패 결과 생성 (명령별 필드는 기본값 None 유지)"""
        return cls(status_code=STATUS_FAILED, message=str(error), error=error)

    def __str__(self) -> str:
        return f"{type(self).__name__}(status={self.status_code}, message={self.message!r})"


@dataclass
class DeviceIdResult(CommandResult):
    device_family: Optional[int] = None
    device_id: Optional[int] = None


@dataclass
class ApiVersionResult(CommandResult):
    major: Optional[int] = None
    minor: Optional[int] = None
    subminor: Optional[int] = None
    build: Optional[int] = None

    @property
    def version(self) -> Optional[str]:
        if not self.ok:
            return None
        return f"{self.major}.{self.minor}.{self.subminor}.{self.build}"


@dataclass
class BaudRateResult(CommandResult):
    baud_rate: Optional[int] = None


@dataclass
class ActualBaudResult(CommandResult):
    actual_baud: Optional[int] = None


@dataclass
class UserIdResult(CommandResult):
    user_id: Optional[int] = None


@dataclass
class DeviceNameResult(CommandResult):
    device_name: Optional[str] = None


@dataclass
class ValueResult(CommandResult):
    value: Optional[int] = None


@dataclass
class ValuesResult(CommandResult):
    values: Optional[List[int]] = None


@dataclass
class ChannelsResult(CommandResult):
    channels: Optional[List[int]] = None


@dataclass
class FrequencyResult(CommandResult):
    actual_frequency: Optional[int] = None


@dataclass
class DataResult(CommandResult):
    data: Optional[List[int]] = None


@dataclass
class BytesAvailableResult(CommandResult):
    num_bytes: Optional[int] = None
