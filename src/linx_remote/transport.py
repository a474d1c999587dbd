"""
Transport Abstraction

요청 1회 -> 응답 1회 교환 인터페이스
- 재시도, 연결 풀링 없음 (호출 1회 = 교환 1회)
- 타임아웃은 구현체가 담당
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Union


class ReturnType(str, Enum):
    """응답 데이터 형식"""
    BINARY = 'binary'  # 원시 바이트 (디바이스 바이너리 프로토콜)
    JSON = 'json'      # JSON 텍스트 (에이전트 제어 채널)


Payload = Union[bytes, str]


class GenericTransport(ABC):
    """
    전송 계층 기본 클래스

    구현체:
    - HttpTransport: HTTP POST (httpx)
    - SerialTransport: 시리얼 포트 (pyserial)
    """

    @abstractmethod
    async def write_read(
        self,
        address: str,
        endpoint: str,
        payload: Payload,
        return_type: ReturnType
    ) -> Payload:
        """
        요청 전송 및 응답 수신

        Args:
            address: 대상 주소 (예: 'http://192.168.1.10')
            endpoint: 엔드포인트 (예: '/', '/config')
            payload: 요청 본문 (바이너리 프레임 또는 JSON 문자열)
            return_type: 응답 형식

        Returns:
            BINARY면 bytes, JSON이면 str

        Raises:
            TransportError: 전송 실패 시
            TransportTimeoutError: 타임아웃 시
        """
        ...

    async def close(self) -> None:
        """리소스 정리 (기본 구현은 아무것도 하지 않음)"""
        return None
