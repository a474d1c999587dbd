"""
LINX Remote Custom Exceptions
"""

from typing import Any, Optional


class LinxError(Exception):
    """LINX 원격 통신 기본 예외"""
    pass


class ProtocolError(LinxError):
    """응답 프레임 구조 오류 (해당 교환에 대해 복구 불가)"""
    pass


class InvalidSyncError(ProtocolError):
    """첫 바이트가 0xFF가 아님 (또는 빈 응답)"""
    pass


class InvalidLengthError(ProtocolError):
    """길이 바이트와 실제 수신 길이 불일치"""
    pass


class InvalidChecksumError(ProtocolError):
    """체크섬 검증 실패"""
    pass


class ResponseError(ProtocolError):
    """응답 페이로드가 명령이 요구하는 길이보다 짧음"""
    pass


class TransportError(LinxError):
    """전송 계층 오류 (네트워크, 포트, HTTP 상태)"""
    pass


class TransportTimeoutError(TransportError):
    """응답 타임아웃"""
    pass


class ConnectionBusyError(TransportError):
    """교환 진행 중 트랜스포트 교체 시도"""
    pass


class CommandArgumentError(LinxError):
    """전송 전 로컬 인자 검증 실패 (배열 길이 불일치, 범위 초과)"""
    pass


class AgentProtocolError(LinxError):
    """
    에이전트 JSON 응답 오류

    Attributes:
        context: 파싱된 응답 객체 또는 파싱 예외
    """

    def __init__(self, message: str, context: Optional[Any] = None):
        super().__init__(message)
        self.context = context


class ConfigError(LinxError):
    """설정 파일 오류"""
    pass
