"""
HTTP Transport

POST 요청 1회로 교환 1회 수행 (httpx.AsyncClient)
- 바이너리 응답: response.content
- JSON 응답: response.text (파싱은 호출자가 담당)
"""

import logging
import time
from typing import Optional

import httpx

from .transport import GenericTransport, ReturnType, Payload
from .exceptions import TransportError, TransportTimeoutError

logger = logging.getLogger(__name__)


DEFAULT_HTTP_TIMEOUT = 5.0  # seconds


class HttpTransport(GenericTransport):
    """
    HTTP 전송 구현

    사용 예:
        transport = HttpTransport(timeout=5.0)
        frame = await transport.write_read(
            'http://192.168.1.10', '/', request, ReturnType.BINARY
        )
        await transport.close()
    """

    def __init__(
        self,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Args:
            timeout: 요청 타임아웃 (초)
            client: 외부에서 주입할 AsyncClient (없으면 내부 생성)
        """
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def write_read(
        self,
        address: str,
        endpoint: str,
        payload: Payload,
        return_type: ReturnType
    ) -> Payload:
        uri = address + endpoint
        content = payload.encode('utf-8') if isinstance(payload, str) else bytes(payload)

        start = time.perf_counter()
        try:
            response = await self._get_client().post(uri, content=content, timeout=self.timeout)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(f"HTTP Timeout: {uri}") from e
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"HTTP {e.response.status_code} from {uri}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"TX Error: {uri}: {e}") from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"POST {uri} ({len(content)} bytes) flight time {elapsed_ms:.1f} ms")

        if ReturnType(return_type) is ReturnType.BINARY:
            return response.content
        return response.text

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
