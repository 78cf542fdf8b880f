"""공유 HTTP 클라이언트 (curl_cffi)

- Provider 호출마다 AsyncSession을 만들면 TLS/커넥션 오버헤드가 커지므로
  프로세스 단위로 세션을 재사용합니다.
- 앱 종료 시 close()로 정리합니다.
- 실패를 분류하지 않고 그대로 올립니다. 에러 분류는 BaseProvider 담당.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from curl_cffi.requests import AsyncSession

from ubersearch.core.config import settings
from ubersearch.core.logging import logger


@dataclass
class HttpResponse:
    status_code: int
    reason: str
    text: str
    took_ms: float

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class SharedHttpClient:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._session: Optional[AsyncSession] = None

    async def _ensure_session(self) -> AsyncSession:
        async with self._lock:
            if self._session is not None:
                return self._session
            self._session = AsyncSession(
                impersonate=settings.http_impersonate,
                headers=self.default_headers(),
                allow_redirects=True,
                max_clients=settings.http_max_clients,
                trust_env=False,
            )
            return self._session

    def default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": settings.http_user_agent,
            "Accept": "application/json",
        }

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        timeout_s: Optional[float] = None,
    ) -> HttpResponse:
        """HTTP 요청 1회

        Raises:
            curl_cffi.requests.RequestsError: 연결 실패, 타임아웃, DNS 실패 등
        """
        sess = await self._ensure_session()
        started = time.perf_counter()
        try:
            resp = await sess.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json_body,
                timeout=timeout_s if timeout_s is not None else settings.http_timeout_s,
            )
        except Exception as e:
            logger.info(f"[HTTP_CLIENT] {method} failed: {type(e).__name__}: {repr(e)}")
            raise

        return HttpResponse(
            status_code=getattr(resp, "status_code", 0) or 0,
            reason=getattr(resp, "reason", "") or "",
            text=getattr(resp, "text", "") or "",
            took_ms=(time.perf_counter() - started) * 1000,
        )

    async def get_status(self, url: str, *, timeout_s: float) -> Optional[int]:
        """헬스체크용 GET, 실패 시 None"""
        sess = await self._ensure_session()
        try:
            resp = await sess.get(url, timeout=timeout_s, allow_redirects=True)
            return getattr(resp, "status_code", None)
        except Exception as e:
            logger.info(f"[HTTP_CLIENT] Health GET failed: {type(e).__name__}: {repr(e)}")
            return None

    async def close(self) -> None:
        async with self._lock:
            if self._session is None:
                return
            try:
                await self._session.close()
            except Exception as e:
                logger.debug(f"[HTTP_CLIENT] Session close failed: {type(e).__name__}")
            self._session = None


_shared_http_client = SharedHttpClient()


def get_shared_http_client() -> SharedHttpClient:
    return _shared_http_client


async def shutdown_shared_http_client() -> None:
    await _shared_http_client.close()
