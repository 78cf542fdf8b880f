"""Provider Base - 백엔드 공통 호출/정규화 파이프라인

한 번의 search() 호출 흐름:
    자격증명 확인 → 요청 생성 → HTTP 1회 → 상태/JSON 검증
    → 결과 항목 추출 → 항목별 정규화 (불량 항목 건너뜀) → 0건이면 EmptyResult

재시도는 하지 않습니다 (providers.retry 참고).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional

from ubersearch.core.exceptions import (
    BackendHttpException,
    EmptyResultException,
    MalformedResponseException,
    MissingCredentialException,
    TransportException,
)
from ubersearch.core.logging import logger
from ubersearch.core.types import EngineId, SearchQuery, SearchResponse, SearchResultItem
from ubersearch.schemas.config_schema import EngineConfigBase

from .http_client import HttpResponse, SharedHttpClient, get_shared_http_client


@dataclass
class ProviderRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Optional[Dict[str, Any]] = None
    json_body: Optional[Dict[str, Any]] = None


def first_present(entry: Dict[str, Any], *keys: str) -> Any:
    """entry에서 None이 아닌 첫 번째 값"""
    for key in keys:
        value = entry.get(key)
        if value is not None:
            return value
    return None


def as_score(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


class BaseProvider:
    """검색 백엔드 공통 베이스

    하위 클래스 구현 항목:
        - provider_type, label, docs_url
        - _build_request(query, api_key)
        - _extract_entries(payload)
        - _normalize_entry(entry)
    """

    provider_type: ClassVar[str] = ""
    label: ClassVar[str] = ""  # 에러 메시지용 짧은 이름 ("Tavily")
    docs_url: ClassVar[str] = ""
    requires_api_key: ClassVar[bool] = True
    fallback_limit: ClassVar[int] = 5

    def __init__(self, config: EngineConfigBase, http_client: Optional[SharedHttpClient] = None) -> None:
        self.config = config
        self._http = http_client or get_shared_http_client()

    @property
    def id(self) -> EngineId:
        return self.config.id

    @property
    def display_name(self) -> str:
        return self.config.display_name or self.config.id

    def get_metadata(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "docs_url": self.docs_url,
        }

    def _get_api_key(self) -> str:
        """환경 변수에서 자격증명 조회 (호출 시점)"""
        env_var = getattr(self.config, "api_key_env", None) or ""
        value = os.environ.get(env_var, "") if env_var else ""
        if not value and self.requires_api_key:
            raise MissingCredentialException(self.id, env_var or "<unset>")
        return value

    def _resolve_limit(self, query: SearchQuery) -> int:
        if query.limit is not None:
            return query.limit
        return getattr(self.config, "default_limit", None) or self.fallback_limit

    async def search(self, query: SearchQuery) -> SearchResponse:
        api_key = self._get_api_key()
        await self._before_request()

        request = self._build_request(query, api_key)
        response = await self._send(request)
        payload = self._parse(response)

        items = []
        skipped = 0
        for entry in self._extract_entries(payload):
            item = self._normalize_entry(entry)
            if item is None:
                skipped += 1
                continue
            items.append(item)

        items = self._finalize_items(items, payload, query)
        if skipped:
            logger.debug(f"[{self.label.upper()}] Skipped {skipped} malformed entries")
        if not items:
            raise EmptyResultException(self.id, self.label)

        return SearchResponse(
            engine_id=self.id,
            items=items,
            took_ms=response.took_ms,
            raw=payload if query.include_raw else None,
        )

    async def _before_request(self) -> None:
        return None

    def _build_request(self, query: SearchQuery, api_key: str) -> ProviderRequest:
        raise NotImplementedError

    def _extract_entries(self, payload: Dict[str, Any]) -> list:
        results = payload.get("results")
        return results if isinstance(results, list) else []

    def _normalize_entry(self, entry: Any) -> Optional[SearchResultItem]:
        raise NotImplementedError

    def _finalize_items(
        self, items: list[SearchResultItem], payload: Dict[str, Any], query: SearchQuery
    ) -> list[SearchResultItem]:
        return items

    async def _send(self, request: ProviderRequest) -> HttpResponse:
        try:
            return await self._http.request(
                request.method,
                request.url,
                headers=request.headers,
                params=request.params,
                json_body=request.json_body,
            )
        except Exception as e:
            raise TransportException(self.id, e) from e

    def _parse(self, response: HttpResponse) -> Dict[str, Any]:
        if not response.ok:
            raise BackendHttpException(
                self.id,
                response.status_code,
                response.reason,
                self.label,
                body=response.text[:500],
            )
        try:
            payload = json.loads(response.text)
        except ValueError as e:
            raise MalformedResponseException(self.id, str(e), self.label) from e
        if not isinstance(payload, dict):
            raise MalformedResponseException(
                self.id, f"expected JSON object, got {type(payload).__name__}", self.label
            )
        return payload

    def _item(
        self, title: Any, url: str, snippet: Any, score: Any = None, source_engine: Optional[str] = None
    ) -> SearchResultItem:
        return SearchResultItem(
            title=str(title) if title is not None else url,
            url=url,
            snippet=str(snippet) if snippet is not None else "",
            score=as_score(score),
            source_engine=source_engine or self.id,
        )
