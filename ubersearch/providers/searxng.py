"""SearXNG Provider (로컬 인스턴스)

API 키는 선택 사항이며, 요청 전 헬스체크로 인스턴스 기동 여부를 확인합니다.
컨테이너 기동/정지는 외부에서 관리합니다.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from ubersearch.core.exceptions import ProviderUnavailableException
from ubersearch.core.logging import logger
from ubersearch.core.types import SearchQuery, SearchResultItem

from .base import BaseProvider, ProviderRequest, first_present

HEALTHCHECK_TIMEOUT_S = 3.0


class SearxngProvider(BaseProvider):
    provider_type = "searchxng"
    label = "SearXNG"
    docs_url = "https://docs.searxng.org/"
    requires_api_key = False

    @property
    def display_name(self) -> str:
        return "SearXNG (Local)"

    def health_url(self) -> str:
        if self.config.health_endpoint:
            return self.config.health_endpoint
        parts = urlsplit(self.config.endpoint)
        return urlunsplit((parts.scheme, parts.netloc, "/", "", ""))

    async def healthcheck(self) -> bool:
        status = await self._http.get_status(self.health_url(), timeout_s=HEALTHCHECK_TIMEOUT_S)
        return status is not None and 200 <= status < 300

    async def _before_request(self) -> None:
        if not await self.healthcheck():
            logger.warning(f"[SEARXNG] Health check failed: {self.health_url()}")
            raise ProviderUnavailableException(
                self.id,
                f"SearXNG instance is not healthy ({self.health_url()})",
            )

    def _build_request(self, query: SearchQuery, api_key: str) -> ProviderRequest:
        params: Dict[str, Any] = {
            "q": query.query,
            "format": "json",
            "language": "all",
            "pageno": 1,
            "safesearch": 0,
        }
        if query.categories:
            params["categories"] = ",".join(query.categories)

        headers = {
            "Accept": "application/json",
            "X-Forwarded-For": "127.0.0.1",
            "X-Real-IP": "127.0.0.1",
        }
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        return ProviderRequest(method="GET", url=self.config.endpoint, headers=headers, params=params)

    def _normalize_entry(self, entry: Any) -> Optional[SearchResultItem]:
        if not isinstance(entry, dict):
            return None
        url = entry.get("url")
        if not isinstance(url, str) or not url:
            return None
        return self._item(
            title=entry.get("title"),
            url=url,
            snippet=first_present(entry, "content", "snippet", "description"),
            score=first_present(entry, "score", "rank"),
            source_engine=entry.get("engine"),
        )

    def _finalize_items(
        self, items: list[SearchResultItem], payload: Dict[str, Any], query: SearchQuery
    ) -> list[SearchResultItem]:
        infoboxes = payload.get("infoboxes")
        for box in infoboxes if isinstance(infoboxes, list) else []:
            if not isinstance(box, dict):
                continue
            box_url = box.get("id")
            if not isinstance(box_url, str) or not box_url:
                urls = box.get("urls")
                first = urls[0] if isinstance(urls, list) and urls else None
                box_url = first.get("url") if isinstance(first, dict) else None
            if not isinstance(box_url, str) or not box_url:
                continue
            items.append(self._item(
                title=box.get("infobox") or "Info",
                url=box_url,
                snippet=box.get("content"),
                source_engine=box.get("engine") or "wikipedia",
            ))

        limit = self._resolve_limit(query)
        return items[:limit] if limit > 0 else items
