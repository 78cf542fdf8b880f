"""Brave Search Provider"""

from typing import Any, Dict, Optional

from ubersearch.core.types import SearchQuery, SearchResultItem

from .base import BaseProvider, ProviderRequest, first_present


class BraveProvider(BaseProvider):
    provider_type = "brave"
    label = "Brave"
    docs_url = "https://api.search.brave.com/app/documentation"

    def _build_request(self, query: SearchQuery, api_key: str) -> ProviderRequest:
        return ProviderRequest(
            method="GET",
            url=self.config.endpoint,
            headers={
                "Accept": "application/json",
                "X-Subscription-Token": api_key,
            },
            params={"q": query.query, "count": self._resolve_limit(query)},
        )

    def _extract_entries(self, payload: Dict[str, Any]) -> list:
        # 웹 검색 응답은 web.results, 일부 엔드포인트는 최상위 results
        web = payload.get("web")
        if isinstance(web, dict) and isinstance(web.get("results"), list):
            return web["results"]
        return super()._extract_entries(payload)

    def _normalize_entry(self, entry: Any) -> Optional[SearchResultItem]:
        if not isinstance(entry, dict):
            return None
        url = entry.get("url")
        if not isinstance(url, str) or not url:
            return None
        return self._item(
            title=entry.get("title"),
            url=url,
            snippet=first_present(entry, "content", "description", "snippet", "abstract"),
            score=first_present(entry, "score", "rank"),
        )
