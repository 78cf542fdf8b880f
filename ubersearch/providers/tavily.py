"""Tavily Search Provider"""

from typing import Any, Optional

from ubersearch.core.types import SearchQuery, SearchResultItem

from .base import BaseProvider, ProviderRequest, first_present


class TavilyProvider(BaseProvider):
    provider_type = "tavily"
    label = "Tavily"
    docs_url = "https://docs.tavily.com/"

    def _build_request(self, query: SearchQuery, api_key: str) -> ProviderRequest:
        return ProviderRequest(
            method="POST",
            url=self.config.endpoint,
            headers={"Content-Type": "application/json"},
            json_body={
                "api_key": api_key,
                "query": query.query,
                "max_results": self._resolve_limit(query),
                "search_depth": self.config.search_depth,
                "include_answer": False,
                "include_raw_content": False,
                "include_images": False,
            },
        )

    def _normalize_entry(self, entry: Any) -> Optional[SearchResultItem]:
        if not isinstance(entry, dict):
            return None
        url = entry.get("url")
        if not isinstance(url, str) or not url:
            return None
        return self._item(
            title=entry.get("title"),
            url=url,
            snippet=first_present(entry, "content", "snippet"),
            score=entry.get("score"),
        )
