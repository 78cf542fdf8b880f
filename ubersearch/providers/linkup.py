"""Linkup Search Provider"""

from typing import Any, Optional

from ubersearch.core.types import SearchQuery, SearchResultItem

from .base import BaseProvider, ProviderRequest, first_present


class LinkupProvider(BaseProvider):
    provider_type = "linkup"
    label = "Linkup"
    docs_url = "https://docs.linkup.ai/"

    def _build_request(self, query: SearchQuery, api_key: str) -> ProviderRequest:
        return ProviderRequest(
            method="POST",
            url=self.config.endpoint,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            json_body={
                "q": query.query,
                "depth": "standard",
                "outputType": "searchResults",
                "maxResults": self._resolve_limit(query),
            },
        )

    def _normalize_entry(self, entry: Any) -> Optional[SearchResultItem]:
        if not isinstance(entry, dict):
            return None
        url = entry.get("url")
        if not isinstance(url, str) or not url:
            return None
        return self._item(
            title=first_present(entry, "name", "title"),
            url=url,
            snippet=first_present(entry, "content", "snippet", "description"),
            score=first_present(entry, "score", "relevance"),
        )
