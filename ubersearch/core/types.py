"""Search Types - Normalized query/result format shared by all providers

Provides a standardized format for queries and results across all backends.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

EngineId = str


class FailureReason(str, Enum):
    """엔진 시도 실패 사유

    EngineAttempt.reason 및 SearchProviderException.reason 태그로 사용됩니다.
    """

    NETWORK_ERROR = "network_error"  # 연결 거부, 타임아웃, DNS 실패
    API_ERROR = "api_error"  # non-2xx 응답, JSON 파싱 실패
    RATE_LIMIT = "rate_limit"  # HTTP 429
    NO_RESULTS = "no_results"  # 유효한 결과 0건
    CONFIG_ERROR = "config_error"  # 자격증명 누락 등
    NO_PROVIDER = "no_provider"  # 레지스트리에 등록되지 않음
    OUT_OF_CREDIT = "out_of_credit"  # 크레딧 부족
    PROVIDER_UNAVAILABLE = "provider_unavailable"  # 헬스체크 실패
    UNKNOWN = "unknown"


@dataclass
class SearchQuery:
    """정규화된 검색 요청

    Attributes:
        query: 검색어 (백엔드로 그대로 전달)
        limit: 결과 개수. None이면 백엔드별 기본값, 0/음수도 그대로 전달
        include_raw: 원본 응답 포함 여부
        categories: SearXNG 카테고리 (예: "general", "it")
    """

    query: str
    limit: Optional[int] = None
    include_raw: bool = False
    categories: Optional[list[str]] = None


@dataclass
class SearchResultItem:
    """정규화된 개별 검색 결과"""

    title: str
    url: str
    snippet: str
    source_engine: EngineId
    score: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "snippet": self.snippet,
            "score": self.score,
            "source_engine": self.source_engine,
        }


@dataclass
class SearchResponse:
    """Provider 한 번 호출의 정규화된 응답

    raw는 호출자가 include_raw=True로 요청한 경우에만 채워집니다.
    """

    engine_id: EngineId
    items: list[SearchResultItem] = field(default_factory=list)
    took_ms: float = 0.0
    raw: Optional[Any] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "engine_id": self.engine_id,
            "items": [item.to_dict() for item in self.items],
            "took_ms": self.took_ms,
        }
        if self.raw is not None:
            data["raw"] = self.raw
        return data
