"""Strategy / Orchestrator Result Types"""

from dataclasses import dataclass, field
from typing import Any, Optional

from ubersearch.core.types import EngineId, FailureReason, SearchResultItem
from ubersearch.credits.models import CreditSnapshot


@dataclass
class EngineAttempt:
    """엔진 1개에 대한 시도 기록

    Attributes:
        engine_id: 엔진 ID
        success: 결과 반환 + 크레딧 차감까지 성공했는지
        reason: 실패 사유 태그 (성공 시 None)
    """

    engine_id: EngineId
    success: bool
    reason: Optional[str] = None

    @classmethod
    def succeeded(cls, engine_id: EngineId) -> "EngineAttempt":
        return cls(engine_id=engine_id, success=True)

    @classmethod
    def failed(cls, engine_id: EngineId, reason: FailureReason) -> "EngineAttempt":
        return cls(engine_id=engine_id, success=False, reason=reason.value)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"engine_id": self.engine_id, "success": self.success}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass
class StrategyResult:
    results: list[SearchResultItem] = field(default_factory=list)
    attempts: list[EngineAttempt] = field(default_factory=list)
    # include_raw=True 일 때만 채워짐 (engine_id → 원본 응답)
    raw: dict[EngineId, Any] = field(default_factory=dict)


@dataclass
class OrchestratorResult:
    query: str
    results: list[SearchResultItem]
    engine_attempts: list[EngineAttempt]
    credits: list[CreditSnapshot]
    strategy: Optional[str] = None
    raw: Optional[dict[EngineId, Any]] = None

    @property
    def is_success(self) -> bool:
        return any(a.success for a in self.engine_attempts)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "query": self.query,
            "strategy": self.strategy,
            "results": [item.to_dict() for item in self.results],
            "engine_attempts": [a.to_dict() for a in self.engine_attempts],
            "credits": [c.to_dict() for c in self.credits],
        }
        if self.raw:
            data["raw"] = self.raw
        return data
