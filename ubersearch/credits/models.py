"""Credit Models - 원장 레코드 및 스냅샷"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ubersearch.core.types import EngineId


class CreditRecord(BaseModel):
    """엔진별 사용량 레코드 (영속화 대상)

    디스크 포맷: {"used": int, "lastReset": ISO-8601 문자열}
    """

    model_config = ConfigDict(populate_by_name=True)

    used: int = Field(0, ge=0)
    last_reset: datetime = Field(alias="lastReset")

    @field_validator("last_reset", mode="before")
    @classmethod
    def parse_last_reset(cls, v: Any) -> Any:
        # JS 스타일 "2025-01-01T00:00:00.000Z"도 허용
        if isinstance(v, str) and v.endswith("Z"):
            return v[:-1] + "+00:00"
        return v

    @classmethod
    def fresh(cls, now: Optional[datetime] = None) -> "CreditRecord":
        return cls(used=0, last_reset=now or datetime.now().astimezone())

    def to_state(self) -> dict[str, Any]:
        return {"used": self.used, "lastReset": self.last_reset.isoformat()}


@dataclass(frozen=True)
class CreditSnapshot:
    """원장에서 파생된 읽기 전용 뷰 (영속화하지 않음)"""

    engine_id: EngineId
    quota: int
    used: int

    @property
    def remaining(self) -> int:
        return max(self.quota - self.used, 0)

    @property
    def is_exhausted(self) -> bool:
        return self.remaining <= 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "engine_id": self.engine_id,
            "quota": self.quota,
            "used": self.used,
            "remaining": self.remaining,
            "is_exhausted": self.is_exhausted,
        }
