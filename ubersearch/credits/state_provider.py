"""Credit State Provider - 원장 영속화 계약

CreditManager는 이 프로토콜에만 의존합니다. 기본 구현은 FileCreditStateProvider.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

# engine_id → {"used": int, "lastReset": ISO-8601}
CreditState = dict[str, dict[str, Any]]


class CreditStateProvider(Protocol):
    """원장 저장소 인터페이스

    - load_state: 저장소가 없으면 {} 반환, 실제 I/O 실패는 예외
    - save_state: 성공 시 반환, 실패 시 예외
    - state_exists: 일반 파일/레코드 존재 여부
    """

    async def load_state(self) -> CreditState:
        ...

    async def save_state(self, state: CreditState) -> None:
        ...

    async def state_exists(self) -> bool:
        ...


class LoadStatus(str, Enum):
    """로드 결과 상태 (I/O 실패는 여기 없음, 예외로 전파)"""

    LOADED = "loaded"
    MISSING = "missing"
    CORRUPT = "corrupt"  # 파싱 불가, 빈 상태로 취급


@dataclass
class LoadOutcome:
    status: LoadStatus
    state: CreditState = field(default_factory=dict)
    error: str | None = None

    @classmethod
    def loaded(cls, state: CreditState) -> "LoadOutcome":
        return cls(status=LoadStatus.LOADED, state=state)

    @classmethod
    def missing(cls) -> "LoadOutcome":
        return cls(status=LoadStatus.MISSING)

    @classmethod
    def corrupt(cls, error: str) -> "LoadOutcome":
        return cls(status=LoadStatus.CORRUPT, error=error)
