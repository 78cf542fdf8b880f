"""검색 API 요청/응답 스키마"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class UberSearchRequest(BaseModel):
    """메타 검색 요청"""
    query: str = Field(..., min_length=1, max_length=1000, description="검색어")
    limit: Optional[int] = Field(None, description="결과 개수 (미지정 시 엔진별 기본값)")
    engines: Optional[List[str]] = Field(None, max_length=20, description="엔진 우선순위 재정의")
    strategy: Optional[str] = Field(None, description="first-success | all | cheapest | round-robin")
    parallel: bool = Field(False, description="all 전략에서 병렬 실행")
    include_raw: bool = Field(False, description="엔진 원본 응답 포함")
    categories: Optional[List[str]] = Field(None, description="SearXNG 카테고리")

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("검색어는 공백만으로 구성될 수 없습니다")
        return v.strip()


class SearchResultItemSchema(BaseModel):
    title: str
    url: str
    snippet: str
    score: Optional[float] = None
    source_engine: str


class EngineAttemptSchema(BaseModel):
    engine_id: str
    success: bool
    reason: Optional[str] = None


class CreditSnapshotSchema(BaseModel):
    engine_id: str
    quota: int = Field(..., ge=0)
    used: int = Field(..., ge=0)
    remaining: int = Field(..., ge=0)
    is_exhausted: bool


class UberSearchResponse(BaseModel):
    """메타 검색 응답"""
    status: Literal["success", "fail", "error"] = Field(..., description="success | fail | error")
    query: Optional[str] = None
    strategy: Optional[str] = None
    results: List[SearchResultItemSchema] = Field(default_factory=list)
    engine_attempts: List[EngineAttemptSchema] = Field(default_factory=list)
    credits: List[CreditSnapshotSchema] = Field(default_factory=list)
    raw: Optional[Dict[str, Any]] = Field(None, description="include_raw=true 일 때 엔진별 원본 응답")
    message: str = Field(..., description="응답 메시지")
    error_code: Optional[str] = Field(None, description="에러 코드 (fail/error 시)")


class CreditsResponse(BaseModel):
    credits: List[CreditSnapshotSchema]


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str
    timestamp: datetime
    version: str
    providers: List[str] = Field(default_factory=list)
