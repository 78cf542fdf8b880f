"""설정 관리 - 환경 변수 로드 및 검증"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 엔진 설정 파일 (YAML/JSON). 비어 있으면 기본 탐색 경로 사용
    ubersearch_config_path: Optional[str] = None

    # 크레딧 상태 파일 경로. 비어 있으면 XDG state 디렉토리 사용
    credit_state_path: Optional[str] = None

    # 검색 전략 기본값 ("first-success" | "all" | "cheapest" | "round-robin")
    search_default_strategy: str = "first-success"

    # HTTP (curl_cffi) 설정
    http_timeout_s: float = 30.0
    http_impersonate: str = "chrome110"
    http_max_clients: int = 20
    http_user_agent: str = "ubersearch/1.0"

    # 재시도 레이어 (전략 위에 얹히는 외부 정책, 끌 수 있음)
    retry_enabled: bool = True
    retry_max_attempts: int = 3
    retry_initial_delay_ms: int = 1000
    retry_backoff_multiplier: float = 2.0
    retry_max_delay_ms: int = 10000

    # API
    api_title: str = "UberSearch"
    api_version: str = "1.0.0"
    api_description: str = "크레딧 잔량 기반으로 검색 엔진을 선택하는 메타 검색 API"

    # 로깅
    log_level: str = "INFO"

    @field_validator("search_default_strategy")
    @classmethod
    def validate_default_strategy(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("search_default_strategy must not be empty")
        return v.strip()

    @field_validator("http_timeout_s")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_s must be positive")
        return v

    @field_validator("http_max_clients", "retry_max_attempts")
    @classmethod
    def validate_positive_counts(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("http_max_clients and retry_max_attempts must be positive")
        return v

    @field_validator("retry_initial_delay_ms", "retry_max_delay_ms")
    @classmethod
    def validate_retry_delays(cls, v: int) -> int:
        if v < 0:
            raise ValueError("retry delays must be >= 0")
        return v

    @field_validator("retry_backoff_multiplier")
    @classmethod
    def validate_backoff(cls, v: float) -> float:
        if v < 1.0:
            raise ValueError("retry_backoff_multiplier must be >= 1.0")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
