"""엔진 설정 스키마 (YAML/JSON 설정 파일 검증)"""
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class EngineConfigBase(BaseModel):
    """엔진 공통 설정

    설정 파일에서는 camelCase(monthlyQuota)와 snake_case 모두 허용합니다.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: str = Field(..., min_length=1, description="엔진 ID (고유)")
    enabled: bool = Field(True, description="활성화 여부")
    display_name: Optional[str] = Field(None, description="표시 이름 (기본값: id)")
    monthly_quota: int = Field(..., ge=0, description="월간 크레딧 한도")
    credit_cost_per_search: int = Field(..., ge=0, description="검색 1회당 소모 크레딧")
    low_credit_threshold_percent: Optional[float] = Field(
        None, ge=0, le=100, description="사용률이 이 값(%) 이상이면 경고 로그"
    )

    @model_validator(mode="before")
    @classmethod
    def accept_name_alias(cls, data: Any) -> Any:
        """'name' 키를 display_name으로 취급, 둘 다 없으면 id 사용"""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "display_name" not in data and "displayName" not in data:
            data["display_name"] = data.pop("name", None) or data.get("id")
        return data

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("engine id must not be blank")
        return v.strip()


class TavilyConfig(EngineConfigBase):
    type: Literal["tavily"] = "tavily"
    api_key_env: str = Field("TAVILY_API_KEY", min_length=1)
    endpoint: str = "https://api.tavily.com/search"
    search_depth: Literal["basic", "advanced"] = "basic"


class BraveConfig(EngineConfigBase):
    type: Literal["brave"] = "brave"
    api_key_env: str = Field("BRAVE_API_KEY", min_length=1)
    endpoint: str = "https://api.search.brave.com/res/v1/web/search"
    default_limit: int = Field(10, gt=0)


class LinkupConfig(EngineConfigBase):
    type: Literal["linkup"] = "linkup"
    api_key_env: str = Field("LINKUP_API_KEY", min_length=1)
    endpoint: str = "https://api.linkup.so/v1/search"


class SearchxngConfig(EngineConfigBase):
    type: Literal["searchxng"] = "searchxng"
    api_key_env: Optional[str] = None
    endpoint: str = "http://localhost:8888/search"
    default_limit: int = Field(10, gt=0)
    health_endpoint: Optional[str] = None


EngineConfig = Annotated[
    Union[TavilyConfig, BraveConfig, LinkupConfig, SearchxngConfig],
    Field(discriminator="type"),
]


class StorageConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    credit_state_path: Optional[str] = None


class UberSearchConfig(BaseModel):
    """설정 파일 최상위 구조"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    default_engine_order: List[str] = Field(..., min_length=1, description="기본 엔진 우선순위")
    engines: List[EngineConfig] = Field(..., min_length=1)
    storage: Optional[StorageConfig] = None

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "UberSearchConfig":
        seen: set[str] = set()
        for engine in self.engines:
            if engine.id in seen:
                raise ValueError(f"duplicate engine id: {engine.id}")
            seen.add(engine.id)
        return self

    @property
    def enabled_engines(self) -> list:
        return [e for e in self.engines if e.enabled]

    def get_engine(self, engine_id: str) -> Optional[EngineConfigBase]:
        for engine in self.engines:
            if engine.id == engine_id:
                return engine
        return None
