"""전역 테스트 설정

역할:
- 테스트 환경 구성 (XDG 경로 격리, 재시도 비활성화)
- 공통 Fake 주입 (HTTP 클라이언트, 크레딧 저장소, Provider)

금지:
- 실제 외부 API 호출
- 사용자 홈 디렉토리의 크레딧/설정 파일 접근
"""

from __future__ import annotations

import copy
import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# settings 싱글톤이 import 시점에 환경 변수를 읽으므로 import 전에 설정
os.environ.setdefault("RETRY_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from ubersearch.core.types import SearchQuery, SearchResponse, SearchResultItem  # noqa: E402
from ubersearch.providers.http_client import HttpResponse  # noqa: E402
from ubersearch.schemas.config_schema import (  # noqa: E402
    BraveConfig,
    LinkupConfig,
    SearchxngConfig,
    TavilyConfig,
)

API_KEY_VARS = ("TAVILY_API_KEY", "BRAVE_API_KEY", "LINKUP_API_KEY", "SEARXNG_API_KEY")


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """테스트마다 XDG 경로/작업 디렉토리 격리, API 키 제거"""
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("UBERSEARCH_CONFIG_PATH", raising=False)
    for var in API_KEY_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


# ============================================================================
# HTTP Fake
# ============================================================================

def json_response(payload: Any, status: int = 200, reason: str = "OK") -> HttpResponse:
    return HttpResponse(status_code=status, reason=reason, text=json.dumps(payload), took_ms=1.5)


def text_response(text: str, status: int = 200, reason: str = "OK") -> HttpResponse:
    return HttpResponse(status_code=status, reason=reason, text=text, took_ms=1.5)


class FakeHttpClient:
    """SharedHttpClient 대역

    - responses에 HttpResponse 또는 예외를 순서대로 넣어두면 request()가 하나씩 소비
    - 호출 인자는 calls에 기록
    """

    def __init__(self, responses: Optional[list] = None, health_status: Optional[int] = 200) -> None:
        self.responses = list(responses or [])
        self.health_status = health_status
        self.calls: list[dict[str, Any]] = []
        self.health_calls: list[str] = []

    async def request(self, method, url, *, headers=None, params=None, json_body=None, timeout_s=None):
        self.calls.append({
            "method": method,
            "url": url,
            "headers": headers or {},
            "params": params,
            "json_body": json_body,
        })
        if not self.responses:
            raise AssertionError("unexpected HTTP request")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    async def get_status(self, url: str, *, timeout_s: float) -> Optional[int]:
        self.health_calls.append(url)
        return self.health_status

    async def close(self) -> None:
        return None


@pytest.fixture
def fake_http() -> FakeHttpClient:
    return FakeHttpClient()


# ============================================================================
# Credit State Fake
# ============================================================================

class InMemoryCreditStateProvider:
    """CreditStateProvider 대역 (저장 호출 횟수 기록, 실패 주입 가능)"""

    def __init__(self, state: Optional[dict] = None) -> None:
        self.state: dict = copy.deepcopy(state or {})
        self.save_calls = 0
        self.load_error: Optional[BaseException] = None
        self.save_error: Optional[BaseException] = None

    async def load_state(self) -> dict:
        if self.load_error is not None:
            raise self.load_error
        return copy.deepcopy(self.state)

    async def save_state(self, state: dict) -> None:
        if self.save_error is not None:
            raise self.save_error
        self.save_calls += 1
        self.state = copy.deepcopy(state)

    async def state_exists(self) -> bool:
        return bool(self.state)


@pytest.fixture
def memory_state() -> InMemoryCreditStateProvider:
    return InMemoryCreditStateProvider()


# ============================================================================
# Engine config / Provider Fake
# ============================================================================

_CONFIG_TYPES = {
    "tavily": TavilyConfig,
    "brave": BraveConfig,
    "linkup": LinkupConfig,
    "searchxng": SearchxngConfig,
}


@pytest.fixture
def make_engine() -> Callable[..., Any]:
    """엔진 설정 생성기: make_engine("google", quota=100, cost=1)"""

    def _make(engine_id: str, quota: int = 100, cost: int = 1, type: str = "tavily", **extra: Any):
        return _CONFIG_TYPES[type](
            id=engine_id,
            monthly_quota=quota,
            credit_cost_per_search=cost,
            **extra,
        )

    return _make


class FakeProvider:
    """Provider 대역: 정해진 결과를 반환하거나 예외를 발생"""

    def __init__(self, engine_id: str, items: Optional[list] = None, error: Optional[BaseException] = None,
                 raw: Any = None) -> None:
        self.id = engine_id
        self.items = items if items is not None else [
            SearchResultItem(title=f"{engine_id} result", url=f"https://{engine_id}.example/1",
                             snippet="snippet", source_engine=engine_id),
        ]
        self.error = error
        self.raw = raw
        self.queries: list[SearchQuery] = []

    @property
    def calls(self) -> int:
        return len(self.queries)

    def get_metadata(self) -> dict:
        return {"id": self.id, "display_name": self.id, "docs_url": ""}

    async def search(self, query: SearchQuery) -> SearchResponse:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return SearchResponse(
            engine_id=self.id,
            items=list(self.items),
            took_ms=1.0,
            raw=self.raw if query.include_raw else None,
        )


def result_item(engine_id: str, n: int, score: Optional[float] = None) -> SearchResultItem:
    return SearchResultItem(
        title=f"{engine_id}-{n}",
        url=f"https://{engine_id}.example/{n}",
        snippet="",
        score=score,
        source_engine=engine_id,
    )


# ============================================================================
# 팩토리 픽스처
# ============================================================================

@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    return FakeProvider


@pytest.fixture
def make_item() -> Callable[..., SearchResultItem]:
    return result_item


@pytest.fixture
def make_state() -> Callable[..., InMemoryCreditStateProvider]:
    return InMemoryCreditStateProvider


@pytest.fixture
def make_http() -> Callable[..., FakeHttpClient]:
    return FakeHttpClient


@pytest.fixture
def respond() -> Callable[..., HttpResponse]:
    """JSON 응답 생성기"""
    return json_response


@pytest.fixture
def respond_text() -> Callable[..., HttpResponse]:
    """원문 텍스트 응답 생성기 (JSON 아님)"""
    return text_response
