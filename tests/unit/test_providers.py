"""검색 Provider 단위 테스트 (요청 형태, 정규화, 에러 분류)."""

from __future__ import annotations

import pytest

from ubersearch.core.exceptions import (
    BackendHttpException,
    ConfigurationException,
    EmptyResultException,
    MalformedResponseException,
    MissingCredentialException,
    ProviderUnavailableException,
    TransportException,
)
from ubersearch.core.types import FailureReason, SearchQuery
from ubersearch.providers import (
    BraveProvider,
    LinkupProvider,
    ProviderRegistry,
    SearxngProvider,
    TavilyProvider,
    create_provider,
)


@pytest.fixture
def api_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TAVILY_API_KEY", "tvly-test")
    monkeypatch.setenv("BRAVE_API_KEY", "brave-test")
    monkeypatch.setenv("LINKUP_API_KEY", "linkup-test")


@pytest.fixture
def tavily_config(make_engine):
    return make_engine("tavily", quota=1000, cost=1, type="tavily", name="Tavily Search")


@pytest.fixture
def searxng_config(make_engine):
    return make_engine("searchxng", quota=10000, cost=0, type="searchxng", default_limit=15)


# ============================================================================
# 공통 파이프라인 (Tavily로 검증)
# ============================================================================

@pytest.mark.asyncio
async def test_tavily_request_and_normalization(api_keys, tavily_config, make_http, respond) -> None:
    http = make_http([respond({
        "results": [
            {"title": "Python", "url": "https://python.org", "content": "Official site", "score": 0.9},
            {"title": "Docs", "url": "https://docs.python.org", "snippet": "Reference"},
        ]
    })])
    provider = TavilyProvider(tavily_config, http)

    response = await provider.search(SearchQuery(query="python", limit=7))

    call = http.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.tavily.com/search"
    assert call["json_body"]["api_key"] == "tvly-test"
    assert call["json_body"]["query"] == "python"
    assert call["json_body"]["max_results"] == 7
    assert call["json_body"]["search_depth"] == "basic"

    assert response.engine_id == "tavily"
    assert response.raw is None
    assert [i.url for i in response.items] == ["https://python.org", "https://docs.python.org"]
    assert response.items[0].snippet == "Official site"
    assert response.items[0].score == 0.9
    assert response.items[1].snippet == "Reference"
    assert response.items[1].score is None
    assert all(i.source_engine == "tavily" for i in response.items)


@pytest.mark.asyncio
async def test_limit_falls_back_to_five(api_keys, tavily_config, make_http, respond) -> None:
    http = make_http([respond({"results": [{"url": "https://a.example"}]})])

    await TavilyProvider(tavily_config, http).search(SearchQuery(query="q"))

    assert http.calls[0]["json_body"]["max_results"] == 5


@pytest.mark.asyncio
async def test_include_raw_returns_payload(api_keys, tavily_config, make_http, respond) -> None:
    payload = {"results": [{"url": "https://a.example", "title": "A"}], "answer": None}
    http = make_http([respond(payload)])

    response = await TavilyProvider(tavily_config, http).search(SearchQuery(query="q", include_raw=True))

    assert response.raw == payload


@pytest.mark.asyncio
async def test_malformed_entries_are_skipped(api_keys, tavily_config, make_http, respond) -> None:
    http = make_http([respond({"results": [{"title": "no url"}, "junk", {"url": "https://ok.example"}]})])

    response = await TavilyProvider(tavily_config, http).search(SearchQuery(query="q"))

    assert len(response.items) == 1
    item = response.items[0]
    assert item.title == "https://ok.example"
    assert item.snippet == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [None, ""])
async def test_missing_credential_fails_before_network(
    monkeypatch, tavily_config, make_http, value
) -> None:
    if value is not None:
        monkeypatch.setenv("TAVILY_API_KEY", value)
    http = make_http()

    with pytest.raises(MissingCredentialException) as exc_info:
        await TavilyProvider(tavily_config, http).search(SearchQuery(query="q"))

    assert exc_info.value.reason == FailureReason.CONFIG_ERROR
    assert exc_info.value.message == "Missing environment variable: TAVILY_API_KEY"
    assert http.calls == []


@pytest.mark.asyncio
async def test_credential_is_read_at_call_time(monkeypatch, tavily_config, make_http, respond) -> None:
    http = make_http([respond({"results": [{"url": "https://a.example"}]})])
    provider = TavilyProvider(tavily_config, http)

    monkeypatch.setenv("TAVILY_API_KEY", "late-key")
    await provider.search(SearchQuery(query="q"))

    assert http.calls[0]["json_body"]["api_key"] == "late-key"


@pytest.mark.asyncio
async def test_transport_failure(api_keys, tavily_config, make_http) -> None:
    http = make_http([ConnectionError("connection refused")])

    with pytest.raises(TransportException) as exc_info:
        await TavilyProvider(tavily_config, http).search(SearchQuery(query="q"))

    assert exc_info.value.reason == FailureReason.NETWORK_ERROR
    assert exc_info.value.message == "Network error: connection refused"


@pytest.mark.asyncio
async def test_http_error_includes_status_and_body(api_keys, tavily_config, make_http, respond_text) -> None:
    http = make_http([respond_text('{"detail":"invalid key"}', status=401, reason="Unauthorized")])

    with pytest.raises(BackendHttpException) as exc_info:
        await TavilyProvider(tavily_config, http).search(SearchQuery(query="q"))

    error = exc_info.value
    assert error.reason == FailureReason.API_ERROR
    assert error.status_code == 401
    assert error.message == 'Tavily API error: HTTP 401 Unauthorized - {"detail":"invalid key"}'


@pytest.mark.asyncio
async def test_http_429_is_rate_limit(api_keys, tavily_config, make_http, respond_text) -> None:
    http = make_http([respond_text("slow down", status=429, reason="Too Many Requests")])

    with pytest.raises(BackendHttpException) as exc_info:
        await TavilyProvider(tavily_config, http).search(SearchQuery(query="q"))

    assert exc_info.value.reason == FailureReason.RATE_LIMIT


@pytest.mark.asyncio
async def test_error_body_is_truncated(api_keys, tavily_config, make_http, respond_text) -> None:
    http = make_http([respond_text("x" * 2000, status=500, reason="Internal Server Error")])

    with pytest.raises(BackendHttpException) as exc_info:
        await TavilyProvider(tavily_config, http).search(SearchQuery(query="q"))

    assert exc_info.value.message.endswith(" - " + "x" * 500)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["<html>oops</html>", "[1, 2]"])
async def test_invalid_json(api_keys, tavily_config, make_http, respond_text, body) -> None:
    http = make_http([respond_text(body)])

    with pytest.raises(MalformedResponseException) as exc_info:
        await TavilyProvider(tavily_config, http).search(SearchQuery(query="q"))

    assert exc_info.value.reason == FailureReason.API_ERROR
    assert exc_info.value.message.startswith("Invalid JSON response from Tavily: ")


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"results": []}, {}, {"results": "nope"}])
async def test_empty_results(api_keys, tavily_config, make_http, respond, payload) -> None:
    http = make_http([respond(payload)])

    with pytest.raises(EmptyResultException) as exc_info:
        await TavilyProvider(tavily_config, http).search(SearchQuery(query="q"))

    assert exc_info.value.reason == FailureReason.NO_RESULTS
    assert exc_info.value.message == "Tavily returned no results"


def test_metadata(tavily_config, make_http) -> None:
    provider = TavilyProvider(tavily_config, make_http())

    assert provider.get_metadata() == {
        "id": "tavily",
        "display_name": "Tavily Search",
        "docs_url": "https://docs.tavily.com/",
    }


# ============================================================================
# Brave
# ============================================================================

@pytest.mark.asyncio
async def test_brave_request_and_web_results(api_keys, make_engine, make_http, respond) -> None:
    config = make_engine("brave", quota=2000, cost=1, type="brave")
    http = make_http([respond({
        "web": {"results": [
            {"title": "A", "url": "https://a.example", "description": "desc", "rank": 1},
        ]},
        "results": [{"title": "ignored", "url": "https://ignored.example"}],
    })])

    response = await BraveProvider(config, http).search(SearchQuery(query="rust"))

    call = http.calls[0]
    assert call["method"] == "GET"
    assert call["params"] == {"q": "rust", "count": 10}
    assert call["headers"]["X-Subscription-Token"] == "brave-test"
    assert [i.url for i in response.items] == ["https://a.example"]
    assert response.items[0].snippet == "desc"
    assert response.items[0].score == 1.0


@pytest.mark.asyncio
async def test_brave_top_level_results(api_keys, make_engine, make_http, respond) -> None:
    config = make_engine("brave", quota=2000, cost=1, type="brave")
    http = make_http([respond({"results": [{"url": "https://b.example", "abstract": "abs"}]})])

    response = await BraveProvider(config, http).search(SearchQuery(query="q", limit=3))

    assert http.calls[0]["params"]["count"] == 3
    assert response.items[0].snippet == "abs"


# ============================================================================
# Linkup
# ============================================================================

@pytest.mark.asyncio
async def test_linkup_request_and_normalization(api_keys, make_engine, make_http, respond) -> None:
    config = make_engine("linkup", quota=1000, cost=1, type="linkup")
    http = make_http([respond({
        "results": [
            {"name": "Named", "url": "https://l.example", "content": "body", "relevance": 0.4},
        ]
    })])

    response = await LinkupProvider(config, http).search(SearchQuery(query="llm", limit=4))

    call = http.calls[0]
    assert call["method"] == "POST"
    assert call["headers"]["Authorization"] == "Bearer linkup-test"
    assert call["json_body"] == {
        "q": "llm",
        "depth": "standard",
        "outputType": "searchResults",
        "maxResults": 4,
    }
    item = response.items[0]
    assert (item.title, item.snippet, item.score) == ("Named", "body", 0.4)


# ============================================================================
# SearXNG
# ============================================================================

@pytest.mark.asyncio
async def test_searxng_needs_no_key_and_builds_query(searxng_config, make_http, respond) -> None:
    http = make_http([respond({
        "results": [{"title": "S", "url": "https://s.example", "content": "c", "engine": "duckduckgo"}]
    })])
    provider = SearxngProvider(searxng_config, http)

    response = await provider.search(SearchQuery(query="q", categories=["general", "news"]))

    assert http.health_calls == ["http://localhost:8888/"]
    call = http.calls[0]
    assert call["method"] == "GET"
    assert call["params"] == {
        "q": "q",
        "format": "json",
        "language": "all",
        "pageno": 1,
        "safesearch": 0,
        "categories": "general,news",
    }
    assert "Authorization" not in call["headers"]
    assert response.items[0].source_engine == "duckduckgo"


@pytest.mark.asyncio
async def test_searxng_optional_key_is_sent(monkeypatch, make_engine, make_http, respond) -> None:
    monkeypatch.setenv("SEARXNG_API_KEY", "sx")
    config = make_engine("sx", quota=10, cost=0, type="searchxng", api_key_env="SEARXNG_API_KEY")
    http = make_http([respond({"results": [{"url": "https://s.example"}]})])

    response = await SearxngProvider(config, http).search(SearchQuery(query="q"))

    assert http.calls[0]["headers"]["Authorization"] == "Bearer sx"
    assert response.items[0].source_engine == "sx"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [None, 503])
async def test_searxng_unhealthy_instance(searxng_config, make_http, status) -> None:
    http = make_http(health_status=status)

    with pytest.raises(ProviderUnavailableException) as exc_info:
        await SearxngProvider(searxng_config, http).search(SearchQuery(query="q"))

    assert exc_info.value.reason == FailureReason.PROVIDER_UNAVAILABLE
    assert http.calls == []


@pytest.mark.asyncio
async def test_searxng_custom_health_endpoint(make_engine, make_http) -> None:
    config = make_engine("sx", quota=10, cost=0, type="searchxng",
                         health_endpoint="http://localhost:8888/healthz")
    http = make_http()

    assert await SearxngProvider(config, http).healthcheck() is True
    assert http.health_calls == ["http://localhost:8888/healthz"]


@pytest.mark.asyncio
async def test_searxng_appends_infoboxes(searxng_config, make_http, respond) -> None:
    http = make_http([respond({
        "results": [{"title": "R", "url": "https://r.example"}],
        "infoboxes": [
            {"infobox": "Python", "id": "https://en.wikipedia.org/wiki/Python", "content": "lang"},
            {"urls": [{"url": "https://from-urls.example"}], "engine": "wikidata"},
            {"content": "no url at all"},
        ],
    })])

    response = await SearxngProvider(searxng_config, http).search(SearchQuery(query="q"))

    assert [i.url for i in response.items] == [
        "https://r.example",
        "https://en.wikipedia.org/wiki/Python",
        "https://from-urls.example",
    ]
    assert response.items[1].title == "Python"
    assert response.items[1].source_engine == "wikipedia"
    assert response.items[2].title == "Info"
    assert response.items[2].source_engine == "wikidata"


@pytest.mark.asyncio
async def test_searxng_truncates_to_limit(searxng_config, make_http, respond) -> None:
    results = [{"url": f"https://s.example/{n}"} for n in range(30)]

    http = make_http([respond({"results": results}), respond({"results": results})])
    provider = SearxngProvider(searxng_config, http)

    default = await provider.search(SearchQuery(query="q"))
    explicit = await provider.search(SearchQuery(query="q", limit=2))

    assert len(default.items) == 15
    assert [i.url for i in explicit.items] == ["https://s.example/0", "https://s.example/1"]


@pytest.mark.asyncio
async def test_searxng_non_positive_limit_keeps_all(searxng_config, make_http, respond) -> None:
    http = make_http([respond({"results": [{"url": f"https://s.example/{n}"} for n in range(20)]})])

    response = await SearxngProvider(searxng_config, http).search(SearchQuery(query="q", limit=0))

    assert len(response.items) == 20


def test_searxng_display_name(searxng_config, make_http) -> None:
    assert SearxngProvider(searxng_config, make_http()).get_metadata()["display_name"] == "SearXNG (Local)"


# ============================================================================
# Registry
# ============================================================================

def test_create_provider_by_type(make_engine, make_http) -> None:
    http = make_http()
    cases = {
        "tavily": TavilyProvider,
        "brave": BraveProvider,
        "linkup": LinkupProvider,
        "searchxng": SearxngProvider,
    }
    for engine_type, expected in cases.items():
        provider = create_provider(make_engine(f"e-{engine_type}", type=engine_type), http)
        assert isinstance(provider, expected)
        assert provider.id == f"e-{engine_type}"


def test_registry_rejects_duplicate_ids(tavily_config, make_http) -> None:
    registry = ProviderRegistry()
    registry.register(TavilyProvider(tavily_config, make_http()))

    with pytest.raises(ConfigurationException):
        registry.register(TavilyProvider(tavily_config, make_http()))

    assert registry.list_ids() == ["tavily"]
    assert len(registry) == 1
    assert registry.get("missing") is None
    assert registry.has("tavily") is True
