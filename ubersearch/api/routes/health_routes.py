"""헬스 체크 엔드포인트"""
from datetime import datetime

from fastapi import APIRouter, Request

from ubersearch import __version__
from ubersearch.core.container import ServiceKeys
from ubersearch.schemas.search_schema import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    헬스 체크 엔드포인트

    - 서버 상태
    - 등록된 Provider 목록
    """
    container = getattr(request.app.state, "container", None)
    providers = []
    if container is not None and container.has(ServiceKeys.PROVIDER_REGISTRY):
        providers = container.get(ServiceKeys.PROVIDER_REGISTRY).list_ids()

    return HealthResponse(
        status="ok" if providers else "degraded",
        timestamp=datetime.now(),
        version=__version__,
        providers=providers,
    )


@router.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "service": "UberSearch 메타 검색 서비스",
        "version": __version__,
        "docs": "/docs"
    }
