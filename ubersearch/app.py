"""FastAPI 앱 팩토리"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ubersearch.api import health_router, search_router
from ubersearch.core.config import settings
from ubersearch.core.container import Container, bootstrap_container
from ubersearch.core.logging import logger
from ubersearch.providers.http_client import shutdown_shared_http_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기"""
    logger.info("Starting application...")
    if getattr(app.state, "container", None) is None:
        app.state.container = await bootstrap_container()
    logger.info("Application started")
    yield
    logger.info("Shutting down application...")
    try:
        await shutdown_shared_http_client()
    except Exception as e:
        logger.warning(f"HTTP client shutdown failed: {type(e).__name__}")


def create_app(container: Optional[Container] = None) -> FastAPI:
    """
    FastAPI 앱 생성 (Factory Pattern)

    Args:
        container: 미리 조립된 컨테이너 (테스트용). 없으면 시작 시 bootstrap

    Returns:
        FastAPI 앱 인스턴스
    """
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan
    )
    app.state.container = container

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 라우터 등록
    app.include_router(health_router)
    app.include_router(search_router)

    return app

# 앱 인스턴스 생성 (uvicorn이 로드할 수 있도록)
app = create_app()
