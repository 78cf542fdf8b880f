"""Search Routes - HTTP 요청을 SearchOrchestrator로 위임하는 Translator"""

from fastapi import APIRouter, Depends, HTTPException, Request

from ubersearch.core.container import Container, ServiceKeys
from ubersearch.core.exceptions import NoEligibleEngineException, UberSearchException
from ubersearch.core.logging import logger
from ubersearch.credits.manager import CreditManager
from ubersearch.engine import SearchOptions, SearchOrchestrator
from ubersearch.schemas.search_schema import CreditsResponse, UberSearchRequest, UberSearchResponse

router = APIRouter(prefix="/api/v1", tags=["search"])


def get_container(request: Request) -> Container:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=503, detail="Service is not initialized")
    return container


def get_orchestrator(container: Container = Depends(get_container)) -> SearchOrchestrator:
    return container.get(ServiceKeys.ORCHESTRATOR)


def get_credit_manager(container: Container = Depends(get_container)) -> CreditManager:
    return container.get(ServiceKeys.CREDIT_MANAGER)


@router.post("/search", response_model=UberSearchResponse)
async def search(
    request: UberSearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
):
    """메타 검색 API

    Flow:
        1. 요청 검증 (pydantic)
        2. Orchestrator에 위임 (전략 → 자격 확인 → Provider → 차감)
        3. 결과를 HTTP Response로 변환
    """
    logger.info(f"[API] Search request: query (length: {len(request.query)}), strategy={request.strategy}")

    options = SearchOptions(
        limit=request.limit,
        include_raw=request.include_raw,
        categories=request.categories,
        parallel=request.parallel,
    )

    try:
        result = await orchestrator.run(
            request.query,
            options,
            engine_order_override=request.engines,
            strategy=request.strategy,
        )
    except NoEligibleEngineException as e:
        logger.warning(f"[API] No eligible engine: {e}")
        return UberSearchResponse(
            status="fail",
            query=request.query,
            strategy=request.strategy,
            engine_attempts=[a.to_dict() for a in e.attempts],
            credits=[c.to_dict() for c in orchestrator.credit_manager.list_snapshots()],
            message="사용 가능한 검색 엔진이 없습니다 (크레딧 소진 또는 미등록).",
            error_code=e.error_code,
        )
    except UberSearchException as e:
        logger.error(f"[API] Search failed: {e}")
        return UberSearchResponse(
            status="error",
            query=request.query,
            strategy=request.strategy,
            message=e.message,
            error_code=e.error_code,
        )
    except Exception as e:
        logger.error(f"[API] Search failed: {type(e).__name__}", exc_info=True)
        return UberSearchResponse(
            status="error",
            query=request.query,
            strategy=request.strategy,
            message=f"검색 중 오류가 발생했습니다: {str(e)}",
            error_code="INTERNAL_ERROR",
        )

    data = result.to_dict()
    if result.is_success:
        return UberSearchResponse(
            status="success",
            message=f"{len(result.results)}건의 결과를 찾았습니다.",
            **data,
        )

    return UberSearchResponse(
        status="fail",
        message="모든 검색 엔진 호출이 실패했습니다.",
        error_code="ALL_ENGINES_FAILED",
        **data,
    )


@router.get("/credits", response_model=CreditsResponse)
async def list_credits(credit_manager: CreditManager = Depends(get_credit_manager)):
    """엔진별 크레딧 잔량"""
    return CreditsResponse(credits=[s.to_dict() for s in credit_manager.list_snapshots()])
