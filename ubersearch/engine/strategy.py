"""Selection Strategy - 엔진 선택/폴백 공통 로직

전략은 Provider 호출 실패를 잡아서 EngineAttempt로 기록하고 다음 후보로 넘어갑니다.
원장 예외(UnknownEngine 등)와 영속화 예외는 잡지 않고 호출자에게 전파합니다.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Protocol

from ubersearch.core.exceptions import NoEligibleEngineException, SearchProviderException
from ubersearch.core.logging import logger
from ubersearch.core.types import EngineId, FailureReason, SearchQuery, SearchResponse
from ubersearch.credits.manager import CreditManager
from ubersearch.providers.base import BaseProvider
from ubersearch.providers.registry import ProviderRegistry
from ubersearch.providers.retry import RetryConfig, with_retry

from .result import EngineAttempt, StrategyResult


@dataclass
class StrategyContext:
    provider_registry: ProviderRegistry
    credit_manager: CreditManager


@dataclass
class SearchOptions:
    limit: Optional[int] = None
    include_raw: bool = False
    categories: Optional[list[str]] = None
    parallel: bool = False

    def to_query(self, query: str) -> SearchQuery:
        return SearchQuery(
            query=query,
            limit=self.limit,
            include_raw=self.include_raw,
            categories=self.categories,
        )


class SearchStrategy(Protocol):
    """선택 전략 인터페이스"""

    name: str

    async def execute(
        self,
        query: str,
        engine_ids: list[EngineId],
        options: SearchOptions,
        context: StrategyContext,
    ) -> StrategyResult:
        """검색 실행

        Raises:
            NoEligibleEngineException: 호출 가능한 후보가 하나도 없음
        """
        ...


@dataclass
class Candidate:
    engine_id: EngineId
    provider: Optional[BaseProvider]
    skip_reason: Optional[FailureReason] = None

    @property
    def eligible(self) -> bool:
        return self.skip_reason is None


class BaseSearchStrategy:
    name: ClassVar[str] = ""

    def __init__(self, retry_config: Optional[RetryConfig] = None) -> None:
        self.retry_config = retry_config

    def check_candidates(self, engine_ids: list[EngineId], context: StrategyContext) -> list[Candidate]:
        """후보별 자격 판정 (Provider 등록 + 미소진 + 비용 감당 가능)

        Raises:
            NoEligibleEngineException: 자격 있는 후보가 없음 (Provider 호출 전)
        """
        candidates = []
        for engine_id in engine_ids:
            provider = context.provider_registry.get(engine_id)
            if provider is None:
                candidates.append(Candidate(engine_id, None, FailureReason.NO_PROVIDER))
                continue

            credits = context.credit_manager
            if (
                not credits.has_sufficient_credits(engine_id)
                or credits.get_snapshot(engine_id).is_exhausted
            ):
                candidates.append(Candidate(engine_id, provider, FailureReason.OUT_OF_CREDIT))
                continue

            candidates.append(Candidate(engine_id, provider))

        if not any(c.eligible for c in candidates):
            attempts = [EngineAttempt.failed(c.engine_id, c.skip_reason) for c in candidates]
            logger.warning(f"[STRATEGY] No eligible engine: {[a.to_dict() for a in attempts]}")
            raise NoEligibleEngineException(list(engine_ids), attempts)
        return candidates

    async def call_provider(
        self, candidate: Candidate, search_query: SearchQuery
    ) -> tuple[Optional[SearchResponse], Optional[EngineAttempt]]:
        """Provider 1회 호출 (retry_config가 있으면 재시도 레이어 경유)

        Returns:
            (응답, None) 또는 (None, 실패 기록)
        """
        provider = candidate.provider
        try:
            if self.retry_config is not None:
                response = await with_retry(
                    candidate.engine_id, lambda: provider.search(search_query), self.retry_config
                )
            else:
                response = await provider.search(search_query)
            return response, None
        except SearchProviderException as e:
            logger.info(f"[STRATEGY] {candidate.engine_id} failed ({e.reason.value}): {e.message}")
            return None, EngineAttempt.failed(candidate.engine_id, e.reason)
        except Exception as e:
            logger.warning(
                f"[STRATEGY] {candidate.engine_id} failed unexpectedly: {type(e).__name__}: {e}",
                exc_info=True,
            )
            return None, EngineAttempt.failed(candidate.engine_id, FailureReason.UNKNOWN)

    async def settle(self, engine_id: EngineId, context: StrategyContext) -> EngineAttempt:
        """정규화된 응답을 받은 뒤에만 차감 + 영속화"""
        if not await context.credit_manager.charge_and_save(engine_id):
            return EngineAttempt.failed(engine_id, FailureReason.OUT_OF_CREDIT)
        return EngineAttempt.succeeded(engine_id)
