"""Search Orchestrator - Main Engine Entry Point

Coordinates one search request:
1. Engine order resolution (override or configured default)
2. Strategy execution (selection, fallback, credit charging)
3. Score sort for the "all" strategy
4. Credit snapshot attachment
"""

from typing import Optional

from ubersearch.core.config import settings
from ubersearch.core.exceptions import ConfigurationException
from ubersearch.core.logging import logger, sanitize_for_log
from ubersearch.core.types import EngineId
from ubersearch.credits.manager import CreditManager
from ubersearch.providers.registry import ProviderRegistry
from ubersearch.schemas.config_schema import UberSearchConfig

from .factory import StrategyFactory
from .policies import AllProvidersStrategy
from .result import OrchestratorResult
from .strategy import SearchOptions, StrategyContext


class SearchOrchestrator:
    """검색 오케스트레이터

    원장/전략/레지스트리는 모두 생성자로 주입받습니다.
    """

    def __init__(
        self,
        config: UberSearchConfig,
        credit_manager: CreditManager,
        provider_registry: ProviderRegistry,
        strategy_factory: StrategyFactory,
    ):
        if credit_manager is None:
            raise ValueError("credit_manager must not be None")
        if provider_registry is None:
            raise ValueError("provider_registry must not be None")
        if strategy_factory is None:
            raise ValueError("strategy_factory must not be None")

        self.config = config
        self.credit_manager = credit_manager
        self.provider_registry = provider_registry
        self.strategy_factory = strategy_factory

    def get_engine_order(self, override: Optional[list[EngineId]] = None) -> list[EngineId]:
        if override:
            return list(override)
        return list(self.config.default_engine_order)

    async def run(
        self,
        query: str,
        options: Optional[SearchOptions] = None,
        engine_order_override: Optional[list[EngineId]] = None,
        strategy: Optional[str] = None,
    ) -> OrchestratorResult:
        """통합 검색 실행

        Raises:
            ValueError: query가 비어 있음
            ConfigurationException: 엔진 순서가 비어 있거나 알 수 없는 전략
            NoEligibleEngineException: 호출 가능한 엔진 없음
        """
        if not query or not isinstance(query, str):
            raise ValueError(f"Invalid query: {query!r}")

        options = options or SearchOptions()
        order = self.get_engine_order(engine_order_override)
        if not order:
            raise ConfigurationException("No engines configured or selected", "NO_ENGINES")

        strategy_name = strategy or settings.search_default_strategy
        search_strategy = self.strategy_factory.create_strategy(strategy_name)
        context = StrategyContext(
            provider_registry=self.provider_registry,
            credit_manager=self.credit_manager,
        )

        logger.info(
            f"[ORCHESTRATOR] Search started: query='{sanitize_for_log(query)}', "
            f"strategy={strategy_name}, engines={order}"
        )
        outcome = await search_strategy.execute(query, order, options, context)

        results = outcome.results
        if strategy_name == AllProvidersStrategy.name:
            results = sorted(results, key=lambda item: item.score or 0.0, reverse=True)

        succeeded = [a.engine_id for a in outcome.attempts if a.success]
        logger.info(
            f"[ORCHESTRATOR] Search completed: results={len(results)}, succeeded={succeeded}"
        )

        return OrchestratorResult(
            query=query,
            results=results,
            engine_attempts=outcome.attempts,
            credits=self.credit_manager.list_snapshots(),
            strategy=strategy_name,
            raw=outcome.raw if options.include_raw else None,
        )
