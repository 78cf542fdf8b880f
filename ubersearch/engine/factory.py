"""Strategy Factory - 전략 생성/캐싱 (명시적으로 소유되는 객체)

전역 레지스트리 없이 컨테이너가 인스턴스를 만들어 Orchestrator에 넘깁니다.

Usage:
    factory = StrategyFactory()
    strategy = factory.create_strategy("first-success")
    ...
    factory.reset()     # 캐시 + 사용자 등록 전략 초기화
    factory.teardown()  # 종료
"""

from typing import Callable, Dict, Optional

from ubersearch.core.exceptions import ConfigurationException, UnknownStrategyException
from ubersearch.core.logging import logger
from ubersearch.providers.retry import RetryConfig

from .policies import AllProvidersStrategy, CheapestFirstStrategy, FirstSuccessStrategy, RoundRobinStrategy
from .strategy import SearchStrategy

StrategyBuilder = Callable[[], SearchStrategy]


class StrategyFactory:
    def __init__(self, retry_config: Optional[RetryConfig] = None) -> None:
        self._retry_config = retry_config
        self._builders: Dict[str, StrategyBuilder] = {}
        self._instances: Dict[str, SearchStrategy] = {}
        self._closed = False
        self._register_defaults()

    def _register_defaults(self) -> None:
        retry = self._retry_config
        self._builders = {
            FirstSuccessStrategy.name: FirstSuccessStrategy,
            AllProvidersStrategy.name: lambda: AllProvidersStrategy(
                retry if retry is not None else RetryConfig.from_settings()
            ),
            CheapestFirstStrategy.name: CheapestFirstStrategy,
            RoundRobinStrategy.name: RoundRobinStrategy,
        }

    def _ensure_open(self) -> None:
        if self._closed:
            raise ConfigurationException("StrategyFactory has been torn down", "FACTORY_CLOSED")

    def create_strategy(self, name: str) -> SearchStrategy:
        """이름으로 전략 조회 (인스턴스는 캐시되어 상태를 유지)

        Raises:
            UnknownStrategyException: 등록되지 않은 이름
        """
        self._ensure_open()
        cached = self._instances.get(name)
        if cached is not None:
            return cached

        builder = self._builders.get(name)
        if builder is None:
            raise UnknownStrategyException(name, self.get_available_strategies())

        strategy = builder()
        self._instances[name] = strategy
        logger.debug(f"[STRATEGY] Created strategy: {name}")
        return strategy

    def register_strategy(self, name: str, builder: StrategyBuilder) -> None:
        self._ensure_open()
        if name in self._builders:
            raise ConfigurationException(
                f'Strategy "{name}" is already registered',
                "STRATEGY_EXISTS",
                {"strategy": name},
            )
        self._builders[name] = builder

    def has_strategy(self, name: str) -> bool:
        return name in self._builders

    def get_available_strategies(self) -> list[str]:
        return list(self._builders)

    def reset(self) -> None:
        """캐시된 인스턴스와 사용자 등록 전략을 비우고 기본값으로 복원"""
        self._instances.clear()
        self._register_defaults()
        self._closed = False

    def teardown(self) -> None:
        self._instances.clear()
        self._builders.clear()
        self._closed = True
