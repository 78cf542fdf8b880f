"""검색 엔진 선택 레이어 (전략, 팩토리, 오케스트레이터)"""
from .factory import StrategyFactory
from .orchestrator import SearchOrchestrator
from .policies import AllProvidersStrategy, CheapestFirstStrategy, FirstSuccessStrategy, RoundRobinStrategy
from .result import EngineAttempt, OrchestratorResult, StrategyResult
from .strategy import SearchOptions, SearchStrategy, StrategyContext

__all__ = [
    "AllProvidersStrategy",
    "CheapestFirstStrategy",
    "EngineAttempt",
    "FirstSuccessStrategy",
    "OrchestratorResult",
    "RoundRobinStrategy",
    "SearchOptions",
    "SearchOrchestrator",
    "SearchStrategy",
    "StrategyContext",
    "StrategyFactory",
    "StrategyResult",
]
