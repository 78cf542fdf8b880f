"""서비스 컨테이너 / 부트스트랩

config → CreditStateProvider → CreditManager → ProviderRegistry
       → StrategyFactory → SearchOrchestrator 순으로 조립합니다.
전역 컨테이너는 두지 않습니다. 호출자가 반환된 Container를 보관합니다.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ubersearch.core.config_loader import load_config
from ubersearch.core.exceptions import ConfigurationException
from ubersearch.core.logging import logger, register_secret_env
from ubersearch.credits import CreditManager, FileCreditStateProvider
from ubersearch.engine import SearchOrchestrator, StrategyFactory
from ubersearch.providers import ProviderRegistry, create_provider
from ubersearch.schemas.config_schema import UberSearchConfig


class ServiceKeys(str, Enum):
    CONFIG = "config"
    CREDIT_STATE_PROVIDER = "credit_state_provider"
    CREDIT_MANAGER = "credit_manager"
    PROVIDER_REGISTRY = "provider_registry"
    STRATEGY_FACTORY = "strategy_factory"
    ORCHESTRATOR = "orchestrator"


class Container:
    def __init__(self) -> None:
        self._services: Dict[str, Any] = {}

    def register(self, key: Union[ServiceKeys, str], service: Any) -> None:
        self._services[str(getattr(key, "value", key))] = service

    def get(self, key: Union[ServiceKeys, str]) -> Any:
        name = str(getattr(key, "value", key))
        if name not in self._services:
            raise KeyError(f"Service not registered: {name}")
        return self._services[name]

    def has(self, key: Union[ServiceKeys, str]) -> bool:
        return str(getattr(key, "value", key)) in self._services

    def reset(self) -> None:
        factory = self._services.get(ServiceKeys.STRATEGY_FACTORY.value)
        if factory is not None:
            factory.teardown()
        self._services.clear()


async def bootstrap_container(
    config_or_path: Optional[Union[UberSearchConfig, str, Path]] = None,
    *,
    credit_state_path: Optional[Union[str, Path]] = None,
    http_client=None,
) -> Container:
    """서비스 조립 + CreditManager 초기화

    Raises:
        ConfigurationException: 설정 오류 또는 등록 가능한 Provider 없음
        OSError: 크레딧 상태 로드 실패
    """
    if isinstance(config_or_path, UberSearchConfig):
        config = config_or_path
    else:
        config = load_config(config_or_path)

    container = Container()
    container.register(ServiceKeys.CONFIG, config)

    state_path = credit_state_path
    if state_path is None and config.storage is not None:
        state_path = config.storage.credit_state_path
    state_provider = FileCreditStateProvider(state_path)
    container.register(ServiceKeys.CREDIT_STATE_PROVIDER, state_provider)

    enabled = config.enabled_engines
    register_secret_env(*(getattr(e, "api_key_env", None) or "" for e in enabled))
    credit_manager = CreditManager(enabled, state_provider)
    container.register(ServiceKeys.CREDIT_MANAGER, credit_manager)

    registry = ProviderRegistry()
    failed = []
    for engine_config in enabled:
        try:
            registry.register(create_provider(engine_config, http_client))
            logger.info(f"[BOOTSTRAP] Registered provider: {engine_config.id}")
        except Exception as e:
            logger.warning(f"[BOOTSTRAP] Failed to register provider {engine_config.id}: {e}")
            failed.append(engine_config.id)

    if len(registry) == 0:
        raise ConfigurationException(
            f"No providers could be registered. Failed providers: {', '.join(failed) or '(none enabled)'}",
            "NO_PROVIDERS",
            {"failed": failed},
        )
    container.register(ServiceKeys.PROVIDER_REGISTRY, registry)

    strategy_factory = StrategyFactory()
    container.register(ServiceKeys.STRATEGY_FACTORY, strategy_factory)

    container.register(
        ServiceKeys.ORCHESTRATOR,
        SearchOrchestrator(config, credit_manager, registry, strategy_factory),
    )

    await credit_manager.initialize()
    logger.info(
        f"[BOOTSTRAP] Ready: providers={registry.list_ids()}, "
        f"state={state_provider.get_state_path()}"
    )
    return container
