"""Provider Registry - 설정 type → Provider 클래스 매핑 및 인스턴스 보관"""

from typing import Dict, Optional, Type

from ubersearch.core.exceptions import ConfigurationException
from ubersearch.core.types import EngineId
from ubersearch.schemas.config_schema import EngineConfigBase

from .base import BaseProvider
from .brave import BraveProvider
from .http_client import SharedHttpClient
from .linkup import LinkupProvider
from .searxng import SearxngProvider
from .tavily import TavilyProvider

PROVIDER_TYPES: Dict[str, Type[BaseProvider]] = {
    cls.provider_type: cls
    for cls in (TavilyProvider, BraveProvider, LinkupProvider, SearxngProvider)
}


def create_provider(
    config: EngineConfigBase, http_client: Optional[SharedHttpClient] = None
) -> BaseProvider:
    provider_type = getattr(config, "type", None)
    provider_cls = PROVIDER_TYPES.get(provider_type)
    if provider_cls is None:
        raise ConfigurationException(
            f"Unsupported engine type: {provider_type}",
            details={"engine_id": config.id, "type": provider_type},
        )
    return provider_cls(config, http_client)


class ProviderRegistry:
    def __init__(self) -> None:
        self._providers: Dict[EngineId, BaseProvider] = {}

    def register(self, provider: BaseProvider) -> None:
        if provider.id in self._providers:
            raise ConfigurationException(
                f"Provider already registered: {provider.id}",
                details={"engine_id": provider.id},
            )
        self._providers[provider.id] = provider

    def get(self, engine_id: EngineId) -> Optional[BaseProvider]:
        return self._providers.get(engine_id)

    def has(self, engine_id: EngineId) -> bool:
        return engine_id in self._providers

    def list_ids(self) -> list[EngineId]:
        return list(self._providers)

    def list_metadata(self) -> list[dict]:
        return [p.get_metadata() for p in self._providers.values()]

    def __len__(self) -> int:
        return len(self._providers)
