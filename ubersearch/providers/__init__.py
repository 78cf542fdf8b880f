"""검색 백엔드 Provider 패키지"""
from .base import BaseProvider
from .brave import BraveProvider
from .linkup import LinkupProvider
from .registry import PROVIDER_TYPES, ProviderRegistry, create_provider
from .searxng import SearxngProvider
from .tavily import TavilyProvider

__all__ = [
    "BaseProvider",
    "BraveProvider",
    "LinkupProvider",
    "PROVIDER_TYPES",
    "ProviderRegistry",
    "SearxngProvider",
    "TavilyProvider",
    "create_provider",
]
