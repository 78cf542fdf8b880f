"""크레딧 원장 패키지"""
from .file_provider import FileCreditStateProvider
from .manager import CreditManager
from .models import CreditRecord, CreditSnapshot
from .state_provider import CreditState, CreditStateProvider, LoadOutcome, LoadStatus

__all__ = [
    "CreditManager",
    "CreditRecord",
    "CreditSnapshot",
    "CreditState",
    "CreditStateProvider",
    "FileCreditStateProvider",
    "LoadOutcome",
    "LoadStatus",
]
