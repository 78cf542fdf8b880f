"""Retry Layer - Provider 호출 위에 얹는 지수 백오프 재시도

Provider 자체는 재시도하지 않습니다. 이 레이어는 settings.retry_enabled로 끌 수 있습니다.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, FrozenSet, Optional, TypeVar

from ubersearch.core.config import Settings, settings
from ubersearch.core.exceptions import SearchProviderException
from ubersearch.core.logging import logger
from ubersearch.core.types import EngineId, FailureReason

T = TypeVar("T")

DEFAULT_RETRYABLE: FrozenSet[FailureReason] = frozenset({
    FailureReason.NETWORK_ERROR,
    FailureReason.API_ERROR,
    FailureReason.RATE_LIMIT,
    FailureReason.NO_RESULTS,
})


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    initial_delay_ms: int = 1000
    backoff_multiplier: float = 2.0
    max_delay_ms: int = 10000
    retryable_reasons: FrozenSet[FailureReason] = field(default=DEFAULT_RETRYABLE)

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> "RetryConfig":
        s = source or settings
        return cls(
            max_attempts=s.retry_max_attempts if s.retry_enabled else 1,
            initial_delay_ms=s.retry_initial_delay_ms,
            backoff_multiplier=s.retry_backoff_multiplier,
            max_delay_ms=s.retry_max_delay_ms,
        )

    @classmethod
    def disabled(cls) -> "RetryConfig":
        return cls(max_attempts=1)


async def with_retry(
    engine_id: EngineId,
    fn: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
) -> T:
    """fn을 실행하고 재시도 가능한 Provider 실패 시 백오프 후 재실행

    SearchProviderException 이외의 예외, 재시도 불가 사유, 마지막 시도 실패는 그대로 전파합니다.
    """
    config = config or RetryConfig.from_settings()
    delay_ms = float(config.initial_delay_ms)

    attempt = 1
    while True:
        try:
            return await fn()
        except SearchProviderException as e:
            if e.reason not in config.retryable_reasons or attempt >= config.max_attempts:
                raise

            delay_ms = min(delay_ms * config.backoff_multiplier, float(config.max_delay_ms))
            logger.warning(
                f"[RETRY] {engine_id} attempt {attempt}/{config.max_attempts} failed: "
                f"{e.message}. Retrying in {delay_ms:.0f}ms"
            )
            await asyncio.sleep(delay_ms / 1000)
            attempt += 1
