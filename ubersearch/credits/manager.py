"""Credit Manager - 엔진별 월간 사용량 원장

- initialize(): 저장소 로드 → 월 변경 시 리셋 → 모든 설정 엔진에 레코드 생성
- charge(): 엔진별 threading.Lock 아래에서 원자적으로 차감 (메모리만 변경)
- charge_and_save(): 차감 성공 시에만 전체 상태 사본을 영속화
- get_snapshot()/list_snapshots(): 읽기 전용 투영

설정에 없는 엔진 키는 스냅샷에 노출하지 않고 저장 시 그대로 되돌려 씁니다.
"""

from __future__ import annotations

import asyncio
import copy
import threading
from datetime import datetime
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from ubersearch.core.exceptions import NoCreditRecordException, UnknownEngineException
from ubersearch.core.logging import logger
from ubersearch.core.types import EngineId
from ubersearch.schemas.config_schema import EngineConfigBase

from .models import CreditRecord, CreditSnapshot
from .state_provider import CreditState, CreditStateProvider


def _same_month(a: datetime, b: datetime) -> bool:
    a_local = a.astimezone()
    b_local = b.astimezone()
    return (a_local.year, a_local.month) == (b_local.year, b_local.month)


class CreditManager:
    def __init__(
        self,
        engines: Sequence[EngineConfigBase],
        state_provider: CreditStateProvider,
    ) -> None:
        self._engines: dict[EngineId, EngineConfigBase] = {e.id: e for e in engines}
        self._provider = state_provider
        self._records: dict[EngineId, CreditRecord] = {}
        self._passthrough: dict[str, Any] = {}
        self._locks: dict[EngineId, threading.Lock] = {
            engine_id: threading.Lock() for engine_id in self._engines
        }
        self._save_lock = asyncio.Lock()
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def engine_ids(self) -> list[EngineId]:
        return list(self._engines)

    def engine_config(self, engine_id: EngineId) -> EngineConfigBase:
        engine = self._engines.get(engine_id)
        if engine is None:
            raise UnknownEngineException(engine_id)
        return engine

    def get_cost(self, engine_id: EngineId) -> int:
        return self.engine_config(engine_id).credit_cost_per_search

    async def initialize(self) -> None:
        """저장된 상태 로드 및 월간 리셋 적용

        Raises:
            OSError: 저장소 I/O 실패 (그대로 전파)
        """
        stored = await self._provider.load_state()
        now = datetime.now().astimezone()

        self._passthrough = {
            key: copy.deepcopy(value) for key, value in stored.items() if key not in self._engines
        }

        reset_count = 0
        for engine_id in self._engines:
            with self._locks[engine_id]:
                raw = stored.get(engine_id)
                record = self._parse_record(engine_id, raw) if raw is not None else None

                if record is None:
                    self._records[engine_id] = CreditRecord.fresh(now)
                elif not _same_month(record.last_reset, now):
                    self._records[engine_id] = CreditRecord.fresh(now)
                    reset_count += 1
                else:
                    self._records[engine_id] = record

        self._initialized = True
        logger.info(
            f"[CREDITS] Initialized: engines={len(self._engines)}, "
            f"monthly_resets={reset_count}, preserved_unknown={len(self._passthrough)}"
        )

    def _parse_record(self, engine_id: EngineId, raw: Any) -> Optional[CreditRecord]:
        try:
            return CreditRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                f"[CREDITS] Malformed credit record for '{engine_id}', starting fresh: "
                f"{e.error_count()} error(s)"
            )
            return None

    def charge(self, engine_id: EngineId) -> bool:
        """크레딧 1회분 차감

        Returns:
            bool: 차감 성공 여부 (잔여 부족 시 False, 상태 변경 없음)

        Raises:
            UnknownEngineException: 설정에 없는 엔진
            NoCreditRecordException: initialize() 전 호출
        """
        engine = self.engine_config(engine_id)
        cost = engine.credit_cost_per_search

        with self._locks[engine_id]:
            record = self._records.get(engine_id)
            if record is None:
                raise NoCreditRecordException(engine_id)

            if cost == 0:
                return True

            remaining = max(engine.monthly_quota - record.used, 0)
            if remaining < cost:
                logger.debug(
                    f"[CREDITS] Charge rejected: engine={engine_id}, remaining={remaining}, cost={cost}"
                )
                return False

            record.used += cost
            used = record.used

        self._warn_if_low(engine, used)
        return True

    async def charge_and_save(self, engine_id: EngineId) -> bool:
        """차감 후 성공 시에만 영속화

        영속화 실패는 호출자에게 전파되며, 메모리 차감은 되돌리지 않습니다.
        """
        if not self.charge(engine_id):
            return False
        await self.save_state()
        return True

    async def save_state(self) -> None:
        async with self._save_lock:
            state = self.export_state()
            await self._provider.save_state(state)

    def export_state(self) -> CreditState:
        """영속화용 전체 상태 사본 (설정 외 키 포함)"""
        state: CreditState = copy.deepcopy(self._passthrough)
        for engine_id, lock in self._locks.items():
            with lock:
                record = self._records.get(engine_id)
                if record is not None:
                    state[engine_id] = record.to_state()
        return state

    def has_sufficient_credits(self, engine_id: EngineId) -> bool:
        """검색 1회 비용을 감당할 수 있는지 여부

        설정에 없는 엔진은 False (예외 없음), 레코드가 없으면 전체 한도 사용 가능으로 간주.
        """
        engine = self._engines.get(engine_id)
        if engine is None:
            return False
        record = self._records.get(engine_id)
        if record is None:
            return True
        if engine.credit_cost_per_search == 0:
            return True
        remaining = max(engine.monthly_quota - record.used, 0)
        return remaining >= engine.credit_cost_per_search

    def get_snapshot(self, engine_id: EngineId) -> CreditSnapshot:
        engine = self.engine_config(engine_id)
        record = self._records.get(engine_id)
        used = record.used if record is not None else 0
        return CreditSnapshot(engine_id=engine_id, quota=engine.monthly_quota, used=used)

    def list_snapshots(self) -> list[CreditSnapshot]:
        return [self.get_snapshot(engine_id) for engine_id in self._engines]

    def _warn_if_low(self, engine: EngineConfigBase, used: int) -> None:
        threshold = engine.low_credit_threshold_percent
        if threshold is None or engine.monthly_quota <= 0:
            return
        used_percent = used / engine.monthly_quota * 100
        if used_percent >= threshold:
            logger.warning(
                f"[CREDITS] Low credits: engine={engine.id}, "
                f"used={used}/{engine.monthly_quota} ({used_percent:.1f}%)"
            )
