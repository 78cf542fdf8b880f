"""파일 기반 크레딧 상태 저장소

UTF-8 JSON (2-space indent) 파일 하나에 전체 원장을 기록합니다.
동시 쓰기 직렬화는 CreditManager 쪽 asyncio.Lock이 담당하고,
여기서는 "마지막 쓰기 승리" 이상의 원자성은 보장하지 않습니다.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional, Union

from ubersearch.core.config import settings
from ubersearch.core.logging import logger
from ubersearch.core.paths import get_credit_state_path

from .state_provider import CreditState, LoadOutcome


class FileCreditStateProvider:
    def __init__(self, state_path: Optional[Union[str, Path]] = None) -> None:
        if state_path is None:
            state_path = settings.credit_state_path or get_credit_state_path()
        self._state_path = Path(state_path).expanduser()

    def get_state_path(self) -> Path:
        return self._state_path

    async def load_state(self) -> CreditState:
        """상태 로드

        파일 없음/파싱 불가 → {} (파싱 불가는 경고 로그).
        권한 오류 등 OSError는 그대로 전파합니다.
        """
        outcome = await asyncio.to_thread(self._read)
        if outcome.error:
            logger.warning(
                f"[CREDITS] Failed to parse credit state at {self._state_path}: {outcome.error}"
            )
        return outcome.state

    async def save_state(self, state: CreditState) -> None:
        await asyncio.to_thread(self._write, state)
        logger.debug(f"[CREDITS] Saved credit state: {len(state)} engines")

    async def state_exists(self) -> bool:
        return await asyncio.to_thread(self._state_path.is_file)

    def _read(self) -> LoadOutcome:
        if not self._state_path.exists():
            return LoadOutcome.missing()

        # OSError(권한, 디렉토리 등)는 호출자에게 전파
        raw = self._state_path.read_bytes()
        try:
            data = json.loads(raw.decode("utf-8"))
        except ValueError as e:
            # UnicodeDecodeError 포함
            return LoadOutcome.corrupt(str(e))

        if not isinstance(data, dict):
            return LoadOutcome.corrupt(f"top-level JSON must be an object, got {type(data).__name__}")
        return LoadOutcome.loaded(data)

    def _write(self, state: CreditState) -> None:
        self._state_path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(state, indent=2, ensure_ascii=False)
        self._state_path.write_text(payload, encoding="utf-8")
