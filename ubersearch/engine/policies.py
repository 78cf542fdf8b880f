"""Selection Policies

- first-success: 우선순위대로 시도, 첫 성공에서 중단
- all: 자격 있는 모든 엔진 호출 (순차/병렬), 결과 병합
- cheapest: 검색당 비용 오름차순 (동률은 설정 순서) 후 first-success
- round-robin: 호출마다 시작 엔진을 회전 후 first-success
"""

import asyncio
from typing import Optional

from ubersearch.core.logging import logger
from ubersearch.core.types import EngineId

from .result import EngineAttempt, StrategyResult
from .strategy import BaseSearchStrategy, Candidate, SearchOptions, StrategyContext


def _apply_limit(items: list, limit: Optional[int]) -> list:
    if limit is not None and limit > 0:
        return items[:limit]
    return items


class FirstSuccessStrategy(BaseSearchStrategy):
    name = "first-success"

    def order_candidates(self, candidates: list[Candidate], context: StrategyContext) -> list[Candidate]:
        return candidates

    async def execute(
        self,
        query: str,
        engine_ids: list[EngineId],
        options: SearchOptions,
        context: StrategyContext,
    ) -> StrategyResult:
        candidates = self.order_candidates(self.check_candidates(engine_ids, context), context)
        search_query = options.to_query(query)
        outcome = StrategyResult()

        for candidate in candidates:
            if not candidate.eligible:
                outcome.attempts.append(EngineAttempt.failed(candidate.engine_id, candidate.skip_reason))
                continue

            response, failure = await self.call_provider(candidate, search_query)
            if failure is not None:
                outcome.attempts.append(failure)
                continue

            attempt = await self.settle(candidate.engine_id, context)
            outcome.attempts.append(attempt)
            if not attempt.success:
                continue

            outcome.results = list(response.items)
            if response.raw is not None:
                outcome.raw[candidate.engine_id] = response.raw
            return outcome

        logger.warning(f"[STRATEGY] {self.name}: all candidates failed for query")
        return outcome


class CheapestFirstStrategy(FirstSuccessStrategy):
    name = "cheapest"

    def order_candidates(self, candidates: list[Candidate], context: StrategyContext) -> list[Candidate]:
        configured = set(context.credit_manager.engine_ids)

        def cost(candidate: Candidate) -> float:
            if candidate.engine_id not in configured:
                return float("inf")
            return context.credit_manager.get_cost(candidate.engine_id)

        # sorted()는 안정 정렬이므로 동률은 설정 순서 유지
        return sorted(candidates, key=cost)


class RoundRobinStrategy(FirstSuccessStrategy):
    name = "round-robin"

    def __init__(self, retry_config=None) -> None:
        super().__init__(retry_config)
        self._cursor = 0

    def order_candidates(self, candidates: list[Candidate], context: StrategyContext) -> list[Candidate]:
        eligible = [c for c in candidates if c.eligible]
        skipped = [c for c in candidates if not c.eligible]
        start = self._cursor % len(eligible)
        self._cursor += 1
        return skipped + eligible[start:] + eligible[:start]


class AllProvidersStrategy(BaseSearchStrategy):
    name = "all"

    async def execute(
        self,
        query: str,
        engine_ids: list[EngineId],
        options: SearchOptions,
        context: StrategyContext,
    ) -> StrategyResult:
        candidates = self.check_candidates(engine_ids, context)
        if options.parallel:
            outcome = await self._execute_parallel(query, candidates, options, context)
        else:
            outcome = await self._execute_sequential(query, candidates, options, context)
        outcome.results = _apply_limit(outcome.results, options.limit)
        return outcome

    async def _execute_sequential(
        self,
        query: str,
        candidates: list[Candidate],
        options: SearchOptions,
        context: StrategyContext,
    ) -> StrategyResult:
        search_query = options.to_query(query)
        outcome = StrategyResult()

        for candidate in candidates:
            if not candidate.eligible:
                outcome.attempts.append(EngineAttempt.failed(candidate.engine_id, candidate.skip_reason))
                continue

            response, failure = await self.call_provider(candidate, search_query)
            if failure is not None:
                outcome.attempts.append(failure)
                continue

            attempt = await self.settle(candidate.engine_id, context)
            outcome.attempts.append(attempt)
            if attempt.success:
                self._merge(outcome, candidate.engine_id, response, options.limit)

        return outcome

    async def _execute_parallel(
        self,
        query: str,
        candidates: list[Candidate],
        options: SearchOptions,
        context: StrategyContext,
    ) -> StrategyResult:
        search_query = options.to_query(query)
        eligible = [c for c in candidates if c.eligible]

        calls = await asyncio.gather(*(self.call_provider(c, search_query) for c in eligible))
        by_engine = {c.engine_id: call for c, call in zip(eligible, calls)}

        # 차감과 병합은 설정 순서대로
        outcome = StrategyResult()
        for candidate in candidates:
            if not candidate.eligible:
                outcome.attempts.append(EngineAttempt.failed(candidate.engine_id, candidate.skip_reason))
                continue

            response, failure = by_engine[candidate.engine_id]
            if failure is not None:
                outcome.attempts.append(failure)
                continue

            attempt = await self.settle(candidate.engine_id, context)
            outcome.attempts.append(attempt)
            if attempt.success:
                self._merge(outcome, candidate.engine_id, response, options.limit)

        return outcome

    @staticmethod
    def _merge(outcome: StrategyResult, engine_id: EngineId, response, limit: Optional[int]) -> None:
        if limit is not None and limit > 0:
            outcome.results.extend(response.items[: max(limit - len(outcome.results), 0)])
        else:
            outcome.results.extend(response.items)
        if response.raw is not None:
            outcome.raw[engine_id] = response.raw
