"""커스텀 예외 정의 (Structured Exception Hierarchy)"""
from typing import Any, Optional

from ubersearch.core.types import EngineId, FailureReason


# 기본 예외 클래스
class UberSearchException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 크레딧 원장 관련 예외
class CreditException(UberSearchException):
    """크레딧 원장 관련 예외의 기본 클래스"""
    def __init__(self, message: str, error_code: str = "CREDIT_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CREDIT_ERROR", details)


class UnknownEngineException(CreditException):
    """설정에 없는 엔진 ID를 참조한 경우"""
    def __init__(self, engine_id: EngineId, details: Optional[dict[str, Any]] = None):
        self.engine_id = engine_id
        super().__init__(f"Unknown engine: {engine_id}", "UNKNOWN_ENGINE",
                         details or {"engine_id": engine_id})


class NoCreditRecordException(CreditException):
    """initialize() 전에 원장을 변경하려 한 경우"""
    def __init__(self, engine_id: EngineId, details: Optional[dict[str, Any]] = None):
        self.engine_id = engine_id
        super().__init__(f"No credit record for engine: {engine_id}", "NO_CREDIT_RECORD",
                         details or {"engine_id": engine_id})


# 검색 Provider 관련 예외 (한 번의 호출에 국한, 전략이 잡아서 폴백 결정)
class SearchProviderException(UberSearchException):
    """Provider 호출 실패의 기본 클래스

    reason 태그로 EngineAttempt에 기록되고 재시도 여부 판단에 쓰입니다.
    """
    def __init__(
        self,
        engine_id: EngineId,
        message: str,
        reason: FailureReason = FailureReason.UNKNOWN,
        error_code: str = "PROVIDER_ERROR",
        details: Optional[dict[str, Any]] = None,
    ):
        self.engine_id = engine_id
        self.reason = reason
        merged = {"engine_id": engine_id, "reason": reason.value}
        merged.update(details or {})
        super().__init__(message, error_code or "PROVIDER_ERROR", merged)


class MissingCredentialException(SearchProviderException):
    """자격증명 환경 변수가 없거나 비어 있음 (네트워크 호출 전 실패)"""
    def __init__(self, engine_id: EngineId, env_var: str):
        self.env_var = env_var
        super().__init__(
            engine_id,
            f"Missing environment variable: {env_var}",
            FailureReason.CONFIG_ERROR,
            "MISSING_CREDENTIAL",
            {"env_var": env_var},
        )


class TransportException(SearchProviderException):
    """네트워크 레벨 실패 (연결 거부, 타임아웃, DNS)"""
    def __init__(self, engine_id: EngineId, cause: BaseException):
        self.cause = cause
        super().__init__(
            engine_id,
            f"Network error: {cause}",
            FailureReason.NETWORK_ERROR,
            "TRANSPORT_ERROR",
            {"cause": type(cause).__name__},
        )


class BackendHttpException(SearchProviderException):
    """non-2xx HTTP 응답"""
    def __init__(
        self,
        engine_id: EngineId,
        status_code: int,
        reason_phrase: str,
        provider_name: Optional[str] = None,
        body: str = "",
    ):
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        prefix = f"{provider_name} API error" if provider_name else "API error"
        message = f"{prefix}: HTTP {status_code} {reason_phrase}".rstrip()
        if body:
            message = f"{message} - {body}"
        reason = FailureReason.RATE_LIMIT if status_code == 429 else FailureReason.API_ERROR
        super().__init__(
            engine_id,
            message,
            reason,
            "BACKEND_HTTP_ERROR",
            {"status_code": status_code, "reason_phrase": reason_phrase},
        )


class MalformedResponseException(SearchProviderException):
    """응답 본문을 기대한 구조로 해석할 수 없음"""
    def __init__(self, engine_id: EngineId, reason: str, provider_name: Optional[str] = None):
        prefix = f"Invalid JSON response from {provider_name}" if provider_name else "Invalid JSON response"
        super().__init__(
            engine_id,
            f"{prefix}: {reason}",
            FailureReason.API_ERROR,
            "MALFORMED_RESPONSE",
            {"parse_error": reason},
        )


class EmptyResultException(SearchProviderException):
    """구조는 정상이지만 사용 가능한 결과가 0건"""
    def __init__(self, engine_id: EngineId, provider_name: Optional[str] = None):
        message = f"{provider_name} returned no results" if provider_name else "No results returned"
        super().__init__(engine_id, message, FailureReason.NO_RESULTS, "EMPTY_RESULT")


class ProviderUnavailableException(SearchProviderException):
    """백엔드 헬스체크 실패 (예: 로컬 SearXNG 미기동)"""
    def __init__(self, engine_id: EngineId, message: str):
        super().__init__(engine_id, message, FailureReason.PROVIDER_UNAVAILABLE, "PROVIDER_UNAVAILABLE")


# 엔진 선택 관련 예외
class NoEligibleEngineException(UberSearchException):
    """크레딧이 남은 후보 엔진이 하나도 없음 (Provider 호출 전 실패)"""
    def __init__(self, engine_ids: list[EngineId], attempts: Optional[list[Any]] = None):
        self.engine_ids = list(engine_ids)
        self.attempts = list(attempts or [])
        message = f"No eligible engine among: {', '.join(engine_ids) or '(none)'}"
        super().__init__(message, "NO_ELIGIBLE_ENGINE", {"engine_ids": self.engine_ids})


# 설정 관련 예외
class ConfigurationException(UberSearchException):
    """설정 파일/엔진 구성 오류"""
    def __init__(self, message: str, error_code: str = "CONFIG_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CONFIG_ERROR", details)


class UnknownStrategyException(ConfigurationException):
    """등록되지 않은 전략 이름"""
    def __init__(self, name: str, available: list[str]):
        message = f'Unknown strategy: "{name}". Available strategies: [{", ".join(available)}]'
        super().__init__(message, "UNKNOWN_STRATEGY", {"strategy": name, "available": available})
