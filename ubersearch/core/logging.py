"""로깅 설정 및 자격증명 마스킹

- "ubersearch" 로거 하나에 stderr 핸들러를 붙입니다 (stdout은 검색 결과 출력용).
- 엔진 설정의 api_key_env가 가리키는 환경 변수 값은 로그에 그대로 남지 않도록
  로거 필터에서 "***"로 치환합니다. 값은 기록 시점에 환경에서 다시 읽습니다.
"""
import logging
import os
import sys
from typing import Iterable, Set

from ubersearch.core.config import settings

SECRET_MASK = "***"

# 이보다 짧은 값은 마스킹하지 않음 (짧은 문자열이 메시지 전체를 가리는 것 방지)
MIN_SECRET_LENGTH = 4

_secret_env_vars: Set[str] = {
    "TAVILY_API_KEY",
    "BRAVE_API_KEY",
    "LINKUP_API_KEY",
    "SEARXNG_API_KEY",
}


def register_secret_env(*names: str) -> None:
    """마스킹 대상 환경 변수 이름 추가 (설정된 엔진의 api_key_env)"""
    _secret_env_vars.update(name for name in names if name)


def get_secret_env_vars() -> Set[str]:
    return set(_secret_env_vars)


def _current_secrets() -> Iterable[str]:
    values = {os.environ.get(name, "") for name in _secret_env_vars}
    # 긴 값부터 치환해야 한 키가 다른 키의 접두사일 때도 남김없이 가려진다
    return sorted((v for v in values if len(v) >= MIN_SECRET_LENGTH), key=len, reverse=True)


def redact_secrets(text: str) -> str:
    for secret in _current_secrets():
        text = text.replace(secret, SECRET_MASK)
    return text


class SecretRedactingFilter(logging.Filter):
    """레코드 메시지에서 자격증명 값을 치환"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_secrets(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _is_production() -> bool:
    return os.getenv("ENVIRONMENT", "development") == "production"


def setup_logging() -> logging.Logger:
    """로거 초기화 및 설정 (여러 번 호출해도 핸들러/필터는 하나)"""
    logger = logging.getLogger("ubersearch")

    production = _is_production()
    log_level = settings.log_level.upper()
    if production and log_level == "DEBUG":
        log_level = "INFO"
    level = getattr(logging, log_level, logging.INFO)
    logger.setLevel(level)

    if production:
        fmt = "%(asctime)s - %(levelname)s - %(message)s"
    else:
        fmt = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    if not any(isinstance(f, SecretRedactingFilter) for f in logger.filters):
        logger.addFilter(SecretRedactingFilter())

    return logger


logger = setup_logging()


def sanitize_for_log(value: str, max_length: int = 100) -> str:
    """사용자 입력(검색어 등)을 로그 한 줄에 안전하게 넣을 형태로 변환

    줄바꿈은 공백으로 바꾸고, 자격증명 값은 마스킹하고, max_length를 넘으면 자릅니다.
    """
    if not value:
        return "[empty]"

    result = redact_secrets(" ".join(value.splitlines()))
    if len(result) > max_length:
        result = result[:max_length] + "..."
    return result
