"""엔진 설정 파일 로더 (YAML/JSON)

탐색 순서:
    1. 명시적 경로
    2. settings.ubersearch_config_path (UBERSEARCH_CONFIG_PATH)
    3. ./ubersearch.yaml|yml|json
    4. $XDG_CONFIG_HOME/ubersearch/config.yaml|yml|json
설정 파일이 없으면 기본 구성(SearXNG + API 키가 있는 클라우드 엔진)을 사용합니다.
"""
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from ubersearch.core.config import settings
from ubersearch.core.exceptions import ConfigurationException
from ubersearch.core.logging import logger
from ubersearch.core.paths import get_config_search_paths
from ubersearch.schemas.config_schema import UberSearchConfig


def find_config_file(explicit_path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    if explicit_path:
        path = Path(explicit_path).expanduser()
        if not path.is_file():
            raise ConfigurationException(
                f"Config file not found: {path}", "CONFIG_NOT_FOUND", {"path": str(path)}
            )
        return path

    if settings.ubersearch_config_path:
        path = Path(settings.ubersearch_config_path).expanduser()
        if path.is_file():
            return path
        logger.warning(f"[CONFIG] UBERSEARCH_CONFIG_PATH does not exist: {path}")

    for candidate in get_config_search_paths():
        if candidate.is_file():
            return candidate
    return None


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigurationException(
            f"Failed to read config file {path}: {e}", "CONFIG_READ_ERROR", {"path": str(path)}
        ) from e

    try:
        text = raw.decode("utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigurationException(
            f"Failed to parse config file {path}: {e}", "CONFIG_PARSE_ERROR", {"path": str(path)}
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationException(
            f"Config file must contain a mapping: {path}", "CONFIG_PARSE_ERROR", {"path": str(path)}
        )
    return data


def parse_config(data: Dict[str, Any], source: str = "<dict>") -> UberSearchConfig:
    try:
        return UberSearchConfig.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise ConfigurationException(
            f"Invalid configuration in {source}: {'; '.join(errors)}",
            "CONFIG_ERROR",
            {"source": source, "errors": errors},
        ) from e


def get_default_config() -> UberSearchConfig:
    """설정 파일이 없을 때의 기본 구성

    SearXNG(무료)를 항상 첫 번째로 두고, API 키 환경 변수가 있는 클라우드 엔진을
    무료 할당량이 큰 순서(Brave → Tavily → Linkup)로 추가합니다.
    """
    engines = [{
        "id": "searchxng",
        "type": "searchxng",
        "display_name": "SearXNG (Local)",
        "api_key_env": "SEARXNG_API_KEY",
        "endpoint": "http://localhost:8888/search",
        "health_endpoint": "http://localhost:8888/healthz",
        "default_limit": 15,
        "monthly_quota": 10000,
        "credit_cost_per_search": 0,
        "low_credit_threshold_percent": 80,
    }]

    if os.environ.get("BRAVE_API_KEY"):
        engines.append({
            "id": "brave",
            "type": "brave",
            "display_name": "Brave Search",
            "api_key_env": "BRAVE_API_KEY",
            "endpoint": "https://api.search.brave.com/res/v1/web/search",
            "default_limit": 15,
            "monthly_quota": 2000,
            "credit_cost_per_search": 1,
            "low_credit_threshold_percent": 80,
        })

    if os.environ.get("TAVILY_API_KEY"):
        engines.append({
            "id": "tavily",
            "type": "tavily",
            "display_name": "Tavily Search",
            "api_key_env": "TAVILY_API_KEY",
            "endpoint": "https://api.tavily.com/search",
            "search_depth": "basic",
            "monthly_quota": 1000,
            "credit_cost_per_search": 1,
            "low_credit_threshold_percent": 80,
        })

    if os.environ.get("LINKUP_API_KEY"):
        engines.append({
            "id": "linkup",
            "type": "linkup",
            "display_name": "Linkup Search",
            "api_key_env": "LINKUP_API_KEY",
            "endpoint": "https://api.linkup.so/v1/search",
            "monthly_quota": 1000,
            "credit_cost_per_search": 1,
            "low_credit_threshold_percent": 80,
        })

    return parse_config(
        {"default_engine_order": [e["id"] for e in engines], "engines": engines},
        source="<default>",
    )


def load_config(path: Optional[Union[str, Path]] = None) -> UberSearchConfig:
    """엔진 설정 로드

    Raises:
        ConfigurationException: 파일 없음(명시 경로), 파싱 실패, 검증 실패
    """
    config_path = find_config_file(path)
    if config_path is None:
        logger.info("[CONFIG] No config file found, using default configuration")
        return get_default_config()

    logger.info(f"[CONFIG] Loading configuration from {config_path}")
    return parse_config(_read_config_file(config_path), source=str(config_path))
