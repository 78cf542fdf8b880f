"""XDG 기반 경로 해석"""
import os
from pathlib import Path

APP_DIR_NAME = "ubersearch"


def get_state_home() -> Path:
    xdg = os.environ.get("XDG_STATE_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".local" / "state"


def get_config_home() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def get_credit_state_path() -> Path:
    """기본 크레딧 상태 파일 경로

    $XDG_STATE_HOME/ubersearch/credits.json, 미설정 시
    ~/.local/state/ubersearch/credits.json
    """
    return get_state_home() / APP_DIR_NAME / "credits.json"


def get_config_search_paths() -> list[Path]:
    """설정 파일 탐색 후보 (현재 디렉토리 → XDG config 순)"""
    cwd = Path.cwd()
    config_dir = get_config_home() / APP_DIR_NAME
    candidates = []
    for base, stem in ((cwd, "ubersearch"), (config_dir, "config")):
        for ext in ("yaml", "yml", "json"):
            candidates.append(base / f"{stem}.{ext}")
    return candidates
