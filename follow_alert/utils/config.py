"""
프로세스별 설정. 프로젝트 루트의 .env(python-dotenv) → 환경 변수 → 기본값 순.

비밀 정보(NID_AUT/NID_SES)는 여기서 읽지 않음. 쿠키는 릴레이로만 서버에 전달됨.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_CHZZK_API = "https://api.chzzk.naver.com"
DEFAULT_NAVER_GAME_API = "https://comm-api.game.naver.com"


def load_env(path: Optional[Path] = None) -> None:
    """프로젝트 루트의 .env 로드 (이미 설정된 환경 변수는 덮어쓰지 않음)."""
    load_dotenv(path or PROJECT_ROOT / ".env")


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    p = Path(raw)
    return p if p.is_absolute() else PROJECT_ROOT / p


@dataclass
class ServiceConfig:
    """로컬 HTTP 서비스 설정"""
    host: str = "127.0.0.1"
    start_port: int = 3000
    settings_path: Path = PROJECT_ROOT / "data" / "settings.json"
    chzzk_api: str = DEFAULT_CHZZK_API
    naver_game_api: str = DEFAULT_NAVER_GAME_API
    upstream_timeout: float = 5.0

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            host=(os.getenv("FOLLOW_ALERT_HOST") or "127.0.0.1").strip(),
            start_port=_env_int("FOLLOW_ALERT_PORT", 3000),
            settings_path=_env_path("SETTINGS_PATH", PROJECT_ROOT / "data" / "settings.json"),
            chzzk_api=(os.getenv("CHZZK_API_BASE") or DEFAULT_CHZZK_API).rstrip("/"),
            naver_game_api=(os.getenv("NAVER_GAME_API_BASE") or DEFAULT_NAVER_GAME_API).rstrip("/"),
            upstream_timeout=_env_float("UPSTREAM_TIMEOUT_SEC", 5.0),
        )


@dataclass
class RelayConfig:
    """쿠키 릴레이(확장 프로그램 역할) 설정"""
    port_start: int = 3000
    port_end: int = 3010
    port_file: Path = PROJECT_ROOT / "data" / "active_port.json"
    cookie_file: Path = PROJECT_ROOT / ".env"
    watch_interval: float = 1.0

    @classmethod
    def from_env(cls) -> "RelayConfig":
        return cls(
            port_start=_env_int("RELAY_PORT_START", 3000),
            port_end=_env_int("RELAY_PORT_END", 3010),
            port_file=_env_path("RELAY_PORT_FILE", PROJECT_ROOT / "data" / "active_port.json"),
            cookie_file=_env_path("RELAY_COOKIE_FILE", PROJECT_ROOT / ".env"),
            watch_interval=_env_float("RELAY_WATCH_INTERVAL_SEC", 1.0),
        )


@dataclass
class ClientConfig:
    """오버레이 클라이언트 설정. base_url 미지정 시 릴레이와 같은 포트 탐색 사용."""
    base_url: Optional[str] = None
    port_start: int = 3000
    port_end: int = 3010

    @classmethod
    def from_env(cls) -> "ClientConfig":
        base_url = (os.getenv("OVERLAY_BASE_URL") or "").strip().rstrip("/") or None
        return cls(
            base_url=base_url,
            port_start=_env_int("RELAY_PORT_START", 3000),
            port_end=_env_int("RELAY_PORT_END", 3010),
        )
