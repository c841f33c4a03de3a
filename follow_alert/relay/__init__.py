"""
쿠키 릴레이 (브라우저 확장 프로그램 역할)
로컬 서비스 포트를 찾아 세션 쿠키를 전달
"""

from .cookie_relay import Badge, CookieRelay, CookieWatcher
from .cookie_source import CookieSource, DotenvCookieSource
from .port_registry import PortRecord, PortRegistry

__all__ = [
    "Badge",
    "CookieRelay",
    "CookieSource",
    "CookieWatcher",
    "DotenvCookieSource",
    "PortRecord",
    "PortRegistry",
]
