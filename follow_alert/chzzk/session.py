"""
네이버 세션 쿠키 보관소 (NID_AUT / NID_SES).

로컬 서비스는 쿠키를 직접 읽지 않음. 확장 프로그램(릴레이)이 POST /auth/cookies 로
보내 준 값만 보관하고, 인증 만료 시 비움.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

COOKIE_DOMAIN = ".naver.com"
COOKIE_NAMES = ("NID_AUT", "NID_SES")


@dataclass(frozen=True)
class SessionCookies:
    nid_aut: str
    nid_ses: str
    updated_at: float

    def as_dict(self) -> dict[str, str]:
        return {"NID_AUT": self.nid_aut, "NID_SES": self.nid_ses}

    def cookie_header(self) -> str:
        return "; ".join(f"{k}={v}" for k, v in self.as_dict().items())


class SessionStore:
    """세션 쿠키 두 개와 갱신 시각. 프로세스 시작 시 한 번 만들어 주입."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._cookies: Optional[SessionCookies] = None

    def set(self, nid_aut: str, nid_ses: str) -> SessionCookies:
        self._cookies = SessionCookies(nid_aut=nid_aut, nid_ses=nid_ses, updated_at=self._clock())
        return self._cookies

    def get(self) -> Optional[SessionCookies]:
        return self._cookies

    def clear(self) -> None:
        self._cookies = None

    def age(self) -> Optional[float]:
        """마지막 릴레이 후 경과 초 (없으면 None)"""
        if self._cookies is None:
            return None
        return self._clock() - self._cookies.updated_at

    def cookies_for_domain(self, domain: str) -> dict[str, str]:
        """디버그용: naver.com(또는 하위 도메인)이면 쿠키 맵, 아니면 빈 dict."""
        d = (domain or "").strip().lower().lstrip(".")
        base = COOKIE_DOMAIN.lstrip(".")
        if self._cookies is None or not (d == base or d.endswith("." + base)):
            return {}
        return self._cookies.as_dict()
