"""
세션 쿠키 릴레이: 쿠키 변경 → 로컬 서비스 POST /auth/cookies.

- 2초 안에 다시 들어온 변경 이벤트는 보류했다가 창이 지난 뒤 한 번 전달 (쿠키 재기록 연속 발생 흡수)
- 두 쿠키 중 하나라도 없으면 보내지 않음
- 전송 실패 시 포트 캐시만 무효화하고 즉시 재시도하지 않음 (다음 이벤트/정기 릴레이가 재시도)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

import httpx

from .cookie_source import CookieSource
from .port_registry import PortRegistry

logger = logging.getLogger(__name__)

TRACKED_COOKIES = ("NID_AUT", "NID_SES")
COOKIE_DOMAIN = "naver.com"
DEBOUNCE_SEC = 2.0
RELAY_PATH = "/auth/cookies"


class Badge:
    """확장 프로그램 아이콘 배지 대용. 잠시 표시 후 자동으로 지움."""

    def __init__(self, clear_after: float = 3.0):
        self.clear_after = clear_after
        self.text = ""
        self.color: Optional[str] = None
        self._handle: Optional[asyncio.TimerHandle] = None

    def show(self, text: str, color: str) -> None:
        self.text = text
        self.color = color
        logger.info("[Relay] 배지: %s (%s)", text, color)
        if self._handle is not None:
            self._handle.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._handle = loop.call_later(self.clear_after, self.clear)

    def clear(self) -> None:
        self.text = ""
        self.color = None
        self._handle = None


class CookieRelay:
    """쿠키 변경 이벤트 → 디바운스 → 로컬 서비스로 전달"""

    def __init__(
        self,
        source: CookieSource,
        registry: PortRegistry,
        debounce: float = DEBOUNCE_SEC,
        badge: Optional[Badge] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.registry = registry
        self.debounce = debounce
        self.badge = badge or Badge()
        self.timeout = timeout
        self._transport = transport
        self._clock = clock
        self._last_sent: Optional[float] = None
        self._pending = False  # 디바운스로 보류된 변경이 있음

    @staticmethod
    def is_tracked(domain: str, name: str) -> bool:
        return COOKIE_DOMAIN in (domain or "") and name in TRACKED_COOKIES

    async def on_cookie_changed(self, domain: str, name: str) -> bool:
        """쿠키 변경 알림 진입점. 전달했으면 True."""
        if not self.is_tracked(domain, name):
            return False
        now = self._clock()
        if self._last_sent is not None and now - self._last_sent <= self.debounce:
            logger.debug("[Relay] 디바운스로 보류: %s", name)
            self._pending = True
            return False
        self._last_sent = now
        self._pending = False
        return await self.relay()

    async def flush_pending(self) -> bool:
        """디바운스 창이 지난 뒤 보류된 변경을 한 번 전달 (두 쿠키가 따로 바뀐 경우 짝 맞춤)."""
        if not self._pending:
            return False
        now = self._clock()
        if self._last_sent is not None and now - self._last_sent <= self.debounce:
            return False
        self._last_sent = now
        self._pending = False
        return await self.relay()

    async def relay(self) -> bool:
        """두 쿠키를 읽어 한 번 POST. 성공 시 True."""
        try:
            nid_aut = self.source.get("NID_AUT")
            nid_ses = self.source.get("NID_SES")
        except OSError as e:
            logger.warning("[Relay] 쿠키 읽기 실패: %s", e)
            return False
        if not nid_aut or not nid_ses:
            logger.debug("[Relay] 쿠키 일부 없음, 전송 안 함")
            return False

        port = await self.registry.resolve()
        if port is None:
            return False

        url = self.registry.base_url(port) + RELAY_PATH
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json={"NID_AUT": nid_aut, "NID_SES": nid_ses})
        except httpx.HTTPError as e:
            logger.warning("[Relay] 전송 실패 (포트 %d 무효화): %s", port, e)
            self.registry.invalidate()
            return False

        if not response.is_success:
            logger.warning("[Relay] 서버 거절: HTTP %d", response.status_code)
            return False
        self.badge.show("OK", "#00ffa3")
        logger.info("[Relay] 쿠키 전달 완료 (포트 %d)", port)
        return True


class CookieWatcher:
    """쿠키 출처를 주기적으로 읽어 값이 바뀌면 변경 이벤트 발생. 정기 릴레이도 담당."""

    def __init__(
        self,
        relay: CookieRelay,
        interval: float = 1.0,
        resync_interval: Optional[float] = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            relay: 변경 이벤트를 받을 릴레이
            interval: 쿠키 확인 주기 (초)
            resync_interval: 변경이 없어도 다시 보내는 주기 (서비스 재시작 대비, None이면 안 함)
        """
        self.relay = relay
        self.interval = interval
        self.resync_interval = resync_interval
        self._clock = clock
        self._last_values: dict[str, Optional[str]] = {}
        self._last_resync: Optional[float] = None
        self._running = False

    async def check_once(self) -> list[str]:
        """바뀐 쿠키 이름 목록 반환 (각각 on_cookie_changed 호출)."""
        source = self.relay.source
        changed: list[str] = []
        for name in TRACKED_COOKIES:
            try:
                value = source.get(name)
            except OSError as e:
                logger.warning("[Relay] 쿠키 읽기 실패: %s", e)
                return changed
            if self._last_values.get(name) != value:
                self._last_values[name] = value
                if value is not None:
                    changed.append(name)
        for name in changed:
            await self.relay.on_cookie_changed(source.domain, name)
        await self.relay.flush_pending()
        return changed

    async def maybe_resync(self) -> bool:
        if self.resync_interval is None:
            return False
        now = self._clock()
        if self._last_resync is not None and now - self._last_resync < self.resync_interval:
            return False
        self._last_resync = now
        return await self.relay.relay()

    async def run(self) -> None:
        """시작 시 포트 탐색 후 감시 루프"""
        self._running = True
        await self.relay.registry.discover()
        self._last_resync = self._clock()
        while self._running:
            await self.check_once()
            await self.maybe_resync()
            await asyncio.sleep(self.interval)

    def stop(self) -> None:
        self._running = False
