"""
오버레이 폴링 클라이언트.

- 첫 성공 조회: 현재 팔로워 전부 seen에 넣기만 함 (기존 팔로워 알림 없음)
- 이후 조회: seen에 없던 identity만 표시 대기열로
- 이전 조회가 끝난 뒤에만 다음 조회 예약 (겹치지 않음)

서버의 KnownFollowerSet과 동기화하지 않음. 클라이언트 재시작 시 다시 seed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from follow_alert.chzzk.models import FollowerRecord
from follow_alert.overlay.display import AlertPresenter, DisplayStateMachine, LoggingPresenter
from follow_alert.overlay.settings import OverlaySettings
from follow_alert.relay.port_registry import PortRegistry

logger = logging.getLogger(__name__)


class PollState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    INITIAL_SEED = "initial_seed"
    DIFFING = "diffing"


class OverlayClient:
    """GET /followers 폴링 → 새 팔로워를 DisplayStateMachine으로 전달"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        registry: Optional[PortRegistry] = None,
        display: Optional[DisplayStateMachine] = None,
        presenter: Optional[AlertPresenter] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: 로컬 서비스 주소 (예: http://127.0.0.1:3000). 없으면 registry로 포트 탐색
            registry: 포트 탐색기 (base_url 없을 때 필수)
            display: 표시 상태 머신 (없으면 presenter로 생성)
            presenter: 알림 출력 (기본: 로그)
            timeout: 요청 타임아웃 (초)
            transport: 테스트용 httpx transport
        """
        if base_url is None and registry is None:
            raise ValueError("base_url 또는 registry가 필요합니다")
        self.base_url = base_url.rstrip("/") if base_url else None
        self.registry = registry
        self.settings = OverlaySettings()
        self.display = display or DisplayStateMachine(
            presenter or LoggingPresenter(), settings_provider=lambda: self.settings
        )
        self.timeout = timeout
        self._transport = transport
        self.seen: set[str] = set()
        self.seeded = False
        self.state = PollState.IDLE
        self._fetch_lock = asyncio.Lock()
        self._running = False

    async def _resolve_base(self) -> Optional[str]:
        if self.base_url:
            return self.base_url
        port = await self.registry.resolve()
        return self.registry.base_url(port) if port is not None else None

    async def _request(self, method: str, path: str, **kwargs: Any) -> Optional[httpx.Response]:
        """전송 실패는 None (다음 주기에 재시도)"""
        base = await self._resolve_base()
        if base is None:
            logger.debug("[Overlay] 로컬 서비스를 찾지 못함")
            return None
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                return await client.request(method, base + path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("[Overlay] %s %s 실패: %s", method, path, e)
            if self.registry is not None and not self.base_url:
                self.registry.invalidate()
            return None

    async def load_settings(self) -> OverlaySettings:
        """서버 설정을 읽어 적용. 실패하면 기존 설정 유지."""
        response = await self._request("GET", "/settings")
        if response is None or not response.is_success:
            return self.settings
        try:
            self.settings = OverlaySettings.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning("[Overlay] 설정 형식 오류, 기존 설정 유지: %s", e)
        logger.info("[Overlay] 설정 적용: interval=%ss tts=%s", self.settings.pollingInterval, self.settings.enableTTS)
        return self.settings

    async def save_settings(self, values: dict[str, Any]) -> bool:
        """설정 저장 후 다시 읽어 적용 (다음 주기부터 새 폴링 간격)."""
        response = await self._request("POST", "/settings", json=values)
        ok = response is not None and response.is_success
        if not ok:
            logger.warning("[Overlay] 설정 저장 실패")
        await self.load_settings()
        return ok

    def _diff(self, records: list[FollowerRecord]) -> list[FollowerRecord]:
        new: list[FollowerRecord] = []
        for record in records:
            if record.identity in self.seen:
                continue
            self.seen.add(record.identity)
            new.append(record)
        return new

    async def fetch_once(self) -> list[FollowerRecord]:
        """피드 한 번 조회. 이번에 표시 대기열로 보낸 팔로워 목록 반환."""
        async with self._fetch_lock:
            self.state = PollState.FETCHING
            try:
                response = await self._request("GET", "/followers", params={"_t": int(time.time() * 1000)})
                if response is None or not response.is_success:
                    return []
                try:
                    items = response.json()["content"]["data"]
                    records = [FollowerRecord.from_api(item) for item in items]
                except (ValueError, KeyError, TypeError, AttributeError) as e:
                    logger.error("[Overlay] 피드 형식 오류: %s", e)
                    return []

                if not self.seeded:
                    self.state = PollState.INITIAL_SEED
                    self.seen.update(r.identity for r in records)
                    self.seeded = True
                    logger.info("[Overlay] 초기 팔로워 %d명 등록", len(self.seen))
                    return []

                self.state = PollState.DIFFING
                new = self._diff(records)
                if new:
                    logger.info("[Overlay] 새 팔로워 %d명", len(new))
                    self.display.enqueue(new)
                return new
            finally:
                self.state = PollState.IDLE

    async def test_alarm(self) -> list[FollowerRecord]:
        """서버에 테스트 팔로워를 넣고 바로 조회"""
        response = await self._request("POST", "/test-follower")
        if response is None or not response.is_success:
            logger.error("[Overlay] 테스트 팔로워 추가 실패")
            return []
        return await self.fetch_once()

    async def run(self) -> None:
        """설정 로드 → 조회 → (pollingInterval 대기 → 조회) 반복"""
        self._running = True
        await self.load_settings()
        while self._running:
            try:
                await self.fetch_once()
                await asyncio.sleep(self.settings.pollingInterval)
            except Exception as e:
                # 방송 중 무인 실행: 어떤 오류도 폴링을 멈추지 않음
                logger.exception("[Overlay] 폴링 오류: %s", e)
                await asyncio.sleep(self.settings.pollingInterval)

    def stop(self) -> None:
        self._running = False
        self.display.close()
