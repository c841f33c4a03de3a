"""
알림 표시 상태 머신: Idle → Showing → Cooldown → Idle.

한 번에 알림 하나만 표시. 표시 5초 후 숨기고 0.5초 쉰 뒤 다음 알림.
타이머는 asyncio call_later 핸들로 관리 (콜백 체인 대신 상태 전이).
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import deque
from enum import Enum
from typing import Callable, Iterable, Optional

from follow_alert.chzzk.models import FollowerRecord
from follow_alert.overlay.settings import OverlaySettings

logger = logging.getLogger(__name__)

DISPLAY_DWELL_SEC = 5.0
DISPLAY_COOLDOWN_SEC = 0.5


def speech_text(nickname: str) -> str:
    """TTS 문구 (ko-KR)"""
    return f"{nickname}님이 팔로우했습니다."


class DisplayState(str, Enum):
    IDLE = "idle"
    SHOWING = "showing"
    COOLDOWN = "cooldown"


class AlertPresenter(ABC):
    """화면/소리 출력 담당 (렌더링·사운드·TTS는 여기서만)"""

    @abstractmethod
    def show(self, record: FollowerRecord, settings: OverlaySettings) -> None:
        pass

    @abstractmethod
    def hide(self) -> None:
        pass


class LoggingPresenter(AlertPresenter):
    """콘솔 출력용. 실제 방송 화면은 /follower 페이지가 담당."""

    def show(self, record: FollowerRecord, settings: OverlaySettings) -> None:
        logger.info("[SHOW] %s (sound=%s, volume=%.2f)", record.nickname, settings.sound_source, settings.volume)
        print(f"🔔 새 팔로워: {record.nickname}")
        if settings.enableTTS:
            logger.info("[TTS] %s", speech_text(record.nickname))

    def hide(self) -> None:
        logger.debug("[HIDE]")


class DisplayStateMachine:
    """표시 대기열 + 3상태 머신. 폴링 루프와 독립적으로 동작."""

    def __init__(
        self,
        presenter: AlertPresenter,
        settings_provider: Optional[Callable[[], OverlaySettings]] = None,
        dwell: float = DISPLAY_DWELL_SEC,
        cooldown: float = DISPLAY_COOLDOWN_SEC,
    ):
        self.presenter = presenter
        self.settings_provider = settings_provider or OverlaySettings
        self.dwell = dwell
        self.cooldown = cooldown
        self.state = DisplayState.IDLE
        self.queue: deque[FollowerRecord] = deque()
        self.current: Optional[FollowerRecord] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._idle = asyncio.Event()
        self._idle.set()

    def enqueue(self, records: Iterable[FollowerRecord]) -> None:
        """도착 순서대로 대기열에 추가 후 Idle이면 바로 표시 시작."""
        added = list(records)
        if not added:
            return
        self.queue.extend(added)
        self._idle.clear()
        self._advance()

    def _advance(self) -> None:
        if self.state is not DisplayState.IDLE:
            return
        if not self.queue:
            self._idle.set()
            return
        self.current = self.queue.popleft()
        self.state = DisplayState.SHOWING
        try:
            self.presenter.show(self.current, self.settings_provider())
        except Exception as e:
            # 사운드/TTS 실패는 표시 주기에 영향 없음
            logger.error("[Display] 알림 출력 실패: %s", e)
        self._timer = asyncio.get_running_loop().call_later(self.dwell, self._end_showing)

    def _end_showing(self) -> None:
        self.state = DisplayState.COOLDOWN
        self.current = None
        try:
            self.presenter.hide()
        except Exception as e:
            logger.error("[Display] 알림 숨기기 실패: %s", e)
        self._timer = asyncio.get_running_loop().call_later(self.cooldown, self._end_cooldown)

    def _end_cooldown(self) -> None:
        self.state = DisplayState.IDLE
        self._timer = None
        self._advance()

    async def wait_idle(self) -> None:
        """대기열이 비고 Idle이 될 때까지 대기"""
        await self._idle.wait()

    def close(self) -> None:
        """진행 중 타이머 취소, 대기열 비움"""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.current is not None:
            self.presenter.hide()
        self.queue.clear()
        self.current = None
        self.state = DisplayState.IDLE
        self._idle.set()
