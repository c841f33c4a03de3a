"""
방송 오버레이: /followers 를 폴링해 새 팔로워 알림을 한 번에 하나씩 표시.

- OBS에서 브라우저 소스 URL을 http://127.0.0.1:{포트}/follower 로 설정 (?obs=true 로 버튼 숨김).
- OverlayClient: 같은 동작을 파이썬 프로세스로 실행 (콘솔/커스텀 출력용).
"""

from follow_alert.overlay.client import OverlayClient, PollState
from follow_alert.overlay.display import (
    AlertPresenter,
    DisplayState,
    DisplayStateMachine,
    LoggingPresenter,
    speech_text,
)
from follow_alert.overlay.settings import OverlaySettings

__all__ = [
    "AlertPresenter",
    "DisplayState",
    "DisplayStateMachine",
    "LoggingPresenter",
    "OverlayClient",
    "OverlaySettings",
    "PollState",
    "speech_text",
]
