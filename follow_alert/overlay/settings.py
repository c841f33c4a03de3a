"""오버레이 설정 모델 (서버 /settings 문서와 같은 키 이름)"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OverlaySettings(BaseModel):
    """알 수 없는 키는 그대로 보존 (설정 UI가 추가 키를 저장할 수 있음)"""
    model_config = ConfigDict(extra="allow")

    volume: float = Field(0.5, ge=0.0, le=1.0)
    pollingInterval: float = Field(5, gt=0)  # 초
    displayDuration: float = Field(5, gt=0)  # 초 (설정 UI 표시용, 알림 표시 시간은 고정)
    enableTTS: bool = False
    customSoundPath: Optional[str] = None
    animationType: str = "fade"  # fade, slide-up, slide-down, bounce
    textColor: str = "#ffffff"
    textSize: int = 100  # %

    @property
    def sound_source(self) -> str:
        """알림 사운드 경로 (커스텀 없으면 기본 /public/sound.mp3)"""
        if self.customSoundPath:
            return f"file://{self.customSoundPath}"
        return "/public/sound.mp3"
