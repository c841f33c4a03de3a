"""
오버레이 설정 JSON 파일 (단일 문서, 버전 없음, 키 단위 마지막 쓰기 우선).
"""

import json
import logging
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)


class SettingsError(Exception):
    """설정 파일 읽기/쓰기 실패"""


class SettingsStore:
    def __init__(self, path: Union[Path, str]):
        self.path = Path(path)

    def load(self) -> dict[str, Any]:
        """저장된 설정. 파일이 없으면 빈 dict."""
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise SettingsError(f"설정 읽기 실패: {e}") from e
        if not isinstance(data, dict):
            raise SettingsError(f"설정 파일 형식 오류: {self.path}")
        return data

    def save(self, values: dict[str, Any]) -> dict[str, Any]:
        """기존 문서에 키 단위로 덮어써 저장하고 저장된 전체 문서 반환. 기존 문서가 깨졌으면 values만 저장."""
        try:
            current = self.load()
        except SettingsError as e:
            logger.warning("[Settings] 기존 설정을 읽을 수 없어 새로 씀: %s", e)
            current = {}
        merged = {**current, **values}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(merged, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except (OSError, TypeError) as e:
            raise SettingsError(f"설정 저장 실패: {e}") from e
        logger.info("[Settings] 저장 완료: %s", sorted(values))
        return merged
