"""
세션 쿠키 출처 (브라우저 쿠키 API 대용).

릴레이는 쿠키 값을 읽기만 하고, 변경 감지는 CookieWatcher가 폴링으로 처리.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from dotenv import dotenv_values


class CookieSource(ABC):
    """쿠키 읽기 인터페이스"""

    @property
    @abstractmethod
    def domain(self) -> str:
        """쿠키 도메인 (예: 'naver.com')"""
        pass

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """쿠키 값. 없으면 None"""
        pass


class DotenvCookieSource(CookieSource):
    """dotenv 파일의 NID_AUT / NID_SES 를 매번 다시 읽음 (브라우저에서 복사해 붙여넣기)."""

    def __init__(self, path: Union[Path, str], domain: str = ".naver.com"):
        self.path = Path(path)
        self._domain = domain

    @property
    def domain(self) -> str:
        return self._domain

    def get(self, name: str) -> Optional[str]:
        if not self.path.is_file():
            return None
        value = dotenv_values(self.path).get(name)
        value = (value or "").strip()
        return value or None
