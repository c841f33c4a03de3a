"""치지직 API 호출 오류"""

from typing import Optional


class ChzzkError(Exception):
    """치지직 API 관련 오류 공통 기반"""


class MissingCredentialsError(ChzzkError):
    """세션 쿠키(NID_AUT/NID_SES)가 아직 릴레이되지 않음"""


class AuthExpiredError(ChzzkError):
    """401/403 응답. 쿠키와 프로필 ID는 이미 비워진 상태."""

    def __init__(self, status_code: int, message: str = "세션 만료"):
        super().__init__(f"{message} (HTTP {status_code})")
        self.status_code = status_code


class UpstreamError(ChzzkError):
    """그 외 HTTP 오류, 타임아웃, 응답 형식 오류"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
