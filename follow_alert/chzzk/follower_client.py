"""
치지직 팔로워 조회 클라이언트 (쿠키 인증).

- 프로필 ID(userIdHash)는 첫 성공 호출에서만 조회 후 캐시
- 401/403이면 (요청에 쓴 쿠키가 아직 현재 쿠키일 때) 프로필 ID와 세션 쿠키를 모두 비우고 AuthExpiredError (내부 재시도 없음)
- 모든 요청에 타임아웃 (기본 5초)
"""

import logging
from typing import Optional

import httpx

from .errors import AuthExpiredError, MissingCredentialsError, UpstreamError
from .models import FollowerRecord
from .session import SessionCookies, SessionStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class ChzzkFollowerClient:
    """팔로워 목록 폴러"""

    CHZZK_API = "https://api.chzzk.naver.com"
    NAVER_GAME_API = "https://comm-api.game.naver.com"

    def __init__(
        self,
        session: SessionStore,
        chzzk_api: Optional[str] = None,
        naver_game_api: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            session: 릴레이로 받은 쿠키 보관소
            chzzk_api: 팔로워 API 도메인
            naver_game_api: 유저 상태(프로필 ID) API 도메인
            timeout: 요청 타임아웃 (초)
            transport: 테스트용 httpx transport
        """
        self.session = session
        self.chzzk_api = (chzzk_api or self.CHZZK_API).rstrip("/")
        self.naver_game_api = (naver_game_api or self.NAVER_GAME_API).rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self.profile_id: Optional[str] = None

    def reset_profile_id(self) -> None:
        self.profile_id = None

    def _expire(self, cookies: SessionCookies) -> None:
        """만료 응답을 받은 쿠키가 아직 현재 쿠키일 때만 비움 (요청 중 새로 릴레이된 쿠키는 유지)"""
        if self.session.get() is not cookies:
            logger.warning("[Chzzk] 이전 쿠키로 보낸 요청이 만료 응답. 새 쿠키는 유지")
            return
        logger.error("[Chzzk] 세션 만료. 쿠키/프로필 ID 초기화")
        self.session.clear()
        self.profile_id = None

    def _current_cookies(self) -> SessionCookies:
        cookies = self.session.get()
        if cookies is None:
            raise MissingCredentialsError("세션 쿠키가 없습니다. 확장 프로그램 릴레이를 기다리는 중")
        return cookies

    async def _get_json(self, url: str, cookies: SessionCookies, params: Optional[dict] = None) -> dict:
        headers = {"Cookie": cookies.cookie_header()}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise UpstreamError(f"요청 실패: {type(e).__name__}: {e}") from e

        if response.status_code in (401, 403):
            self._expire(cookies)
            raise AuthExpiredError(response.status_code)
        if response.status_code >= 400:
            raise UpstreamError(f"HTTP {response.status_code}: {url}", status_code=response.status_code)
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"JSON 아님: {response.text[:100]}") from e
        if not isinstance(data, dict):
            raise UpstreamError(f"예상과 다른 응답: {data!r}"[:200])
        return data

    async def get_profile_id(self) -> str:
        """로그인 유저의 userIdHash (캐시)"""
        if self.profile_id:
            return self.profile_id

        cookies = self._current_cookies()
        data = await self._get_json(f"{self.naver_game_api}/nng_main/v1/user/getUserStatus", cookies)
        # 공통 응답: {"code": 200, "content": { "userIdHash": ..., "nickname": ... }}
        content = data.get("content") or {}
        profile_id = content.get("userIdHash")
        if not profile_id:
            raise UpstreamError(f"userIdHash 없음 (로그인 안 된 쿠키?): {data}"[:200])
        if self.session.get() is not cookies:
            # 조회 중 쿠키가 바뀜: 캐시하지 않음
            return str(profile_id)
        self.profile_id = str(profile_id)
        logger.info("[Chzzk] 프로필 ID 획득: %s (%s)", self.profile_id, content.get("nickname"))
        return self.profile_id

    async def fetch_followers(self, page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> list[FollowerRecord]:
        """
        팔로워 한 페이지를 순서대로 반환.

        Raises:
            MissingCredentialsError: 쿠키 없음
            AuthExpiredError: 401/403
            UpstreamError: 그 외 실패
        """
        cookies = self._current_cookies()
        profile_id = await self.get_profile_id()
        data = await self._get_json(
            f"{self.chzzk_api}/manage/v1/channels/{profile_id}/followers",
            cookies,
            params={"page": page, "size": size, "userNickname": ""},
        )
        content = data.get("content") or {}
        items = content.get("data") or []
        records: list[FollowerRecord] = []
        for item in items:
            try:
                records.append(FollowerRecord.from_api(item))
            except (ValueError, AttributeError) as e:
                logger.warning("[Chzzk] 팔로워 항목 무시: %s", e)
        return records
