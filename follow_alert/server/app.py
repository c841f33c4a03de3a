"""
팔로워 알림 로컬 HTTP 서버 (127.0.0.1, 포트 자동 선택).

- GET/POST /settings: 설정 읽기·저장 (GET은 확장 프로그램 포트 탐색 생존 확인용으로도 사용)
- POST /auth/cookies: 확장 프로그램이 보내는 세션 쿠키
- GET /followers: 병합 피드 (오버레이가 폴링)
- POST /test-follower: 테스트 알림
- GET /follower: OBS 브라우저 소스용 오버레이 페이지
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from follow_alert.chzzk.errors import AuthExpiredError
from follow_alert.chzzk.follower_client import ChzzkFollowerClient
from follow_alert.chzzk.session import SessionStore
from follow_alert.overlay.page import NOTIFIER_HTML
from follow_alert.server.feed import FollowerFeed, feed_payload
from follow_alert.server.settings_store import SettingsError, SettingsStore

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_PUBLIC_DIR = _PROJECT_ROOT / "public"

# http://localhost*, http://127.0.0.1* 만 Access-Control-Allow-Origin 반환
LOCAL_ORIGIN_REGEX = r"http://(localhost|127\.0\.0\.1)(:\d+)?"

logger = logging.getLogger(__name__)


class CookiePayload(BaseModel):
    NID_AUT: Optional[str] = None
    NID_SES: Optional[str] = None


@dataclass
class ServiceState:
    """프로세스 단위 상태. 시작 시 한 번 만들고 재설정하지 않음.

    핸들러는 모두 async라 이벤트 루프 한 스레드에서만 변경됨 (락 없음).
    """
    session: SessionStore
    poller: ChzzkFollowerClient
    feed: FollowerFeed
    settings: SettingsStore


def build_state(
    settings_path: Path,
    chzzk_api: Optional[str] = None,
    naver_game_api: Optional[str] = None,
    upstream_timeout: float = 5.0,
) -> ServiceState:
    session = SessionStore()
    poller = ChzzkFollowerClient(
        session,
        chzzk_api=chzzk_api,
        naver_game_api=naver_game_api,
        timeout=upstream_timeout,
    )
    return ServiceState(
        session=session,
        poller=poller,
        feed=FollowerFeed(poller),
        settings=SettingsStore(settings_path),
    )


def create_app(state: ServiceState) -> FastAPI:
    app = FastAPI(title="Chzzk Follow Alert", docs_url=None, redoc_url=None)
    app.state.service = state
    if _PUBLIC_DIR.is_dir():
        app.mount("/public", StaticFiles(directory=str(_PUBLIC_DIR)), name="public")
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=LOCAL_ORIGIN_REGEX,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        logger.warning("Server: 잘못된 요청 %s %s", request.url.path, exc.errors())
        return JSONResponse({"success": False, "error": "Invalid request body"}, status_code=400)

    @app.get("/settings")
    async def load_settings():
        """저장된 설정 (없으면 {}). 포트 탐색 probe 대상."""
        try:
            return JSONResponse(state.settings.load())
        except SettingsError as e:
            logger.error("Server: %s", e)
            return JSONResponse({"success": False, "error": str(e)}, status_code=500)

    @app.post("/settings")
    async def save_settings(request: Request):
        try:
            payload = await request.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            return JSONResponse({"success": False, "error": "Invalid settings format"}, status_code=400)
        try:
            state.settings.save(payload)
        except SettingsError as e:
            logger.error("Server: %s", e)
            return JSONResponse({"success": False, "error": "Failed to save settings"}, status_code=500)
        return JSONResponse({"success": True})

    @app.post("/auth/cookies")
    async def receive_cookies(payload: CookiePayload):
        """확장 프로그램에서 릴레이한 NID_AUT/NID_SES. 둘 중 하나라도 없으면 400, 상태 변경 없음."""
        if not payload.NID_AUT or not payload.NID_SES:
            logger.warning("Server: 쿠키 릴레이 필드 누락")
            return JSONResponse({"success": False, "error": "NID_AUT and NID_SES are required"}, status_code=400)
        try:
            state.session.set(payload.NID_AUT, payload.NID_SES)
            # 다른 계정일 수 있으므로 프로필 ID는 다음 폴링에서 다시 조회
            state.poller.reset_profile_id()
        except Exception as e:
            logger.exception("Server: 쿠키 저장 실패: %s", e)
            return JSONResponse({"success": False, "error": "Failed to store cookies"}, status_code=500)
        logger.info("Server: 확장 프로그램에서 쿠키 수신")
        return JSONResponse({"success": True})

    @app.post("/test-follower")
    async def test_follower():
        state.feed.add_test_follower()
        return JSONResponse({"success": True, "message": "Test follower added to queue"})

    @app.get("/followers")
    async def get_followers():
        """병합 피드. 업스트림 401/403이면 401 (쿠키는 이미 비워짐)."""
        try:
            records = await state.feed.poll()
        except AuthExpiredError as e:
            logger.error("Server: %s", e)
            return JSONResponse(
                {"code": "401", "message": "Authentication failed or API request error"},
                status_code=401,
            )
        return JSONResponse(feed_payload(records, page=0, size=state.feed.page_size))

    @app.get("/cookies")
    async def get_cookies():
        """디버그용 쿠키 확인"""
        cookies = state.session.get()
        return JSONResponse(cookies.as_dict() if cookies else {})

    @app.get("/cookies/{domain}")
    async def get_cookies_for_domain(domain: str):
        return JSONResponse(state.session.cookies_for_domain(domain))

    @app.get("/follower", response_class=HTMLResponse)
    async def notifier_page():
        """OBS 브라우저 소스에 넣을 URL (?obs=true 면 버튼 숨김)."""
        return HTMLResponse(NOTIFIER_HTML, headers={"Cache-Control": "no-cache, no-store, must-revalidate"})

    return app
