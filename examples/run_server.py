"""
팔로워 알림 로컬 서버 실행

실행: python examples/run_server.py  (프로젝트 루트에서)
- FOLLOW_ALERT_PORT(기본 3000)부터 비어 있는 첫 포트를 사용합니다 (다른 인스턴스와 충돌 방지).
- 쿠키는 확장 프로그램(또는 examples/run_relay.py)이 POST /auth/cookies 로 보내 줍니다.
- OBS 브라우저 소스: http://127.0.0.1:{포트}/follower?obs=true
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import logging

import uvicorn

from follow_alert.server import build_state, create_app, find_available_port
from follow_alert.utils import ServiceConfig, load_env, setup_logging

load_env()
logger = logging.getLogger(__name__)


def main():
    log_dir = setup_logging()
    config = ServiceConfig.from_env()
    state = build_state(
        config.settings_path,
        chzzk_api=config.chzzk_api,
        naver_game_api=config.naver_game_api,
        upstream_timeout=config.upstream_timeout,
    )
    app = create_app(state)

    port = find_available_port(config.start_port, host=config.host)
    logger.info("Server: http://%s:%d (logs: %s)", config.host, port, log_dir)
    print(f"팔로워 알림 서버: http://{config.host}:{port}/follower  (OBS: ?obs=true)")
    uvicorn.run(app, host=config.host, port=port, log_level="warning")


if __name__ == "__main__":
    main()
