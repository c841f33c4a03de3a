"""
쿠키 릴레이 실행 (브라우저 확장 프로그램 대용)

사용 방법:
1. 브라우저에서 네이버 로그인 후 개발자 도구 → 쿠키에서 NID_AUT, NID_SES 복사
2. 프로젝트 루트 .env (또는 RELAY_COOKIE_FILE) 에 NID_AUT=..., NID_SES=... 입력
3. 이 스크립트 실행: 로컬 서비스 포트(3000~3010)를 찾아 쿠키를 전달합니다
   파일의 쿠키 값이 바뀌면 자동으로 다시 전달합니다.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from follow_alert.relay import CookieRelay, CookieWatcher, DotenvCookieSource, PortRegistry
from follow_alert.utils import RelayConfig, load_env, setup_logging

load_env()


async def main():
    setup_logging()
    config = RelayConfig.from_env()
    registry = PortRegistry(config.port_start, config.port_end, store_path=config.port_file)
    relay = CookieRelay(DotenvCookieSource(config.cookie_file), registry)
    watcher = CookieWatcher(relay, interval=config.watch_interval)

    print(f"쿠키 파일 감시 중: {config.cookie_file} (종료: Ctrl+C)")
    try:
        await watcher.run()
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()


if __name__ == "__main__":
    asyncio.run(main())
