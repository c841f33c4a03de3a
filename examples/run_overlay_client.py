"""
오버레이 클라이언트 실행 (콘솔 출력)

실행: python examples/run_overlay_client.py
- OVERLAY_BASE_URL 이 없으면 3000~3010 에서 로컬 서비스를 찾습니다.
- 시작 시 이미 있는 팔로워는 알리지 않고, 이후 새 팔로워만 한 명씩 표시합니다.
- --test 옵션: 시작 후 테스트 팔로워 1명 추가
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from follow_alert.overlay import OverlayClient
from follow_alert.relay import PortRegistry
from follow_alert.utils import ClientConfig, load_env, setup_logging

load_env()


async def main():
    setup_logging()
    config = ClientConfig.from_env()
    registry = None if config.base_url else PortRegistry(config.port_start, config.port_end)
    client = OverlayClient(base_url=config.base_url, registry=registry)

    poll_task = asyncio.create_task(client.run())
    if "--test" in sys.argv:
        await asyncio.sleep(1)
        await client.test_alarm()

    print("팔로워 폴링 중... (종료: Ctrl+C)")
    try:
        await poll_task
    except KeyboardInterrupt:
        pass
    finally:
        client.stop()
        poll_task.cancel()
        try:
            await poll_task
        except asyncio.CancelledError:
            pass


if __name__ == "__main__":
    asyncio.run(main())
