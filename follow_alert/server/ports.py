"""로컬 서비스 포트 자동 선택 (다른 인스턴스와 충돌 방지)"""

import logging
import socket

logger = logging.getLogger(__name__)


def is_port_free(port: int, host: str = "127.0.0.1") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_available_port(start: int, host: str = "127.0.0.1", limit: int = 100) -> int:
    """start 이상에서 처음으로 bind 가능한 포트. 모두 실패하면 start."""
    for port in range(start, start + limit):
        if is_port_free(port, host):
            if port != start:
                logger.info("[Server] 포트 %d 사용 중 → %d 선택", start, port)
            return port
    logger.warning("[Server] %d~%d 모두 사용 중, %d로 시도", start, start + limit - 1, start)
    return start
