"""
로컬 서비스 포트 탐색·캐시.

서비스는 시작 포트부터 비어 있는 첫 포트에 뜨므로 고정할 수 없음.
정해진 범위를 차례로 GET /settings (500ms 타임아웃) 해서 처음 응답한 포트를 사용하고,
파일에 저장해 재시작 후에도 재사용 (재사용 전 반드시 다시 확인).
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import httpx

logger = logging.getLogger(__name__)

PROBE_PATH = "/settings"
PROBE_TIMEOUT_SEC = 0.5


@dataclass
class PortRecord:
    port: int
    verified_at: float


class PortRegistry:
    """프로세스마다 따로 가지는 활성 포트 기록 (릴레이와 오버레이는 공유하지 않음)."""

    def __init__(
        self,
        port_start: int = 3000,
        port_end: int = 3010,
        store_path: Optional[Union[Path, str]] = None,
        host: str = "127.0.0.1",
        probe_timeout: float = PROBE_TIMEOUT_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            port_start, port_end: 탐색 범위 (양끝 포함)
            store_path: 포트 기록 JSON 경로 (None이면 메모리에만 보관)
            host: 로컬 서비스 호스트
            probe_timeout: 포트당 생존 확인 타임아웃 (초)
            transport: 테스트용 httpx transport
        """
        self.port_start = port_start
        self.port_end = port_end
        self.store_path = Path(store_path) if store_path else None
        self.host = host
        self.probe_timeout = probe_timeout
        self._transport = transport
        self._clock = clock
        self.record: Optional[PortRecord] = None

    def base_url(self, port: int) -> str:
        return f"http://{self.host}:{port}"

    async def probe(self, port: int) -> bool:
        """GET /settings 가 2xx면 True. 타임아웃/연결 거부는 False."""
        try:
            async with httpx.AsyncClient(timeout=self.probe_timeout, transport=self._transport) as client:
                response = await client.get(self.base_url(port) + PROBE_PATH)
        except httpx.HTTPError:
            return False
        return response.is_success

    async def discover(self) -> Optional[int]:
        """범위를 차례로 확인해 처음 응답한 포트를 캐시·저장. 없으면 None (서비스 미실행)."""
        for port in range(self.port_start, self.port_end + 1):
            if await self.probe(port):
                self._remember(port)
                logger.info("[Relay] 로컬 서비스 포트 발견: %d", port)
                return port
        logger.info("[Relay] %d~%d 에서 로컬 서비스를 찾지 못함", self.port_start, self.port_end)
        return None

    async def resolve(self) -> Optional[int]:
        """캐시(또는 저장된) 포트가 아직 응답하면 그 포트, 아니면 discover()."""
        record = self.record or self._load()
        if record is not None:
            if await self.probe(record.port):
                self._remember(record.port)
                return record.port
            logger.info("[Relay] 저장된 포트 %d 응답 없음, 재탐색", record.port)
            self.record = None
        return await self.discover()

    def invalidate(self) -> None:
        """전송 실패 시 호출. 다음 resolve()에서 다시 확인."""
        self.record = None

    def _remember(self, port: int) -> None:
        self.record = PortRecord(port=port, verified_at=self._clock())
        if self.store_path is None:
            return
        try:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
            self.store_path.write_text(json.dumps(asdict(self.record)), encoding="utf-8")
        except OSError as e:
            logger.warning("[Relay] 포트 기록 저장 실패: %s", e)

    def _load(self) -> Optional[PortRecord]:
        if self.store_path is None or not self.store_path.is_file():
            return None
        try:
            data = json.loads(self.store_path.read_text(encoding="utf-8"))
            return PortRecord(port=int(data["port"]), verified_at=float(data.get("verified_at", 0)))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("[Relay] 포트 기록 읽기 실패: %s", e)
            return None
