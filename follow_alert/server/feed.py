"""
팔로워 변화 감지 + TTL 큐 + 병합 피드.

클라이언트가 GET /followers 를 호출할 때마다 한 번 실행 (서버 자체 스케줄 없음).
상태는 이벤트 루프에서만 바뀌고, 조회 → 반영은 poll 락 안에서 한 단위로 실행.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional

from follow_alert.chzzk.errors import AuthExpiredError, ChzzkError
from follow_alert.chzzk.follower_client import DEFAULT_PAGE_SIZE, ChzzkFollowerClient
from follow_alert.chzzk.models import FollowerRecord, make_test_follower

logger = logging.getLogger(__name__)

TEST_ENTRY_TTL_SEC = 10.0
REAL_ENTRY_TTL_SEC = 30.0


@dataclass(frozen=True)
class QueueEntry:
    record: FollowerRecord
    created_at: float


class TTLQueue:
    """넣은 순서를 유지하고, ttl초보다 오래된 항목은 expire()에서 버림."""

    def __init__(self, ttl: float):
        self.ttl = ttl
        self._entries: deque[QueueEntry] = deque()

    def push(self, record: FollowerRecord, now: float) -> QueueEntry:
        entry = QueueEntry(record=record, created_at=now)
        self._entries.append(entry)
        return entry

    def expire(self, now: float) -> int:
        before = len(self._entries)
        self._entries = deque(e for e in self._entries if now - e.created_at <= self.ttl)
        return before - len(self._entries)

    def records(self) -> list[FollowerRecord]:
        return [e.record for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[QueueEntry]:
        return iter(self._entries)


class KnownFollowerSet:
    """마지막으로 성공한 폴링 페이지에 있던 identity 집합 (삽입 순서 유지)."""

    def __init__(self, identities: Iterable[str] = ()):
        self._ids: dict[str, None] = dict.fromkeys(identities)

    def reconcile(self, current: Iterable[str]) -> list[str]:
        """현재 페이지와 맞춤. 사라진 identity 제거, 새 identity 추가 후 새로 추가된 목록 반환."""
        current_ids = list(dict.fromkeys(current))
        current_set = set(current_ids)
        for gone in [i for i in self._ids if i not in current_set]:
            del self._ids[gone]
        added = [i for i in current_ids if i not in self._ids]
        for i in added:
            self._ids[i] = None
        return added

    def __contains__(self, identity: object) -> bool:
        return identity in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)


def merge_feed(
    test_records: Iterable[FollowerRecord],
    queued_real: Iterable[FollowerRecord],
    current_page: Iterable[FollowerRecord],
) -> list[FollowerRecord]:
    """테스트 큐 → 실제 큐 → 현재 페이지 나머지 순. identity 기준 첫 등장만 유지."""
    seen: set[str] = set()
    merged: list[FollowerRecord] = []
    for record in (*test_records, *queued_real, *current_page):
        if record.identity in seen:
            continue
        seen.add(record.identity)
        merged.append(record)
    return merged


class FollowerFeed:
    """KnownFollowerSet + 테스트/실제 TTL 큐. 서비스 시작 시 한 번 만들어 앱에 주입."""

    def __init__(
        self,
        poller: ChzzkFollowerClient,
        clock: Callable[[], float] = time.time,
        test_ttl: float = TEST_ENTRY_TTL_SEC,
        real_ttl: float = REAL_ENTRY_TTL_SEC,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.poller = poller
        self.clock = clock
        self.page_size = page_size
        self.known = KnownFollowerSet()
        self.test_queue = TTLQueue(test_ttl)
        self.real_queue = TTLQueue(real_ttl)
        # poll 하나의 조회 → 반영 사이에 다른 poll이 끼어들지 않음
        self._poll_lock = asyncio.Lock()

    def add_test_follower(self, record: Optional[FollowerRecord] = None) -> FollowerRecord:
        record = record or make_test_follower()
        self.test_queue.push(record, self.clock())
        logger.info("[Feed] 테스트 팔로워 추가: %s", record.nickname)
        return record

    def update(self, current_page: Optional[list[FollowerRecord]]) -> list[FollowerRecord]:
        """
        폴링 결과 반영 후 병합 피드 반환.

        Args:
            current_page: 이번 폴링 결과. None이면 조회 실패 (KnownFollowerSet 유지, 실제 팔로워 없음 취급)
        """
        now = self.clock()
        page = current_page or []
        if current_page is not None:
            by_id = {r.identity: r for r in page}
            for identity in self.known.reconcile(r.identity for r in page):
                record = by_id[identity]
                self.real_queue.push(record, now)
                logger.info("[Feed] 새 팔로워 감지: %s", record.nickname)

        self.test_queue.expire(now)
        self.real_queue.expire(now)
        return merge_feed(self.test_queue.records(), self.real_queue.records(), page)

    async def poll(self) -> list[FollowerRecord]:
        """
        업스트림 조회 → update. 조회 실패는 이번 주기 변화 없음으로 처리.

        Raises:
            AuthExpiredError: 401/403 (쿠키는 이미 비워짐). 호출자가 401로 노출
        """
        async with self._poll_lock:
            try:
                current: Optional[list[FollowerRecord]] = await self.poller.fetch_followers(0, self.page_size)
            except AuthExpiredError:
                raise
            except ChzzkError as e:
                logger.warning("[Feed] 실제 팔로워 조회 실패 (테스트 큐만 제공): %s", e)
                current = None
            return self.update(current)


def feed_payload(records: list[FollowerRecord], page: int = 0, size: int = DEFAULT_PAGE_SIZE) -> dict:
    """GET /followers 응답 본문"""
    return {
        "code": 200,
        "message": "Success",
        "content": {
            "page": page,
            "size": size,
            "data": [r.to_dict() for r in records],
        },
    }
