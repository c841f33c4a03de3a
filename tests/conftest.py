"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# 프로젝트 루트를 path에 넣어서 'import follow_alert' 가능하게 함
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from follow_alert.chzzk.models import FollowerRecord  # noqa: E402


class FakeClock:
    """수동으로 진행시키는 시계 (초)"""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_record(identity: str, nickname: str = "") -> FollowerRecord:
    return FollowerRecord(
        identity=identity,
        nickname=nickname or f"user-{identity}",
        profile_image_url=None,
        following_since="2026-01-01 00:00:00",
    )


def api_item(identity: str, nickname: str = "") -> dict:
    return make_record(identity, nickname).to_dict()


@pytest.fixture
def clock():
    return FakeClock()
