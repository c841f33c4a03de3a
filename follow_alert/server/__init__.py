"""
팔로워 알림 로컬 서버: 쿠키 수신, 팔로워 변화 감지, 오버레이 피드 제공.
"""

from follow_alert.server.app import ServiceState, build_state, create_app
from follow_alert.server.feed import FollowerFeed, KnownFollowerSet, TTLQueue, merge_feed
from follow_alert.server.ports import find_available_port

__all__ = [
    "FollowerFeed",
    "KnownFollowerSet",
    "ServiceState",
    "TTLQueue",
    "build_state",
    "create_app",
    "find_available_port",
    "merge_feed",
]
