"""
치지직 팔로워 데이터 모델

API 응답 형식: {"user": {"userIdHash", "nickname", "profileImageUrl"}, "followingSince"}
오버레이 피드(/followers)도 같은 형식으로 내보냄.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

TEST_NICKNAME = "테스트 유저"
TEST_ID_PREFIX = "test_"


@dataclass(frozen=True)
class FollowerRecord:
    """팔로워 1명 (한 번 가져오면 변경하지 않음)"""
    identity: str  # userIdHash, 중복 제거 키
    nickname: str
    profile_image_url: Optional[str] = None
    following_since: Optional[str] = None

    @property
    def is_test(self) -> bool:
        return self.identity.startswith(TEST_ID_PREFIX)

    @classmethod
    def from_api(cls, item: dict) -> "FollowerRecord":
        """API data[] 항목 → FollowerRecord. userIdHash 없으면 ValueError."""
        user = item.get("user") or {}
        identity = user.get("userIdHash")
        if not identity:
            raise ValueError(f"userIdHash 없음: {item}")
        return cls(
            identity=str(identity),
            nickname=str(user.get("nickname") or ""),
            profile_image_url=user.get("profileImageUrl"),
            following_since=item.get("followingSince"),
        )

    def to_dict(self) -> dict:
        return {
            "user": {
                "userIdHash": self.identity,
                "nickname": self.nickname,
                "profileImageUrl": self.profile_image_url,
            },
            "followingSince": self.following_since,
        }


def make_test_follower(now: Optional[datetime] = None) -> FollowerRecord:
    """수동 확인용 가짜 팔로워. identity는 매번 고유 (test_{ms}_{uuid})."""
    now = now or datetime.now()
    millis = int(now.timestamp() * 1000)
    return FollowerRecord(
        identity=f"{TEST_ID_PREFIX}{millis}_{uuid.uuid4().hex}",
        nickname=TEST_NICKNAME,
        profile_image_url=None,
        following_since=now.strftime("%Y-%m-%d %H:%M:%S"),
    )
