"""
치지직 팔로워 API 모듈
쿠키 보관소, 팔로워 폴러, 데이터 모델
"""

from .errors import AuthExpiredError, ChzzkError, MissingCredentialsError, UpstreamError
from .follower_client import ChzzkFollowerClient
from .models import FollowerRecord, make_test_follower
from .session import SessionCookies, SessionStore

__all__ = [
    "AuthExpiredError",
    "ChzzkError",
    "ChzzkFollowerClient",
    "FollowerRecord",
    "MissingCredentialsError",
    "SessionCookies",
    "SessionStore",
    "UpstreamError",
    "make_test_follower",
]
