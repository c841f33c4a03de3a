import httpx
import pytest

from conftest import api_item

from follow_alert.chzzk.errors import AuthExpiredError, MissingCredentialsError, UpstreamError
from follow_alert.chzzk.follower_client import ChzzkFollowerClient
from follow_alert.chzzk.session import SessionStore

PROFILE_PATH = "/nng_main/v1/user/getUserStatus"


def _upstream(followers_status=200, followers=None, seen=None):
    followers = followers if followers is not None else [api_item("a"), api_item("b")]

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path == PROFILE_PATH:
            return httpx.Response(200, json={"code": 200, "content": {"userIdHash": "me", "nickname": "스트리머"}})
        if request.url.path == "/manage/v1/channels/me/followers":
            if followers_status != 200:
                return httpx.Response(followers_status, json={"code": followers_status})
            return httpx.Response(200, json={"code": 200, "content": {"page": 0, "size": 10, "data": followers}})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def _client(transport, with_cookies=True):
    session = SessionStore()
    if with_cookies:
        session.set("aut-value", "ses-value")
    return ChzzkFollowerClient(session, transport=transport), session


@pytest.mark.asyncio
async def test_fetch_followers_sends_cookies_and_caches_profile():
    seen = []
    client, _ = _client(_upstream(seen=seen))

    first = await client.fetch_followers()
    second = await client.fetch_followers(page=0, size=10)

    assert [r.identity for r in first] == ["a", "b"]
    assert second == first
    profile_calls = [r for r in seen if r.url.path == PROFILE_PATH]
    assert len(profile_calls) == 1
    follower_call = seen[-1]
    assert follower_call.headers["Cookie"] == "NID_AUT=aut-value; NID_SES=ses-value"
    assert follower_call.url.params["size"] == "10"
    assert follower_call.url.params["userNickname"] == ""


@pytest.mark.asyncio
async def test_auth_failure_clears_session_and_profile():
    client, session = _client(_upstream(followers_status=401))

    with pytest.raises(AuthExpiredError) as exc_info:
        await client.fetch_followers()

    assert exc_info.value.status_code == 401
    assert session.get() is None
    assert client.profile_id is None

    # 다음 주기는 새 쿠키가 올 때까지 쿠키 없음
    with pytest.raises(MissingCredentialsError):
        await client.fetch_followers()


@pytest.mark.asyncio
async def test_forbidden_is_treated_as_auth_failure():
    client, session = _client(_upstream(followers_status=403))
    with pytest.raises(AuthExpiredError):
        await client.fetch_followers()
    assert session.get() is None


@pytest.mark.asyncio
async def test_server_error_keeps_credentials():
    client, session = _client(_upstream(followers_status=500))
    with pytest.raises(UpstreamError) as exc_info:
        await client.fetch_followers()
    assert exc_info.value.status_code == 500
    assert session.get() is not None
    assert client.profile_id == "me"


@pytest.mark.asyncio
async def test_timeout_becomes_upstream_error():
    def handler(request):
        raise httpx.ReadTimeout("stalled", request=request)

    client, session = _client(httpx.MockTransport(handler))
    with pytest.raises(UpstreamError):
        await client.fetch_followers()
    assert session.get() is not None


@pytest.mark.asyncio
async def test_missing_cookies_do_not_hit_network():
    seen = []
    client, _ = _client(_upstream(seen=seen), with_cookies=False)
    with pytest.raises(MissingCredentialsError):
        await client.fetch_followers()
    assert seen == []


@pytest.mark.asyncio
async def test_malformed_items_are_skipped():
    followers = [api_item("a"), {"user": {"nickname": "no hash"}}, api_item("c")]
    client, _ = _client(_upstream(followers=followers))
    records = await client.fetch_followers()
    assert [r.identity for r in records] == ["a", "c"]


@pytest.mark.asyncio
async def test_expiry_for_replaced_cookies_keeps_new_session():
    session = SessionStore()
    session.set("old-aut", "old-ses")

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == PROFILE_PATH:
            return httpx.Response(200, json={"content": {"userIdHash": "me"}})
        # 요청이 오가는 사이 새 쿠키가 릴레이됨
        session.set("new-aut", "new-ses")
        return httpx.Response(401)

    client = ChzzkFollowerClient(session, transport=httpx.MockTransport(handler))
    with pytest.raises(AuthExpiredError):
        await client.fetch_followers()

    assert session.get().as_dict() == {"NID_AUT": "new-aut", "NID_SES": "new-ses"}
    assert client.profile_id == "me"


@pytest.mark.asyncio
async def test_profile_id_for_replaced_cookies_is_not_cached():
    session = SessionStore()
    session.set("old-aut", "old-ses")

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == PROFILE_PATH:
            session.set("new-aut", "new-ses")
            return httpx.Response(200, json={"content": {"userIdHash": "me"}})
        return httpx.Response(200, json={"content": {"data": [api_item("a")]}})

    client = ChzzkFollowerClient(session, transport=httpx.MockTransport(handler))
    records = await client.fetch_followers()

    assert [r.identity for r in records] == ["a"]
    assert client.profile_id is None
    assert session.get().nid_aut == "new-aut"
