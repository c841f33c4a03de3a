import asyncio
import json

import httpx
import pytest

from conftest import FakeClock

from follow_alert.relay.cookie_relay import Badge, CookieRelay, CookieWatcher
from follow_alert.relay.cookie_source import CookieSource, DotenvCookieSource
from follow_alert.relay.port_registry import PortRegistry


class MemoryCookieSource(CookieSource):
    def __init__(self, **cookies):
        self.cookies = dict(cookies)

    @property
    def domain(self) -> str:
        return ".naver.com"

    def get(self, name):
        return self.cookies.get(name)


class LocalService:
    """3000번 포트에서 /settings, /auth/cookies 를 받는 서비스 대역"""

    def __init__(self, relay_status=200, relay_error=False):
        self.relay_status = relay_status
        self.relay_error = relay_error
        self.posts = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.port != 3000:
            raise httpx.ConnectError("refused", request=request)
        if request.url.path == "/settings":
            return httpx.Response(200, json={})
        if request.url.path == "/auth/cookies":
            if self.relay_error:
                raise httpx.ConnectError("service went away", request=request)
            self.posts.append(request.read())
            return httpx.Response(self.relay_status, json={"success": self.relay_status == 200})
        return httpx.Response(404)


def _relay(service, source=None, clock=None):
    transport = httpx.MockTransport(service)
    registry = PortRegistry(3000, 3002, transport=transport)
    return CookieRelay(
        source or MemoryCookieSource(NID_AUT="aut", NID_SES="ses"),
        registry,
        transport=transport,
        clock=clock or FakeClock(),
    )


@pytest.mark.asyncio
async def test_relay_posts_both_cookies_and_shows_badge():
    service = LocalService()
    relay = _relay(service)

    assert await relay.relay() is True
    assert len(service.posts) == 1
    assert json.loads(service.posts[0]) == {"NID_AUT": "aut", "NID_SES": "ses"}
    assert relay.badge.text == "OK"
    assert relay.badge.color == "#00ffa3"


@pytest.mark.asyncio
async def test_partial_session_is_not_relayed():
    service = LocalService()
    relay = _relay(service, source=MemoryCookieSource(NID_AUT="aut"))

    assert await relay.relay() is False
    assert service.posts == []


@pytest.mark.asyncio
async def test_change_events_are_debounced():
    service = LocalService()
    clock = FakeClock()
    relay = _relay(service, clock=clock)

    assert await relay.on_cookie_changed(".naver.com", "NID_AUT") is True
    clock.advance(0.5)
    assert await relay.on_cookie_changed(".naver.com", "NID_SES") is False
    clock.advance(2.5)
    assert await relay.on_cookie_changed(".naver.com", "NID_SES") is True
    assert len(service.posts) == 2


@pytest.mark.asyncio
async def test_untracked_cookies_are_ignored():
    service = LocalService()
    relay = _relay(service)
    assert await relay.on_cookie_changed(".naver.com", "NNB") is False
    assert await relay.on_cookie_changed(".example.com", "NID_AUT") is False
    assert service.posts == []


@pytest.mark.asyncio
async def test_transport_failure_invalidates_port_without_retry():
    service = LocalService(relay_error=True)
    relay = _relay(service)

    assert await relay.relay() is False
    assert relay.registry.record is None
    assert service.posts == []
    assert relay.badge.text == ""


@pytest.mark.asyncio
async def test_rejected_relay_keeps_badge_clear():
    service = LocalService(relay_status=400)
    relay = _relay(service)
    assert await relay.relay() is False
    assert relay.badge.text == ""


@pytest.mark.asyncio
async def test_no_service_running_is_not_an_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    transport = httpx.MockTransport(handler)
    relay = CookieRelay(
        MemoryCookieSource(NID_AUT="aut", NID_SES="ses"),
        PortRegistry(3000, 3001, transport=transport),
        transport=transport,
    )
    assert await relay.relay() is False


@pytest.mark.asyncio
async def test_watcher_emits_change_events_for_new_values():
    service = LocalService()
    clock = FakeClock()
    source = MemoryCookieSource(NID_AUT="aut", NID_SES="ses")
    relay = _relay(service, source=source, clock=clock)
    watcher = CookieWatcher(relay, resync_interval=None)

    assert await watcher.check_once() == ["NID_AUT", "NID_SES"]
    assert len(service.posts) == 1  # 두 번째 이벤트는 디바운스

    assert await watcher.check_once() == []

    clock.advance(5)
    source.cookies["NID_SES"] = "ses-2"
    assert await watcher.check_once() == ["NID_SES"]
    assert len(service.posts) == 2


@pytest.mark.asyncio
async def test_watcher_resync_relays_periodically():
    service = LocalService()
    clock = FakeClock()
    relay = _relay(service, clock=clock)
    watcher = CookieWatcher(relay, resync_interval=60, clock=clock)

    assert await watcher.maybe_resync() is True
    clock.advance(30)
    assert await watcher.maybe_resync() is False
    clock.advance(31)
    assert await watcher.maybe_resync() is True
    assert len(service.posts) == 2


@pytest.mark.asyncio
async def test_cookie_updated_one_tick_apart_is_relayed_as_a_pair():
    service = LocalService()
    clock = FakeClock()
    source = MemoryCookieSource(NID_AUT="aut", NID_SES="ses")
    relay = _relay(service, source=source, clock=clock)
    watcher = CookieWatcher(relay, resync_interval=None)
    await watcher.check_once()

    clock.advance(5)
    source.cookies["NID_AUT"] = "aut-2"
    assert await watcher.check_once() == ["NID_AUT"]
    clock.advance(1)
    source.cookies["NID_SES"] = "ses-2"
    assert await watcher.check_once() == ["NID_SES"]
    assert json.loads(service.posts[-1]) == {"NID_AUT": "aut-2", "NID_SES": "ses"}

    clock.advance(1.5)
    assert await watcher.check_once() == []
    assert json.loads(service.posts[-1]) == {"NID_AUT": "aut-2", "NID_SES": "ses-2"}
    assert len(service.posts) == 3

    clock.advance(5)
    await watcher.check_once()
    assert len(service.posts) == 3


def test_dotenv_source_rereads_file(tmp_path):
    env = tmp_path / "cookies.env"
    source = DotenvCookieSource(env)
    assert source.get("NID_AUT") is None

    env.write_text("NID_AUT=aut\nNID_SES=\n", encoding="utf-8")
    assert source.get("NID_AUT") == "aut"
    assert source.get("NID_SES") is None

    env.write_text("NID_AUT=aut2\nNID_SES=ses\n", encoding="utf-8")
    assert source.get("NID_AUT") == "aut2"
    assert source.get("NID_SES") == "ses"


def test_badge_clear_without_loop():
    badge = Badge()
    badge.show("OK", "#00ffa3")
    assert badge.text == "OK"
    badge.clear()
    assert badge.text == ""


@pytest.mark.asyncio
async def test_watcher_run_propagates_cancellation():
    service = LocalService()
    watcher = CookieWatcher(_relay(service), interval=0.01, resync_interval=None)

    task = asyncio.create_task(watcher.run())
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert watcher.relay.registry.record.port == 3000
    assert len(service.posts) == 1
