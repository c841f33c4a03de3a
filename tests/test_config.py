from follow_alert.utils.config import PROJECT_ROOT, ClientConfig, RelayConfig, ServiceConfig


def test_service_config_defaults(monkeypatch):
    for name in ("FOLLOW_ALERT_PORT", "FOLLOW_ALERT_HOST", "SETTINGS_PATH", "CHZZK_API_BASE", "UPSTREAM_TIMEOUT_SEC"):
        monkeypatch.delenv(name, raising=False)
    config = ServiceConfig.from_env()
    assert config.host == "127.0.0.1"
    assert config.start_port == 3000
    assert config.upstream_timeout == 5.0
    assert config.settings_path == PROJECT_ROOT / "data" / "settings.json"


def test_env_overrides_and_bad_numbers(monkeypatch, tmp_path):
    monkeypatch.setenv("FOLLOW_ALERT_PORT", "4100")
    monkeypatch.setenv("UPSTREAM_TIMEOUT_SEC", "not-a-number")
    monkeypatch.setenv("SETTINGS_PATH", str(tmp_path / "s.json"))
    monkeypatch.setenv("CHZZK_API_BASE", "http://mock.local/")
    config = ServiceConfig.from_env()
    assert config.start_port == 4100
    assert config.upstream_timeout == 5.0
    assert config.settings_path == tmp_path / "s.json"
    assert config.chzzk_api == "http://mock.local"


def test_relay_and_client_config(monkeypatch):
    monkeypatch.setenv("RELAY_PORT_START", "3100")
    monkeypatch.setenv("RELAY_PORT_END", "3105")
    monkeypatch.setenv("RELAY_PORT_FILE", "data/port.json")
    monkeypatch.setenv("OVERLAY_BASE_URL", "http://127.0.0.1:3100/")
    relay = RelayConfig.from_env()
    assert (relay.port_start, relay.port_end) == (3100, 3105)
    assert relay.port_file == PROJECT_ROOT / "data" / "port.json"
    client = ClientConfig.from_env()
    assert client.base_url == "http://127.0.0.1:3100"
    assert client.port_start == 3100
