import json

import pytest

from surreal_rpc.config.loader import camel_to_snake, convert_keys, load_config, save_config, snake_to_camel
from surreal_rpc.config.schema import ClientConfig


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for key in ("URL", "USERNAME", "PASSWORD", "NAMESPACE", "DATABASE", "REQUEST_TIMEOUT"):
        monkeypatch.delenv(f"SURREAL_RPC_{key}", raising=False)


def test_load_config_defaults_when_file_missing(tmp_path):
    cfg = load_config(tmp_path / "missing.json")
    assert cfg.url == "ws://127.0.0.1:8000/rpc"
    assert cfg.request_timeout is None
    assert not cfg.has_credentials


def test_load_config_accepts_camel_case_keys(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"url": "wss://db.example/rpc", "requestTimeout": 2.5, "namespace": "n", "database": "d"}))

    cfg = load_config(path)

    assert cfg.url == "wss://db.example/rpc"
    assert cfg.request_timeout == 2.5
    assert cfg.has_namespace


def test_env_vars_fill_fields_missing_from_file(tmp_path, monkeypatch):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"username": "root"}))
    monkeypatch.setenv("SURREAL_RPC_PASSWORD", "from-env")

    cfg = load_config(path)

    assert cfg.password == "from-env"
    assert cfg.has_credentials


def test_load_config_rejects_invalid_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ValueError, match="Failed to load config"):
        load_config(path)

    path.write_text(json.dumps({"requestTimeout": -1}))
    with pytest.raises(ValueError):
        load_config(path)


def test_save_config_round_trips_camel_case(tmp_path):
    path = tmp_path / "nested" / "config.json"
    save_config(ClientConfig(url="ws://x/rpc", open_timeout=3.0), path)

    data = json.loads(path.read_text())
    assert data["url"] == "ws://x/rpc"
    assert data["openTimeout"] == 3.0
    assert load_config(path).open_timeout == 3.0


def test_key_case_helpers():
    assert camel_to_snake("maxMessageSize") == "max_message_size"
    assert snake_to_camel("max_message_size") == "maxMessageSize"
    assert convert_keys({"logLevel": "DEBUG", "nested": [{"pingInterval": 1}]}) == {
        "log_level": "DEBUG",
        "nested": [{"ping_interval": 1}],
    }
