import json

from typer.testing import CliRunner

import surreal_rpc.cli.commands as commands
from fakes import FakeTransport
from surreal_rpc.rpc import transport as transport_module
from surreal_rpc.rpc.errors import TransportError
from surreal_rpc.rpc.serialization import decode_response_payload

runner = CliRunner()


def _patch_connect(monkeypatch, fake: FakeTransport) -> None:
    async def _connect(cls, url, **kwargs):
        return fake

    monkeypatch.setattr(transport_module.WebSocketTransport, "connect", classmethod(_connect))


def test_query_prints_each_statement(monkeypatch, tmp_path):
    fake = FakeTransport()
    fake.reply_with(
        lambda frame: [
            {"time": "1ms", "status": "OK", "result": [{"id": "stuff:abc", "name": "x"}]},
            {"time": "2ms", "status": "OK", "result": []},
        ]
    )
    _patch_connect(monkeypatch, fake)

    result = runner.invoke(
        commands.app,
        ["query", "create stuff set name = $n; select * from nothing", "--params", '{"n": "x"}', "--config", str(tmp_path / "none.json")],
    )

    assert result.exit_code == 0, result.output
    assert "#0" in result.output and "#1" in result.output
    assert "stuff:abc" in result.output
    assert fake.frames()[0]["params"] == ["create stuff set name = $n; select * from nothing", {"n": "x"}]
    assert fake.closed


def test_query_exits_nonzero_when_a_statement_fails(monkeypatch, tmp_path):
    async def _run_query(cfg, statement, params):
        return decode_response_payload(
            {"id": "r", "result": [{"time": "0s", "status": "ERR", "result": "Parse error"}]}
        )

    monkeypatch.setattr(commands, "run_query", _run_query)
    result = runner.invoke(commands.app, ["query", "selec oops", "--config", str(tmp_path / "none.json")])

    assert result.exit_code == 1
    assert "ERR" in result.output


def test_query_reports_transport_errors(monkeypatch, tmp_path):
    async def _run_query(cfg, statement, params):
        raise TransportError("failed to connect: refused", url=cfg.url)

    monkeypatch.setattr(commands, "run_query", _run_query)
    result = runner.invoke(commands.app, ["query", "info for db", "--url", "ws://nowhere/rpc", "--config", str(tmp_path / "none.json")])

    assert result.exit_code == 1
    assert "TRANSPORT_ERROR" in result.output


def test_query_rejects_non_object_params(tmp_path):
    result = runner.invoke(commands.app, ["query", "return 1", "--params", "[1]", "--config", str(tmp_path / "none.json")])
    assert result.exit_code == 2


def test_config_masks_password(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"username": "root", "password": "hunter2"}))

    result = runner.invoke(commands.app, ["config", "--config", str(path)])

    assert result.exit_code == 0, result.output
    assert "hunter2" not in result.output
    assert "********" in result.output


def test_version_flag():
    result = runner.invoke(commands.app, ["--version"])
    assert result.exit_code == 0
    assert "surreal-rpc v" in result.output
