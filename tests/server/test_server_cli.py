from __future__ import annotations

from ai_quiz.server import cli


def test_serve_uses_config_and_flags(tmp_path, capsys, monkeypatch):
    calls = {}

    def fake_run(app, *, host, port):
        calls["app"] = app
        calls["host"] = host
        calls["port"] = port

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    monkeypatch.setenv("OLLAMA_MODEL", "phi3")

    code = cli.main(["--workspace", str(tmp_path / "ws"), "--port", "9001"])

    assert code == 0
    assert calls["host"] == "127.0.0.1"
    assert calls["port"] == 9001
    assert calls["app"].state.client.model == "phi3"
    out = capsys.readouterr().out
    assert "http://127.0.0.1:9001" in out
    assert (tmp_path / "ws" / "logs" / "server.log").exists()


def test_serve_bad_config_exits_1(tmp_path, capsys):
    code = cli.main(
        [
            "--workspace",
            str(tmp_path / "ws"),
            "--config",
            str(tmp_path / "missing.toml"),
        ]
    )
    assert code == 1
    assert "Config file not found" in capsys.readouterr().err
