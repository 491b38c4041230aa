import pytest

from ai_quiz import cli


@pytest.fixture(autouse=True)
def reset_metadata(monkeypatch):
    """Ensure metadata.version is controllable during tests."""

    def fake_version(name: str) -> str:
        assert name == "ai-quiz"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", fake_version)
    yield


def test_version_flag(capsys):
    assert cli.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == "0.0-test"


def test_version_command_handles_missing_package(monkeypatch, capsys):
    monkeypatch.setattr(
        cli.metadata,
        "version",
        lambda name: (_ for _ in ()).throw(cli.metadata.PackageNotFoundError()),
    )
    code = cli.main(["version"])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.strip() == "unknown"


def test_no_args_prints_usage_and_returns_error(capsys):
    code = cli.main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "Usage: ai-quiz" in captured.out
    assert "Available commands:" in captured.out


def test_list_outputs_command_table(capsys):
    code = cli.main(["list"])
    out = capsys.readouterr().out
    assert code == 0
    for name in ("init", "serve", "play", "generate", "saved"):
        assert name in out
    assert "(TUI)" in out


def test_help_known_and_unknown_command(capsys):
    assert cli.main(["help", "serve"]) == 0
    assert "Run `ai-quiz serve --help`" in capsys.readouterr().out

    assert cli.main(["help", "bogus"]) == 2
    assert "Unknown command 'bogus'" in capsys.readouterr().err


def test_unknown_command_returns_error(capsys):
    assert cli.main(["bogus"]) == 2
    assert "Unknown command 'bogus'" in capsys.readouterr().err


def test_dispatch_restores_argv_and_normalizes_exit(monkeypatch):
    seen = {}

    def fake_main(argv):
        import sys

        seen["argv"] = list(sys.argv)
        seen["args"] = argv
        raise SystemExit(3)

    monkeypatch.setattr(
        cli, "import_module", lambda name: type("M", (), {"main": fake_main})
    )
    assert cli.main(["init", "--quiet"]) == 3
    assert seen["argv"] == ["ai-quiz init", "--quiet"]
    assert seen["args"] == ["--quiet"]


def test_subcommand_help_exits_cleanly(capsys):
    assert cli.main(["saved", "--help"]) == 0
    assert "ai-quiz saved" in capsys.readouterr().out


def test_help_flag_and_aligned_table(capsys):
    assert cli.main(["-h"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Usage: ai-quiz <command>")
    assert "  generate  Generate one quiz and print it as JSON." in out
    assert "  init      Bootstrap the workspace" in out


def test_string_exit_code_is_reported(monkeypatch, capsys):
    def fake_main(argv):
        raise SystemExit("workspace missing")

    monkeypatch.setattr(
        cli, "import_module", lambda name: type("M", (), {"main": fake_main})
    )
    assert cli.main(["init"]) == 1
    assert "workspace missing" in capsys.readouterr().err
