from __future__ import annotations

from ai_quiz.core.config import CONFIG_FILENAME
from ai_quiz.workspace import cli


def test_init_creates_workspace_and_config(tmp_path, capsys, monkeypatch):
    target = tmp_path / "workspace"
    monkeypatch.setenv("AI_QUIZ_DATA_HOME", str(target))

    code = cli.main([])

    captured = capsys.readouterr()
    assert code == 0
    assert "Workspace ready" in captured.out
    assert (target / "quizzes").is_dir()
    assert (target / "config" / CONFIG_FILENAME).is_file()
    assert "(written)" in captured.out


def test_init_keeps_existing_config(tmp_path, capsys):
    target = tmp_path / "custom"
    config_path = target / "config" / CONFIG_FILENAME
    config_path.parent.mkdir(parents=True)
    config_path.write_text("# mine\n", encoding="utf-8")

    code = cli.main(["--path", str(target)])

    assert code == 0
    assert config_path.read_text(encoding="utf-8") == "# mine\n"
    assert "(exists)" in capsys.readouterr().out

    assert cli.main(["--path", str(target), "--force", "--quiet"]) == 0
    assert "[generation]" in config_path.read_text(encoding="utf-8")
    assert capsys.readouterr().out == ""


def test_init_reports_unusable_path(tmp_path, capsys):
    target = tmp_path / "file"
    target.write_text("x", encoding="utf-8")

    assert cli.main(["--path", str(target)]) == 1
    assert "not a directory" in capsys.readouterr().err
