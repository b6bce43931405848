from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from appbuilder import cli
from appbuilder.local_config import load_local_config, read_env_file


def test_setup_command(install_root: Path, monkeypatch) -> None:
    monkeypatch.delenv("SLACK_BOT_TOKEN", raising=False)
    code = cli.main(
        [
            "setup",
            "--root",
            str(install_root),
            "--defaults",
            "--port",
            "8080",
            "--stack",
            "prod",
            "--exposeDB",
            "false",
            "--db.password",
            "pw",
            "--smtp.smtpEnabled=false",
        ]
    )

    assert code == 0
    assert '"8080:80"' in (install_root / "docker-compose.yml").read_text(encoding="utf-8")
    assert "prod" in (install_root / "UP.sh").read_text(encoding="utf-8")
    assert read_env_file(install_root)["MYSQL_PASSWORD"] == "pw"


def test_setup_with_options_file(install_root: Path, tmp_path: Path) -> None:
    opts = tmp_path / "opts.yml"
    opts.write_text("tag: develop\ndb:\n  password: from-file\nbot:\n  botEnable: false\n", encoding="utf-8")

    code = cli.main(["setup", "--root", str(install_root), "--defaults", "--config", str(opts)])

    assert code == 0
    assert read_env_file(install_root)["MYSQL_PASSWORD"] == "from-file"
    assert load_local_config(install_root)["bot_manager"]["dockerTag"] == "develop"


def test_standalone_command_accepts_both_forms(install_root: Path) -> None:
    assert cli.main(["ssl", "--root", str(install_root), "--none"]) == 0
    assert load_local_config(install_root)["ssl"]["enable"] is False

    assert cli.main(["db", "--root", str(install_root), "--db.password", "pw2", "--user", "ab"]) == 0
    assert read_env_file(install_root)["MYSQL_USER"] == "ab"
    assert read_env_file(install_root)["MYSQL_PASSWORD"] == "pw2"


def test_errors_return_status_1(install_root: Path, caplog) -> None:
    code = cli.main(["setup", "--root", str(install_root), "--defaults", "--tag", "latest"])
    assert code == 1
    assert "setup failed" in caplog.text


def test_bad_extra_argument_returns_status_1(install_root: Path) -> None:
    assert cli.main(["smtp", "--root", str(install_root), "--defaults", "stray"]) == 1


def test_db_password_is_stored_as_typed(install_root: Path) -> None:
    assert cli.main(["db", "--root", str(install_root), "--db.password", "0123"]) == 0
    assert read_env_file(install_root)["MYSQL_PASSWORD"] == "0123"

    assert cli.main(["db", "--root", str(install_root), "--password=1:20"]) == 0
    assert read_env_file(install_root)["MYSQL_PASSWORD"] == "1:20"


def test_bot_name_yes_stays_text(install_root: Path, monkeypatch) -> None:
    monkeypatch.delenv("SLACK_BOT_TOKEN", raising=False)
    code = cli.main(
        [
            "bot",
            "--root",
            str(install_root),
            "--defaults",
            "--botEnable",
            "true",
            "--botToken",
            "0123",
            "--botName",
            "yes",
            "--verify",
            "false",
        ]
    )

    assert code == 0
    slack_bot = load_local_config(install_root)["bot_manager"]["slackBot"]
    assert slack_bot["botName"] == "yes"
    assert slack_bot["botToken"] == "0123"


def test_expose_db_flag_only_takes_true_or_false() -> None:
    assert cli._bool_arg("False") is False
    assert cli._bool_arg("true") is True
    with pytest.raises(argparse.ArgumentTypeError):
        cli._bool_arg("yes")
