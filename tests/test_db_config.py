from __future__ import annotations

from pathlib import Path

from appbuilder import db_config
from appbuilder.local_config import read_env_file


def test_password_from_options(install_root: Path, defaults_prompter) -> None:
    values = db_config.run({"password": "s3cret"}, root=install_root, prompter=defaults_prompter)

    assert values == {"MYSQL_USER": "root", "MYSQL_PASSWORD": "s3cret", "MYSQL_DATABASE": "appbuilder"}
    assert read_env_file(install_root) == values


def test_generated_default_password(install_root: Path, defaults_prompter) -> None:
    values = db_config.run({}, root=install_root, prompter=defaults_prompter)
    assert len(values["MYSQL_PASSWORD"]) >= 16


def test_password_is_asked(install_root: Path, scripted) -> None:
    prompter = scripted("typed-pw")
    values = db_config.run({"user": "ab", "database": "site"}, root=install_root, prompter=prompter)
    assert values == {"MYSQL_USER": "ab", "MYSQL_PASSWORD": "typed-pw", "MYSQL_DATABASE": "site"}
