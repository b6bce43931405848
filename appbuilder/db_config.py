"""
db_config.py

Responsibility: the `db` command.

Collects the MariaDB credentials and writes them to `.env`, where the
generated compose files pick them up.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path
from typing import Any, Mapping

from appbuilder import AppBuilderError
from appbuilder.local_config import update_env_file
from appbuilder.prompts import Prompter, Question, required_validator

logger = logging.getLogger(__name__)

DEFAULT_USER = "root"
DEFAULT_DATABASE = "appbuilder"


class DBConfigError(AppBuilderError):
    pass


def questions(options: Mapping[str, Any]) -> list[Question]:
    return [
        Question(
            name="password",
            message="What password do you want for the DB root user:",
            default=secrets.token_urlsafe(16),
            validate=required_validator,
            when=lambda _a: not options.get("password"),
        ),
    ]


def run(options: Mapping[str, Any], *, root: str | Path, prompter: Prompter) -> dict[str, Any]:
    opts = dict(options)
    opts.update(prompter.ask(questions(opts)))

    password = str(opts.get("password") or "").strip()
    if not password:
        raise DBConfigError("A DB password is required.")

    values = {
        "MYSQL_USER": str(opts.get("user") or DEFAULT_USER),
        "MYSQL_PASSWORD": password,
        "MYSQL_DATABASE": str(opts.get("database") or DEFAULT_DATABASE),
    }
    update_env_file(root, values)
    logger.info("    DB: credentials written for user %s", values["MYSQL_USER"])
    return values
