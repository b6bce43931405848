"""
notification_email.py

Responsibility: the `smtp` command.

Configures the SMTP relay the notification_email service sends through and
writes it to the `notification_email` section of `config/local.yml`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from appbuilder import AppBuilderError
from appbuilder.local_config import update_section
from appbuilder.options import as_bool
from appbuilder.prompts import Prompter, Question, confirm_validator, port_validator, required_validator

logger = logging.getLogger(__name__)


class NotificationEmailError(AppBuilderError):
    pass


def default_port(tls: bool) -> int:
    return 465 if tls else 25


def questions(options: Mapping[str, Any]) -> list[Question]:
    def pick(answers: Mapping[str, Any], key: str) -> Any:
        return answers.get(key, options.get(key))

    return [
        Question(
            name="smtpEnabled",
            kind="confirm",
            message="Do you want to send email notifications:",
            default=False,
            validate=confirm_validator,
            when=lambda _a: "smtpEnabled" not in options,
        ),
        Question(
            name="smtpHost",
            message="What is the SMTP host:",
            validate=required_validator,
            when=lambda a: as_bool(pick(a, "smtpEnabled")) and not options.get("smtpHost"),
        ),
        Question(
            name="smtpTLS",
            kind="confirm",
            message="Does the SMTP host use TLS:",
            default=False,
            validate=confirm_validator,
            when=lambda a: as_bool(pick(a, "smtpEnabled")) and "smtpTLS" not in options,
        ),
        Question(
            name="smtpPort",
            message="What is the SMTP port:",
            default=lambda a: default_port(as_bool(pick(a, "smtpTLS"))),
            validate=port_validator,
            when=lambda a: as_bool(pick(a, "smtpEnabled")) and not options.get("smtpPort"),
        ),
        Question(
            name="smtpAuth",
            kind="confirm",
            message="Does the SMTP host require authentication:",
            default=False,
            validate=confirm_validator,
            when=lambda a: as_bool(pick(a, "smtpEnabled")) and "smtpAuth" not in options,
        ),
        Question(
            name="smtpAuthUser",
            message="SMTP user name:",
            validate=required_validator,
            when=lambda a: as_bool(pick(a, "smtpEnabled"))
            and as_bool(pick(a, "smtpAuth"))
            and not options.get("smtpAuthUser"),
        ),
        Question(
            name="smtpAuthPass",
            kind="password",
            message="SMTP password:",
            validate=required_validator,
            when=lambda a: as_bool(pick(a, "smtpEnabled"))
            and as_bool(pick(a, "smtpAuth"))
            and not options.get("smtpAuthPass"),
        ),
    ]


def run(options: Mapping[str, Any], *, root: str | Path, prompter: Prompter) -> dict[str, Any]:
    opts = dict(options)
    opts.update(prompter.ask(questions(opts)))

    enable = as_bool(opts.get("smtpEnabled"))
    if not enable:
        section: dict[str, Any] = {"enable": False}
        update_section(root, "notification_email", section)
        logger.info("    Email: notifications disabled")
        return section

    host = str(opts.get("smtpHost") or "").strip()
    if not host:
        raise NotificationEmailError("An SMTP host is required when notifications are enabled.")

    tls = as_bool(opts.get("smtpTLS"))
    port = opts.get("smtpPort") or default_port(tls)
    if port_validator(port) is not True:
        raise NotificationEmailError(f"Invalid SMTP port: {port}")

    auth = as_bool(opts.get("smtpAuth"))
    if auth and not (opts.get("smtpAuthUser") and opts.get("smtpAuthPass")):
        raise NotificationEmailError("SMTP authentication needs both a user and a password.")

    section = {
        "enable": True,
        "smtp": {
            "host": host,
            "port": int(port),
            "secure": tls,
            "auth": {
                "user": str(opts.get("smtpAuthUser")),
                "pass": str(opts.get("smtpAuthPass")),
            }
            if auth
            else None,
        },
    }
    update_section(root, "notification_email", section)
    logger.info("    Email: notifications via %s:%s", host, port)
    return section
