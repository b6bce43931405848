"""
bot_manager.py

Responsibility: the `bot` command.

Configures the bot_manager service: the optional #Slack bot, the Docker Hub
webhook listener and (on Mac OS) the host TCP port of the command processor.
The result is written to the `bot_manager` section of `config/local.yml`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

from appbuilder import AppBuilderError
from appbuilder.local_config import update_section
from appbuilder.options import as_bool
from appbuilder.prompts import Prompter, Question, confirm_validator, port_validator, required_validator
from appbuilder.slack_client import SlackClient

logger = logging.getLogger(__name__)

DEFAULTS: dict[str, Any] = {
    "dhEnable": False,
    "dhPort": 14000,
    "dockerTag": "master",
}


class BotManagerError(AppBuilderError):
    pass


def questions(options: Mapping[str, Any]) -> list[Question]:
    def enabled(answers: Mapping[str, Any]) -> bool:
        return as_bool(answers.get("botEnable", options.get("botEnable")))

    return [
        Question(
            name="botEnable",
            kind="confirm",
            message="Do you want to enable the #Slack bot:",
            default=False,
            validate=confirm_validator,
            when=lambda _a: "botEnable" not in options,
        ),
        Question(
            name="botToken",
            kind="password",
            message="What is the #Slack bot API token:",
            validate=required_validator,
            when=lambda a: enabled(a) and not options.get("botToken"),
        ),
        Question(
            name="botName",
            message="What name should the #Slack bot display:",
            default="ab_bot",
            when=lambda a: enabled(a) and not options.get("botName"),
        ),
        Question(
            name="slackChannel",
            message="Which #Slack channel should the bot interact with:",
            default="general",
            when=lambda a: enabled(a) and not options.get("slackChannel"),
        ),
    ]


def run(options: Mapping[str, Any], *, root: str | Path, prompter: Prompter) -> dict[str, Any]:
    opts: dict[str, Any] = dict(DEFAULTS)
    opts.update(options)
    if not opts.get("botToken") and os.environ.get("SLACK_BOT_TOKEN"):
        opts["botToken"] = os.environ["SLACK_BOT_TOKEN"]
    opts.update(prompter.ask(questions(opts)))

    enable = as_bool(opts.get("botEnable"))
    if enable and not opts.get("botToken"):
        raise BotManagerError("A #Slack bot token is required when the bot is enabled.")

    if enable and as_bool(opts.get("verify", True)):
        identity = SlackClient(str(opts["botToken"])).auth_test()
        logger.info("    Bot: token verified for %s in team %s", identity.user, identity.team)

    hosttcpport = opts.get("hosttcpport")
    if hosttcpport not in (None, "") and port_validator(hosttcpport) is not True:
        raise BotManagerError(f"Invalid host TCP port: {hosttcpport}")
    if port_validator(opts.get("dhPort")) is not True:
        raise BotManagerError(f"Invalid Docker Hub port: {opts.get('dhPort')}")

    section: dict[str, Any] = {
        "enable": enable,
        "dockerTag": str(opts.get("dockerTag") or DEFAULTS["dockerTag"]),
        "slackBot": {
            "enable": enable,
            "botToken": str(opts.get("botToken") or "") if enable else "",
            "botName": str(opts.get("botName") or "") if enable else "",
            "channel": str(opts.get("slackChannel") or "") if enable else "",
        },
        "dockerHub": {
            "enable": as_bool(opts.get("dhEnable")),
            "port": int(opts.get("dhPort")),
        },
        "hostTCPPort": int(hosttcpport) if hosttcpport not in (None, "") else None,
    }
    update_section(root, "bot_manager", section)
    logger.info("    Bot: #Slack bot %s", "enabled" if enable else "disabled")
    return section
