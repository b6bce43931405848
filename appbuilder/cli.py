"""
cli.py

Responsibility: CLI entrypoint for the AppBuilder configuration commands.

Commands:
- `setup`: full configuration of an install (runs the four commands below too)
- `ssl`, `db`, `bot`, `smtp`: configure one concern on its own

Options are gathered from `--config FILE` (YAML), then the command line; any
`--<namespace>.<key> [value]` flag is accepted and folded into the options bag.
Whatever is still missing is asked interactively (or defaulted with `--defaults`).
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Callable

from appbuilder import AppBuilderError, __version__, bot_manager, db_config, notification_email, setup, ssl_config
from appbuilder.options import coerce_value, load_options_file, merge_options, parse_option_args, scoped
from appbuilder.prompts import Prompter

logger = logging.getLogger(__name__)

Runner = Callable[..., Any]

SETUP_EPILOG = """
settings for ssl:
  --ssl.[option] : see `appbuilder ssl --help` for the list of options

settings for bot_manager:
  --bot.botEnable [true,false] : enable the #Slack bot
  --bot.botToken [token]       : the #Slack bot API token (or set SLACK_BOT_TOKEN)
  --bot.botName [name]         : the name displayed for the #Slack bot
  --bot.slackChannel [name]    : which #Slack channel to interact with
  --bot.hosttcpport [port#]    : (on Mac OS) host port for the command processor

settings for the db:
  --db.password [password]

settings for notification_email:
  --smtp.smtpEnabled, --smtp.smtpHost, --smtp.smtpTLS, --smtp.smtpPort,
  --smtp.smtpAuth, --smtp.smtpAuthUser, --smtp.smtpAuthPass

examples:

  $ appbuilder setup --port 8080 --tag master
      - edits docker-compose.yml to listen on port 8080
      - edits docker-compose.yml to use :master containers
      - asks questions for the remaining configuration options
"""

SSL_EPILOG = """
options:
  --none                          : do not use SSL
  --self [--domain D] [--days N]  : create a self-signed certificate
  --pathKey K --pathCert C        : use an existing key/certificate
"""


def _bool_arg(value: str) -> bool:
    coerced = coerce_value(value)
    if not isinstance(coerced, bool):
        raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")
    return coerced


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--root", default=".", help="Install directory to configure (default: current directory)")
    p.add_argument("--config", default=None, help="YAML file with option values")
    p.add_argument("--defaults", action="store_true", help="Do not ask; accept the default for every question")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="appbuilder", description="AppBuilder install configuration")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser(
        "setup",
        help="setup the running configuration for an AppBuilder install",
        epilog=SETUP_EPILOG,
        allow_abbrev=False,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_common(s)
    s.add_argument("--port", type=int, default=None, help="port AppBuilder listens on")
    s.add_argument("--stack", default=None, help='Docker Stack reference ("ab" by default)')
    s.add_argument("--tag", default=None, help="Docker tag of the containers to use: master or develop")
    s.add_argument("--exposeDB", type=_bool_arg, nargs="?", const=True, default=None, help="expose the DB port")
    s.add_argument("--portDB", type=int, default=None, help="port the exposed DB listens on")
    s.set_defaults(runner=setup.run, namespace=None)

    commands: list[tuple[str, str, Runner, str]] = [
        ("ssl", "configure SSL", ssl_config.run, SSL_EPILOG),
        ("db", "configure the DB credentials", db_config.run, ""),
        ("bot", "configure the bot_manager service", bot_manager.run, ""),
        ("smtp", "configure notification email", notification_email.run, ""),
    ]
    for name, help_text, runner, epilog in commands:
        c = sub.add_parser(
            name,
            help=help_text,
            epilog=epilog,
            allow_abbrev=False,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        _add_common(c)
        c.set_defaults(runner=runner, namespace=name)

    return p


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s" if not verbose else "%(levelname)s %(name)s: %(message)s",
    )


def _gather_options(args: argparse.Namespace, extras: list[str]) -> dict[str, Any]:
    file_options = load_options_file(args.config) if args.config else {}
    known = {
        key: getattr(args, key, None)
        for key in ("port", "stack", "tag", "exposeDB", "portDB")
    }
    options = merge_options(file_options, known, parse_option_args(extras))

    if args.namespace is None:
        return options
    # standalone command: accept both `--self` and `--ssl.self`
    flat = {k: v for k, v in options.items() if "." not in k and not isinstance(v, dict)}
    return merge_options(flat, scoped(options, args.namespace))


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args, extras = parser.parse_known_args(argv)
    _configure_logging(bool(args.verbose))

    try:
        options = _gather_options(args, extras)
        prompter = Prompter(use_defaults=bool(args.defaults))
        args.runner(options, root=Path(args.root), prompter=prompter)
    except AppBuilderError as e:
        logger.error("%s failed: %s", args.command, e)
        return 1

    logger.info("%s complete.", args.command)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
