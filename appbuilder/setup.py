"""
setup.py

Responsibility: the `setup` command.

Creates the running configuration of an AppBuilder install. Steps run strictly
in order and the first failure aborts the run:

1) Collect options (passed options first, then questions for what is missing)
2) Remove the previously generated compose files
3) Render the `source.*` compose templates into the generated files
4) Copy the support scripts into the install root
5) Patch the support scripts with the Docker Stack name
6) Delegate to the `ssl`, `db`, `bot` and `smtp` commands
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Callable, Mapping

from appbuilder import AppBuilderError, bot_manager, db_config, notification_email, ssl_config
from appbuilder.options import as_bool, nest, scoped
from appbuilder.prompts import Prompter, Question, choice_validator, confirm_validator, port_validator
from appbuilder.renderer import FilePatch, patch_files, render_file, render_template_dir

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

# source file : generated file
GENERATED_FILES: Mapping[str, str] = {
    "source.dbinit-compose.yml": "dbinit-compose.yml",
    "source.docker-compose.yml": "docker-compose.yml",
    "source.docker-compose.dev.yml": "docker-compose.dev.yml",
}

DOCKER_TAGS = ("master", "develop")
DEFAULT_STACK = "ab"
HIDDEN_DB_PORT = "8889"

NON_EXPOSE_DB_TAG = re.compile(r"image:\s*mariadb\s*\n\s*ports:\s*\n\s*-")
NON_EXPOSE_DB_REPLACE = "image: mariadb\n    # ports:\n    #   -"


class SetupError(AppBuilderError):
    pass


Step = Callable[[dict[str, Any], Path, Prompter], None]


def _filter_tag(value: Any) -> Any:
    return "master" if value in (None, "") else value


def questions(options: Mapping[str, Any]) -> list[Question]:
    return [
        Question(
            name="stack",
            message="What Docker Stack reference do you want this install to use:",
            default=DEFAULT_STACK,
            when=lambda a: not a.get("stack") and not options.get("stack"),
        ),
        Question(
            name="port",
            message="What port do you want AppBuilder to listen on:",
            default=80,
            validate=port_validator,
            when=lambda a: not a.get("port") and not options.get("port"),
        ),
        Question(
            name="exposeDB",
            kind="confirm",
            message="Do you want to expose the DB:",
            default=False,
            validate=confirm_validator,
            when=lambda a: "exposeDB" not in a and options.get("exposeDB") is None,
        ),
        Question(
            name="portDB",
            message="What port do you want the DB to listen on:",
            default=3306,
            validate=port_validator,
            when=lambda a: as_bool(a.get("exposeDB", options.get("exposeDB")))
            and not a.get("portDB")
            and not options.get("portDB"),
        ),
        Question(
            name="tag",
            message="Which Docker Tags to use [master, develop]:",
            default="master",
            filter=_filter_tag,
            validate=choice_validator(DOCKER_TAGS),
            when=lambda a: not a.get("tag") and not options.get("tag"),
        ),
    ]


def collect_options(options: dict[str, Any], root: Path, prompter: Prompter) -> None:
    tag = options.get("tag")
    if tag and str(tag).lower() not in DOCKER_TAGS:
        raise SetupError(f'Unknown Docker tag {tag!r}: use "master" or "develop"')

    options.update(prompter.ask(questions(options)))

    options["tag"] = str(options["tag"]).lower()
    options["exposeDB"] = as_bool(options.get("exposeDB"))
    # portDB needs a value before the compose files are rendered
    if not options["exposeDB"]:
        options["portDB"] = HIDDEN_DB_PORT


def remove_generated_files(options: dict[str, Any], root: Path, prompter: Prompter) -> None:
    for name in GENERATED_FILES.values():
        path = root / name
        try:
            path.unlink()
            logger.debug("removed %s", path)
        except FileNotFoundError:
            continue


def _source_path(root: Path, name: str) -> Path:
    local = root / name
    if local.is_file():
        return local
    return TEMPLATES_DIR / "compose" / name


def generate_files(options: dict[str, Any], root: Path, prompter: Prompter) -> None:
    context = nest(options)
    for source, generated in GENERATED_FILES.items():
        contents = render_file(_source_path(root, source), context)
        if not options.get("exposeDB"):
            contents = NON_EXPOSE_DB_TAG.sub(NON_EXPOSE_DB_REPLACE, contents, count=1)
        (root / generated).write_text(contents, encoding="utf-8")
        logger.info("    %s => %s", source, generated)


def copy_template_files(options: dict[str, Any], root: Path, prompter: Prompter) -> None:
    result = render_template_dir(template_dir=TEMPLATES_DIR / "setup", destination_dir=root, context={})
    logger.debug("setup templates: %s rendered, %s copied", result.rendered_files, result.copied_files)


def stack_patches(root: Path, stack: str) -> list[FilePatch]:
    """The support scripts that reference the Docker Stack, and how to rewrite them."""
    space = re.compile(r" ab")
    underscore = re.compile(r"ab_")
    return [
        FilePatch(root / "package.json", space, f" {stack}", f"    Docker Stack: package.json => {stack}"),
        FilePatch(root / "cli.sh", underscore, f"{stack}_", f"    Docker Stack: cli.sh => {stack}"),
        FilePatch(root / "Down.sh", space, f" {stack}", f"    Docker Stack: Down.sh => {stack}"),
        FilePatch(root / "logs.js", underscore, f"{stack}_", f"    Docker Stack: logs.js => {stack}"),
        FilePatch(root / "UP.sh", space, f" {stack}", f"    Docker Stack: UP.sh => {stack}"),
    ]


def patch_docker_stack(options: dict[str, Any], root: Path, prompter: Prompter) -> None:
    stack = str(options.get("stack") or DEFAULT_STACK)
    patch_files(stack_patches(root, stack))


def setup_ssl(options: dict[str, Any], root: Path, prompter: Prompter) -> None:
    ssl_config.run(scoped(options, "ssl"), root=root, prompter=prompter)


def setup_db(options: dict[str, Any], root: Path, prompter: Prompter) -> None:
    db_config.run(scoped(options, "db"), root=root, prompter=prompter)


def setup_bot_manager(options: dict[str, Any], root: Path, prompter: Prompter) -> None:
    defaults = {"dhEnable": False, "dhPort": 14000, "dockerTag": options.get("tag")}
    bot_manager.run(scoped(options, "bot", defaults), root=root, prompter=prompter)


def setup_notification_email(options: dict[str, Any], root: Path, prompter: Prompter) -> None:
    notification_email.run(scoped(options, "smtp"), root=root, prompter=prompter)


STEPS: tuple[Step, ...] = (
    collect_options,
    remove_generated_files,
    generate_files,
    copy_template_files,
    patch_docker_stack,
    setup_ssl,
    setup_db,
    setup_bot_manager,
    setup_notification_email,
)


def run(options: Mapping[str, Any] | None = None, *, root: str | Path = ".", prompter: Prompter | None = None) -> dict[str, Any]:
    """
    Run every setup step in order. Returns the final options bag.
    """
    running: dict[str, Any] = dict(options or {})
    root_path = Path(root).resolve()
    if not root_path.is_dir():
        raise SetupError(f"Install directory not found: {root_path}")
    prompter = prompter or Prompter()

    for step in STEPS:
        logger.debug("setup step: %s", step.__name__)
        step(running, root_path, prompter)

    return running
