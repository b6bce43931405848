"""
ssl_config.py

Responsibility: the `ssl` command.

Three ways to configure SSL for the install:
- `--ssl.none`: no SSL
- `--ssl.self`: create a self-signed key/certificate with `openssl`
- `--ssl.pathKey K --ssl.pathCert C`: copy an existing key/certificate

The key and certificate always end up in `<root>/ssl/` and the choice is
recorded in the `ssl` section of `config/local.yml`.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any, Mapping

from appbuilder import AppBuilderError
from appbuilder.local_config import update_section
from appbuilder.options import as_bool
from appbuilder.prompts import Prompter, Question, choice_validator, required_validator

logger = logging.getLogger(__name__)

SSL_DIR = "ssl"
KEY_NAME = "app.key"
CERT_NAME = "app.crt"
MODES = ("none", "self", "exists")


class SSLConfigError(AppBuilderError):
    pass


def _run(cmd: list[str], *, cwd: Path) -> None:
    """
    Run a subprocess command, raising SSLConfigError on failure.
    """
    try:
        subprocess.run(cmd, cwd=str(cwd), check=True, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
    except FileNotFoundError as e:
        raise SSLConfigError(f"Command not found: {cmd[0]}") from e
    except subprocess.CalledProcessError as e:
        raise SSLConfigError(f"Command failed: {' '.join(cmd)}\n\n{e.stdout}") from e


def resolve_mode(options: Mapping[str, Any]) -> str | None:
    mode = str(options.get("mode") or "").lower()
    if mode:
        if mode not in MODES:
            raise SSLConfigError(f"Unknown SSL mode {mode!r}, expected one of: {', '.join(MODES)}")
        return mode
    if as_bool(options.get("none")):
        return "none"
    if as_bool(options.get("self")):
        return "self"
    if options.get("pathKey") or options.get("pathCert"):
        return "exists"
    return None


def questions(options: Mapping[str, Any]) -> list[Question]:
    known = resolve_mode(options)
    return [
        Question(
            name="mode",
            kind="choice",
            message="How do you want to configure SSL:",
            choices=MODES,
            default="none",
            validate=choice_validator(MODES),
            when=lambda _a: known is None,
        ),
        Question(
            name="pathKey",
            message="Path to the SSL key file:",
            validate=required_validator,
            when=lambda a: (a.get("mode") or known) == "exists" and not options.get("pathKey"),
        ),
        Question(
            name="pathCert",
            message="Path to the SSL certificate file:",
            validate=required_validator,
            when=lambda a: (a.get("mode") or known) == "exists" and not options.get("pathCert"),
        ),
    ]


def _create_self_signed(ssl_dir: Path, common_name: str, days: int) -> tuple[Path, Path]:
    key = ssl_dir / KEY_NAME
    cert = ssl_dir / CERT_NAME
    _run(
        [
            "openssl",
            "req",
            "-x509",
            "-nodes",
            "-newkey",
            "rsa:2048",
            "-days",
            str(days),
            "-keyout",
            str(key),
            "-out",
            str(cert),
            "-subj",
            f"/CN={common_name}",
        ],
        cwd=ssl_dir,
    )
    return key, cert


def _copy_existing(ssl_dir: Path, path_key: str, path_cert: str) -> tuple[Path, Path]:
    src_key = Path(path_key).expanduser()
    src_cert = Path(path_cert).expanduser()
    for src in (src_key, src_cert):
        if not src.is_file():
            raise SSLConfigError(f"SSL file not found: {src}")
    key = ssl_dir / KEY_NAME
    cert = ssl_dir / CERT_NAME
    shutil.copyfile(src_key, key)
    shutil.copyfile(src_cert, cert)
    key.chmod(0o600)
    return key, cert


def run(options: Mapping[str, Any], *, root: str | Path, prompter: Prompter) -> dict[str, Any]:
    root_path = Path(root)
    opts = dict(options)
    opts.update(prompter.ask(questions(opts)))
    mode = resolve_mode(opts) or "none"

    ssl_dir = root_path / SSL_DIR
    section: dict[str, Any] = {"enable": mode != "none", "self": mode == "self", "pathKey": "", "pathCert": ""}

    if mode == "self":
        ssl_dir.mkdir(parents=True, exist_ok=True)
        key, cert = _create_self_signed(ssl_dir, str(opts.get("domain") or "localhost"), int(opts.get("days") or 365))
        logger.info("    SSL: self-signed certificate created in %s", ssl_dir)
    elif mode == "exists":
        ssl_dir.mkdir(parents=True, exist_ok=True)
        key, cert = _copy_existing(ssl_dir, str(opts.get("pathKey")), str(opts.get("pathCert")))
        logger.info("    SSL: copied %s and %s", opts.get("pathKey"), opts.get("pathCert"))
    else:
        key = cert = None
        logger.info("    SSL: disabled")

    if key is not None and cert is not None:
        section["pathKey"] = str(Path(SSL_DIR) / key.name)
        section["pathCert"] = str(Path(SSL_DIR) / cert.name)

    update_section(root_path, "ssl", section)
    return section
