"""
local_config.py

Responsibility: Persist command results inside the install root.

- `config/local.yml`: one top-level section per command (`ssl`, `bot_manager`,
  `notification_email`). Writing a section replaces only that section.
- `.env`: `KEY=value` lines consumed by docker-compose, read and written with
  python-dotenv. Updating keys keeps every other line (comments included).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import dotenv_values, set_key

from appbuilder import AppBuilderError

logger = logging.getLogger(__name__)

LOCAL_CONFIG = Path("config") / "local.yml"
ENV_FILE = Path(".env")


class LocalConfigError(AppBuilderError):
    pass


def load_local_config(root: str | Path) -> dict[str, Any]:
    path = Path(root) / LOCAL_CONFIG
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise LocalConfigError(f"Local config is not valid YAML: {path}") from e
    if not isinstance(data, dict):
        raise LocalConfigError(f"Local config must be a mapping at the top level: {path}")
    return data


def update_section(root: str | Path, section: str, values: Mapping[str, Any]) -> Path:
    """
    Replace `section` in `config/local.yml` with `values`; other sections are kept.
    """
    data = load_local_config(root)
    data[section] = dict(values)

    path = Path(root) / LOCAL_CONFIG
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=True, default_flow_style=False), encoding="utf-8")
    logger.info("    config/local.yml: [%s] updated", section)
    return path


def read_env_file(root: str | Path) -> dict[str, str]:
    path = Path(root) / ENV_FILE
    if not path.exists():
        return {}
    values = dotenv_values(path, interpolate=False, encoding="utf-8")
    return {k: v for k, v in values.items() if v is not None}


def update_env_file(root: str | Path, values: Mapping[str, Any]) -> Path:
    """
    Set `values` in `.env`. Existing keys are rewritten in place, new keys appended.

    Values that are not plain alphanumerics are written quoted, so a ` #`,
    quotes, spaces or newlines reach docker compose intact.
    """
    path = Path(root) / ENV_FILE
    path.touch(exist_ok=True)
    for key, value in values.items():
        set_key(path, key, "" if value is None else str(value), quote_mode="auto", encoding="utf-8")
    logger.info("    .env: %s", ", ".join(sorted(values)))
    return path
