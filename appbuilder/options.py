"""
options.py

Responsibility: Build the flat options bag a command runs with.

Options are dot-namespaced (`ssl.self`, `bot.botToken`, `smtp.smtpHost`).
They can come from:
- command-line flags: `--port 8080`, `--bot.botToken=xoxb-..`, `--ssl.self`
- a YAML options file, using either nested mappings or dotted keys

Command-line values are coerced conservatively: `true`/`false` become bools,
plain decimal integers become ints, everything else stays the string typed.
Secrets (`password`, `botToken`, `smtpAuthPass`) are never coerced.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from appbuilder import AppBuilderError


class OptionsError(AppBuilderError):
    pass


_INT = re.compile(r"-?(0|[1-9]\d*)")

# typed by the operator and stored verbatim
TEXT_KEYS = frozenset({"password", "botToken", "smtpAuthPass"})


def coerce_value(raw: str) -> Any:
    """
    Coerce a raw command-line string.

    Only `true`/`false` (any case) and plain decimal integers are converted;
    `0123`, `1:20` or `yes` come back exactly as typed.
    """
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT.fullmatch(raw.strip()):
        return int(raw)
    return raw


def _option_value(key: str, raw: str) -> Any:
    if key.rsplit(".", 1)[-1] in TEXT_KEYS:
        return raw
    return coerce_value(raw)


def parse_option_args(args: Iterable[str]) -> dict[str, Any]:
    """
    Fold `--key value`, `--key=value` and bare `--flag` tokens into a dict.

    A flag directly followed by another flag (or by nothing) is `True`.
    """
    tokens = list(args)
    out: dict[str, Any] = {}
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if not token.startswith("--") or token == "--":
            raise OptionsError(f"Unexpected argument: {token}")
        key = token[2:]
        if "=" in key:
            key, raw = key.split("=", 1)
            if not key:
                raise OptionsError(f"Malformed option: {token}")
            out[key] = _option_value(key, raw)
            i += 1
            continue
        if not key:
            raise OptionsError(f"Malformed option: {token}")
        if i + 1 < len(tokens) and not tokens[i + 1].startswith("--"):
            out[key] = _option_value(key, tokens[i + 1])
            i += 2
        else:
            out[key] = True
            i += 1
    return out


def load_options_file(path: str | Path) -> dict[str, Any]:
    """Load a YAML options file. The top level must be a mapping."""
    p = Path(path)
    if not p.exists():
        raise OptionsError(f"Options file does not exist: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise OptionsError(f"Options file is not valid YAML: {p}") from e
    if not isinstance(data, dict):
        raise OptionsError("Options file must be a mapping/object at the top level.")
    return {str(k): v for k, v in data.items()}


def merge_options(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge option layers left to right; later layers win, `None` values are ignored."""
    out: dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is None:
                continue
            out[key] = value
    return out


def scoped(
    options: Mapping[str, Any],
    namespace: str,
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Return the options of one namespace, with the prefix stripped.

    Order of precedence (last wins): `defaults`, a nested mapping stored under
    `namespace`, then `namespace.<key>` entries.
    """
    out: dict[str, Any] = dict(defaults or {})
    nested = options.get(namespace)
    if isinstance(nested, Mapping):
        out.update(nested)
    prefix = f"{namespace}."
    for key, value in options.items():
        if key.startswith(prefix) and len(key) > len(prefix):
            out[key[len(prefix) :]] = value
    return out


def nest(options: Mapping[str, Any]) -> dict[str, Any]:
    """
    Expose dotted keys as nested mappings too, for template contexts.

    `{"bot.botName": "ab"}` becomes `{"bot.botName": "ab", "bot": {"botName": "ab"}}`.
    """
    out: dict[str, Any] = {}
    for key, value in options.items():
        out[key] = dict(value) if isinstance(value, Mapping) else value
    for key, value in options.items():
        if "." not in key:
            continue
        head, rest = key.split(".", 1)
        bucket = out.get(head)
        if not isinstance(bucket, dict):
            bucket = {}
            out[head] = bucket
        bucket[rest] = value
    return out


def as_bool(value: Any) -> bool:
    """Interpret an option value as a flag (`"false"`, `"no"`, `0` and `""` are False)."""
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "n", "off")
    return bool(value)
