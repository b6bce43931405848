"""
renderer.py

Responsibility: Produce files in the install root from templates.

Rules:
- Walk template files in sorted order to ensure deterministic output.
- For UTF-8 text files, if Jinja2 markers are present, render with the provided context.
- Everything else is copied byte-for-byte.
- Regex patches rewrite already-written files in place.

This module intentionally does NOT know about prompts, options, or commands.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

from jinja2 import Environment, StrictUndefined

from appbuilder import AppBuilderError

logger = logging.getLogger(__name__)


class RenderError(AppBuilderError):
    pass


class PatchError(AppBuilderError):
    pass


@dataclass(frozen=True)
class RenderResult:
    rendered_files: int
    copied_files: int


@dataclass(frozen=True)
class FilePatch:
    """Replace every match of `tag` in `file` with `replace`."""

    file: Path
    tag: re.Pattern[str]
    replace: str
    log: str = ""


def _environment() -> Environment:
    return Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def _has_markers(text: str) -> bool:
    return ("{{" in text) or ("{%" in text) or ("{#" in text)


def _is_binary_file(path: Path) -> bool:
    """
    Best-effort: treat a file as binary if it cannot be decoded as UTF-8.
    """
    try:
        path.read_text(encoding="utf-8")
        return False
    except UnicodeDecodeError:
        return True


def _iter_template_files(template_dir: Path) -> list[Path]:
    files: list[Path] = []
    for root, _dirs, filenames in os.walk(template_dir):
        root_path = Path(root)
        for name in filenames:
            if name.endswith(".pyc"):
                continue
            files.append(root_path / name)
    files.sort(key=lambda p: str(p.relative_to(template_dir)).replace(os.sep, "/"))
    return files


def _make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def render_file(source: str | Path, context: Mapping[str, Any]) -> str:
    """
    Render a single template file and return its text.
    """
    src = Path(source)
    if not src.is_file():
        raise RenderError(f"Template file not found: {src}")
    text = src.read_text(encoding="utf-8")
    if not _has_markers(text):
        return text
    try:
        return _environment().from_string(text).render(dict(context))
    except Exception as e:  # noqa: BLE001 - surface as RenderError
        raise RenderError(f"Failed rendering template file: {src.name}: {e}") from e


def render_template_dir(
    *,
    template_dir: str | Path,
    destination_dir: str | Path,
    context: Mapping[str, Any],
) -> RenderResult:
    """
    Render/copy a template directory into destination_dir.

    - Creates destination directories as needed.
    - Copies file permissions from template files; `.sh` outputs are always executable.
    """
    tpl_dir = Path(template_dir).resolve()
    dst_dir = Path(destination_dir).resolve()

    if not tpl_dir.exists() or not tpl_dir.is_dir():
        raise RenderError(f"Template directory not found: {tpl_dir}")

    env = _environment()
    rendered = 0
    copied = 0

    for src_path in _iter_template_files(tpl_dir):
        rel = src_path.relative_to(tpl_dir)
        dst_path = dst_dir / rel
        dst_path.parent.mkdir(parents=True, exist_ok=True)

        text = None if _is_binary_file(src_path) else src_path.read_text(encoding="utf-8")
        if text is not None and _has_markers(text):
            try:
                out = env.from_string(text).render(dict(context))
            except Exception as e:  # noqa: BLE001 - surface as RenderError
                raise RenderError(f"Failed rendering template file: {rel}") from e
            dst_path.write_text(out, encoding="utf-8", newline="\n")
            shutil.copystat(src_path, dst_path)
            rendered += 1
        else:
            shutil.copy2(src_path, dst_path)
            copied += 1

        if dst_path.suffix == ".sh":
            _make_executable(dst_path)
        logger.debug("template %s -> %s", rel, dst_path)

    return RenderResult(rendered_files=rendered, copied_files=copied)


def patch_files(patches: Iterable[FilePatch]) -> int:
    """
    Apply regex patches in order. Returns the number of files rewritten.

    Missing files are skipped with a warning.
    """
    written = 0
    for patch in patches:
        path = Path(patch.file)
        if not path.is_file():
            logger.warning("patch skipped, file not found: %s", path)
            continue
        try:
            text = path.read_text(encoding="utf-8")
            patched = patch.tag.sub(lambda _m: patch.replace, text)
            if patched != text:
                path.write_text(patched, encoding="utf-8")
                written += 1
        except OSError as e:
            raise PatchError(f"Failed patching {path}: {e}") from e
        if patch.log:
            logger.info(patch.log)
    return written
